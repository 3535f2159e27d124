"""
POSNET Fiscal Printer Package.

Async client for POSNET fiscal printers reachable over TCP, plus a
product selector that builds receipts matching exact amounts.

Example:
    import asyncio
    import random
    from posnet_fiscal import (
        FiscalSession, PosnetTransport, ProductSelector, Receipt, load_catalog,
    )

    async def main():
        catalog = load_catalog('data.json')
        selector = ProductSelector(catalog, random.Random())
        products = selector.select_products(19999)

        transport = await PosnetTransport.connect('192.168.69.45', 12345)
        session = FiscalSession(transport, vat_rate=0, payment_type=8)
        await session.print_receipt(Receipt.from_products(products))
        selector.commit(products)
        await session.close()

    asyncio.run(main())
"""

from .catalog import (
    Product,
    ProductCatalog,
    example_catalog,
    load_catalog,
    save_catalog,
)
from .commands import DeviceCommand
from .constants import Command, Field
from .crc import calculate_crc16
from .encoding import TextEncoding, encode_text, parse_encoding
from .exceptions import (
    AmountMismatchError,
    ChecksumDecodeError,
    ChecksumError,
    ChecksumMismatchError,
    ConfigError,
    ConnectError,
    DecompositionError,
    DeviceResponseError,
    FiscalError,
    FrameError,
    FrameTooShortError,
    MissingChecksumMarkerError,
    MissingFrameDelimiterError,
    NoCombinationFoundError,
    NonAsciiCharacterError,
    OutOfStockError,
    PosnetError,
    ProductNotFoundError,
    ReadError,
    ReceiptError,
    ReceiptTotalMismatchError,
    StockError,
    TextEncodingError,
    TransactionStateError,
    TransportError,
    UnencodableCharacterError,
    WriteError,
)
from .fiscal import FiscalSession, TransactionPhase
from .forms import NonFiscalForm
from .frame import decode_frame, encode_frame
from .runner import ReceiptRunner, RunSummary
from .selector import ProductSelector
from .settings import Settings, load_settings
from .transactions import Transaction, load_transactions
from .transport import PosnetTransport
from .value_objects import Receipt, ReceiptLine, SelectedProduct


__all__ = [
    # Protocol
    'Command',
    'Field',
    'DeviceCommand',
    'calculate_crc16',
    'encode_frame',
    'decode_frame',
    'TextEncoding',
    'encode_text',
    'parse_encoding',
    'PosnetTransport',

    # Fiscal session
    'FiscalSession',
    'TransactionPhase',
    'NonFiscalForm',
    'Receipt',
    'ReceiptLine',

    # Product selection
    'Product',
    'ProductCatalog',
    'ProductSelector',
    'SelectedProduct',
    'example_catalog',
    'load_catalog',
    'save_catalog',

    # Orchestration
    'ReceiptRunner',
    'RunSummary',
    'Settings',
    'load_settings',
    'Transaction',
    'load_transactions',

    # Exceptions
    'PosnetError',
    'ConfigError',
    'TransportError',
    'ConnectError',
    'WriteError',
    'ReadError',
    'FrameError',
    'MissingFrameDelimiterError',
    'FrameTooShortError',
    'MissingChecksumMarkerError',
    'ChecksumError',
    'ChecksumDecodeError',
    'ChecksumMismatchError',
    'TextEncodingError',
    'NonAsciiCharacterError',
    'UnencodableCharacterError',
    'FiscalError',
    'DeviceResponseError',
    'TransactionStateError',
    'ReceiptError',
    'ReceiptTotalMismatchError',
    'DecompositionError',
    'NoCombinationFoundError',
    'AmountMismatchError',
    'StockError',
    'ProductNotFoundError',
    'OutOfStockError',
]

__version__ = '1.0.0'
