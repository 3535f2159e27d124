"""
Pytest configuration for posnet_fiscal tests.

Provides a scripted in-memory transport and common catalog fixtures.
"""

import random
from typing import Optional, Union

import pytest

from posnet_fiscal.catalog import Product, ProductCatalog, example_catalog
from posnet_fiscal.encoding import TextEncoding
from posnet_fiscal.exceptions import ReadError
from posnet_fiscal.fiscal import FiscalSession


Response = Union[bytes, Exception]


class FakeTransport:
    """
    Transport double that records payloads and replays responses.

    With ``responses=None`` every command is answered with its own name
    followed by TAB, like a device accepting everything.
    """

    def __init__(self, responses: Optional[list[Response]] = None) -> None:
        self.sent: list[bytes] = []
        self.timeouts: list[Optional[float]] = []
        self.responses = None if responses is None else list(responses)
        self.closed = False

    @property
    def commands(self) -> list[bytes]:
        """Command names of all sent payloads."""
        return [payload.split(b"\t", 1)[0] for payload in self.sent]

    async def send(self, payload: str) -> None:
        self.sent.append(payload.encode("ascii"))

    async def send_bytes(self, payload: bytes) -> None:
        self.sent.append(payload)

    async def receive(self, timeout: Optional[float] = None) -> bytes:
        self.timeouts.append(timeout)
        if self.responses is None:
            return self.commands[-1] + b"\t"
        if not self.responses:
            raise ReadError("no scripted response")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def scripted_transport():
    """Factory for transports replaying the given responses."""
    return FakeTransport


@pytest.fixture
def transport():
    """Transport accepting every command."""
    return FakeTransport()


@pytest.fixture
def session(transport):
    """Session over the accepting transport, CP1250, VAT 0, transfer."""
    return FiscalSession(
        transport,
        encoding=TextEncoding.CP1250,
        vat_rate=0,
        payment_type=8,
    )


@pytest.fixture
def catalog():
    """Fresh example catalog."""
    return example_catalog()


@pytest.fixture
def rng():
    """Seeded random source."""
    return random.Random(1234)


@pytest.fixture
def single_product_catalog():
    """Factory for a one-product catalog named Towar."""
    def make(min_price: float, max_price: float, stock: int) -> ProductCatalog:
        return ProductCatalog([Product("Towar", min_price, max_price, stock)])
    return make
