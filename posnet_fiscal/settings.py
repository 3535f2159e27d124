"""
Application settings.

Provides validated configuration loaded from a JSON file.
"""

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Optional, Union

from .constants import DEFAULT_TIMEOUT_S, MAX_VAT_RATE, MIN_VAT_RATE, VALID_PAYMENT_TYPES
from .encoding import TextEncoding, parse_encoding
from .exceptions import ConfigError
from .selector import DEFAULT_SHIPPING_NAME


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Classes
# =============================================================================


@dataclass(frozen=True)
class PrinterSettings:
    """Printer connection settings."""

    host: str = ""
    port: int = 0
    timeout: float = DEFAULT_TIMEOUT_S
    log_tx: bool = False
    log_rx: bool = False

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"


@dataclass(frozen=True)
class FiscalSettings:
    """Fiscal receipt settings."""

    vat_rate: int = 0
    payment_type: int = 0  # 0 cash, 2 card, 8 transfer
    shipping_chance: int = 0  # Percent
    shipping_price: int = 0  # Minor units
    shipping_name: str = DEFAULT_SHIPPING_NAME


@dataclass(frozen=True)
class LoggingSettings:
    """Logging destinations."""

    level: str = "INFO"
    log_file: Optional[str] = None
    loki_url: Optional[str] = None


def _check_types(section: str, values: Any) -> None:
    for f in fields(values):
        value = getattr(values, f.name)
        expected = (int, float) if f.type is float else f.type
        if not isinstance(value, expected):
            raise ConfigError(
                f"{section}.{f.name} must be {f.type.__name__}, got {value!r}",
                details={"field": f"{section}.{f.name}"},
            )


# =============================================================================
# Main Settings
# =============================================================================


@dataclass(frozen=True)
class Settings:
    """
    Main application settings.

    Aggregates all configuration sections.
    """

    printer: PrinterSettings = field(default_factory=PrinterSettings)
    fiscal: FiscalSettings = field(default_factory=FiscalSettings)
    encoding: str = "cp1250"
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    @property
    def text_encoding(self) -> TextEncoding:
        """Get parsed text encoding."""
        return parse_encoding(self.encoding)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Settings":
        """
        Build settings from parsed JSON.

        Raises:
            ConfigError: Unknown keys or wrong value types.
        """
        try:
            return cls(
                printer=PrinterSettings(**data.get("printer", {})),
                fiscal=FiscalSettings(**data.get("fiscal", {})),
                encoding=data.get("encoding", "cp1250"),
                logging=LoggingSettings(**data.get("logging", {})),
            )
        except TypeError as e:
            raise ConfigError(f"invalid configuration: {e}") from e

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def validate(self) -> None:
        """
        Check value ranges.

        Raises:
            ConfigError: First invalid value found.
        """
        _check_types("printer", self.printer)
        _check_types("fiscal", self.fiscal)

        printer = self.printer
        fiscal = self.fiscal

        if not printer.host:
            raise ConfigError("missing printer host", details={"field": "printer.host"})
        if not 0 < printer.port <= 65535:
            raise ConfigError(
                f"invalid printer port: {printer.port}",
                details={"field": "printer.port"},
            )
        if printer.timeout <= 0:
            raise ConfigError(
                f"invalid printer timeout: {printer.timeout}",
                details={"field": "printer.timeout"},
            )
        if not MIN_VAT_RATE <= fiscal.vat_rate <= MAX_VAT_RATE:
            raise ConfigError(
                f"invalid VAT rate: {fiscal.vat_rate} (allowed {MIN_VAT_RATE}-{MAX_VAT_RATE})",
                details={"field": "fiscal.vat_rate"},
            )
        if fiscal.payment_type not in VALID_PAYMENT_TYPES:
            raise ConfigError(
                f"invalid payment type: {fiscal.payment_type}",
                details={"field": "fiscal.payment_type"},
            )
        if not 0 <= fiscal.shipping_chance <= 100:
            raise ConfigError(
                f"shipping chance outside 0-100%: {fiscal.shipping_chance}",
                details={"field": "fiscal.shipping_chance"},
            )
        if fiscal.shipping_price < 0:
            raise ConfigError(
                f"negative shipping price: {fiscal.shipping_price}",
                details={"field": "fiscal.shipping_price"},
            )
        if not fiscal.shipping_name:
            raise ConfigError("missing shipping name", details={"field": "fiscal.shipping_name"})

        parse_encoding(self.encoding)


# =============================================================================
# Loading and Saving
# =============================================================================


def load_settings(path: Union[str, Path]) -> Settings:
    """
    Load and validate settings from a JSON file.

    Raises:
        ConfigError: File missing, unreadable or invalid.
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"cannot read config file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid JSON in config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a JSON object")

    settings = Settings.from_dict(data)
    settings.validate()
    return settings


def save_settings(settings: Settings, path: Union[str, Path]) -> None:
    """Write settings as indented JSON."""
    text = json.dumps(settings.to_dict(), indent=2, ensure_ascii=False)
    Path(path).write_text(text + "\n", encoding="utf-8")


def example_settings() -> Settings:
    """Example configuration to edit before use."""
    return Settings(
        printer=PrinterSettings(
            host="192.168.69.45",
            port=12345,
            timeout=5,
            log_tx=False,
            log_rx=True,
        ),
        fiscal=FiscalSettings(
            vat_rate=0,  # Rate A
            payment_type=8,  # Transfer
            shipping_chance=25,
            shipping_price=1999,
        ),
        encoding="cp1250",
    )
