"""
Tests for application settings.
"""

import json
from dataclasses import replace

import pytest

from posnet_fiscal.encoding import TextEncoding
from posnet_fiscal.exceptions import ConfigError
from posnet_fiscal.settings import (
    Settings,
    example_settings,
    load_settings,
    save_settings,
)


def write_config(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestSettings:
    """Tests for validation and persistence."""

    def test_example_is_valid(self):
        settings = example_settings()

        settings.validate()

        assert settings.text_encoding is TextEncoding.CP1250
        assert settings.printer.address == "192.168.69.45:12345"
        assert settings.fiscal.payment_type == 8

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "config.json"

        save_settings(example_settings(), path)

        assert load_settings(path) == example_settings()

    def test_defaults_for_missing_sections(self, tmp_path):
        path = write_config(tmp_path / "config.json", {"printer": {"host": "10.0.0.1", "port": 6666}})

        settings = load_settings(path)

        assert settings.printer.timeout == 5.0
        assert settings.fiscal.vat_rate == 0
        assert settings.logging.level == "INFO"

    @pytest.mark.parametrize("printer,fiscal,encoding", [
        ({"host": "", "port": 1}, {}, "cp1250"),
        ({"host": "h", "port": 0}, {}, "cp1250"),
        ({"host": "h", "port": 70000}, {}, "cp1250"),
        ({"host": "h", "port": 1, "timeout": 0}, {}, "cp1250"),
        ({"host": "h", "port": "6666"}, {}, "cp1250"),
        ({"host": "h", "port": 1}, {"vat_rate": 7}, "cp1250"),
        ({"host": "h", "port": 1}, {"payment_type": 1}, "cp1250"),
        ({"host": "h", "port": 1}, {"shipping_chance": 101}, "cp1250"),
        ({"host": "h", "port": 1}, {"shipping_price": -1}, "cp1250"),
        ({"host": "h", "port": 1}, {}, "utf-8"),
    ])
    def test_invalid_values(self, tmp_path, printer, fiscal, encoding):
        path = write_config(
            tmp_path / "config.json",
            {"printer": printer, "fiscal": fiscal, "encoding": encoding},
        )

        with pytest.raises(ConfigError):
            load_settings(path)

    def test_unknown_key(self, tmp_path):
        path = write_config(tmp_path / "config.json", {"printer": {"hostname": "h"}})

        with pytest.raises(ConfigError):
            load_settings(path)

    def test_error_names_field(self):
        settings = example_settings()
        settings = replace(settings, fiscal=replace(settings.fiscal, vat_rate=9))

        with pytest.raises(ConfigError) as exc_info:
            settings.validate()

        assert exc_info.value.details["field"] == "fiscal.vat_rate"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_settings(tmp_path / "missing.json")

    def test_not_an_object(self, tmp_path):
        path = write_config(tmp_path / "config.json", [1, 2])

        with pytest.raises(ConfigError):
            load_settings(path)

    def test_from_dict_roundtrip(self):
        settings = example_settings()

        assert Settings.from_dict(settings.to_dict()) == settings
