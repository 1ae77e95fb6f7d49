"""Tests for RconConfig validation and TOML loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from mb_rcon.config import RconConfig


class TestConfigDefaults:
    """Explicit defaults."""

    def test_defaults(self):
        """Default values for every field."""
        cfg = RconConfig()
        assert cfg.host == "127.0.0.1"
        assert cfg.port == 27015
        assert cfg.local_address == "0.0.0.0"
        assert cfg.maximum_packet_size == 4096
        assert cfg.encoding == "ascii"
        assert cfg.timeout == 1000
        assert cfg.auth_timeout == 5000
        assert cfg.log_path is None
        assert cfg.log_level == "INFO"

    def test_frozen(self):
        """Config instances are immutable."""
        cfg = RconConfig()
        with pytest.raises(ValidationError):
            cfg.port = 1  # type: ignore[misc]


class TestConfigValidation:
    """Pydantic field constraints."""

    def test_port_out_of_range(self):
        """port > 65535 is rejected."""
        with pytest.raises(ValidationError):
            RconConfig(port=70000)

    def test_unknown_encoding(self):
        """Only ascii and utf8 are accepted."""
        with pytest.raises(ValidationError):
            RconConfig(encoding="latin1")  # type: ignore[arg-type]

    def test_negative_packet_size(self):
        """maximum_packet_size < 0 is rejected."""
        with pytest.raises(ValidationError):
            RconConfig(maximum_packet_size=-1)

    def test_zero_packet_size_allowed(self):
        """0 means unbounded."""
        assert RconConfig(maximum_packet_size=0).maximum_packet_size == 0

    def test_timeout_below_minimum(self):
        """timeout < 1 is rejected."""
        with pytest.raises(ValidationError):
            RconConfig(timeout=0)

    def test_empty_host(self):
        """Host cannot be empty."""
        with pytest.raises(ValidationError):
            RconConfig(host="")


class TestConfigBuild:
    """RconConfig.build merging."""

    def test_without_file(self):
        """No path gives defaults."""
        assert RconConfig.build() == RconConfig()

    def test_missing_file(self, tmp_path: Path):
        """Non-existent file is ignored."""
        assert RconConfig.build(tmp_path / "absent.toml") == RconConfig()

    def test_toml_values(self, tmp_path: Path):
        """Known keys are read from TOML."""
        path = tmp_path / "rcon.toml"
        path.write_text('host = "10.0.0.5"\nport = 25575\nencoding = "utf8"\nauth_timeout = 250\n')
        cfg = RconConfig.build(path)
        assert cfg.host == "10.0.0.5"
        assert cfg.port == 25575
        assert cfg.encoding == "utf8"
        assert cfg.auth_timeout == 250

    def test_wrongly_typed_values_ignored(self, tmp_path: Path):
        """Values of the wrong type fall back to defaults."""
        path = tmp_path / "rcon.toml"
        path.write_text('port = "25575"\ntimeout = true\nunknown = 1\n')
        cfg = RconConfig.build(path)
        assert cfg.port == 27015
        assert cfg.timeout == 1000

    def test_overrides_win(self, tmp_path: Path):
        """Explicit overrides take precedence over the file."""
        path = tmp_path / "rcon.toml"
        path.write_text("port = 25575\n")
        assert RconConfig.build(path, port=1234).port == 1234

    def test_invalid_toml_value_rejected(self, tmp_path: Path):
        """Well-typed but invalid values still fail validation."""
        path = tmp_path / "rcon.toml"
        path.write_text("port = 0\n")
        with pytest.raises(ValidationError):
            RconConfig.build(path)

    def test_toml_logging_keys(self, tmp_path: Path):
        """log_path is read as a Path and log_level as a level name."""
        path = tmp_path / "rcon.toml"
        path.write_text(f'log_path = "{tmp_path / "rcon.log"}"\nlog_level = "DEBUG"\n')
        cfg = RconConfig.build(path)
        assert cfg.log_path == tmp_path / "rcon.log"
        assert cfg.log_level == "DEBUG"

    def test_unknown_log_level_rejected(self):
        """Only standard level names are accepted."""
        with pytest.raises(ValidationError):
            RconConfig(log_level="TRACE")  # type: ignore[arg-type]
