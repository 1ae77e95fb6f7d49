"""Connection configuration."""

import tomllib
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 27015

# TOML keys accepted by RconConfig.build, with the types they must have
_TOML_FIELDS: dict[str, type] = {
    "host": str,
    "port": int,
    "local_address": str,
    "maximum_packet_size": int,
    "encoding": str,
    "timeout": int,
    "auth_timeout": int,
    "log_path": str,
    "log_level": str,
}


class RconConfig(BaseModel):
    """Settings for one RCON connection."""

    model_config = ConfigDict(frozen=True)

    host: str = Field(default=DEFAULT_HOST, min_length=1, description="Server host")
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535, description="Server port")
    local_address: str = Field(default="0.0.0.0", description="Local address to bind the socket to")  # noqa: S104  # nosec B104
    maximum_packet_size: int = Field(default=4096, ge=0, description="Maximum packet size in bytes (0 = unbounded)")
    encoding: Literal["ascii", "utf8"] = Field(default="ascii", description="Packet body text encoding")
    timeout: int = Field(default=1000, ge=1, description="Socket connect/write timeout in milliseconds")
    auth_timeout: int = Field(default=5000, ge=1, description="Authentication response timeout in milliseconds")
    log_path: Path | None = Field(default=None, description="Rotating log file; None disables file logging")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO", description="Level of the package logger")

    @staticmethod
    def build(config_path: Path | None = None, **overrides: Any) -> "RconConfig":  # noqa: ANN401
        """Build a config from defaults, an optional TOML file, and explicit overrides.

        TOML values of the wrong type are ignored; explicit overrides win over the file.
        """
        kwargs: dict[str, Any] = {}
        if config_path is not None and config_path.is_file():
            with config_path.open("rb") as f:
                toml_data = tomllib.load(f)
            for key, expected in _TOML_FIELDS.items():
                value = toml_data.get(key)
                # bool is an int subclass; a TOML boolean is never a valid number here
                if isinstance(value, expected) and not isinstance(value, bool):
                    kwargs[key] = value
        kwargs.update(overrides)
        return RconConfig(**kwargs)
