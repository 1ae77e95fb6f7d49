"""Synchronous client for one-shot RCON command execution."""

import asyncio

from mb_rcon.config import RconConfig
from mb_rcon.connection import RconConnection
from mb_rcon.log import setup_logging


class RconClient:
    """Synchronous client that opens a fresh connection for every call."""

    def __init__(self, cfg: RconConfig | None = None) -> None:
        """Initialize client with configuration.

        Args:
            cfg: Connection settings (host, port, timeouts) and optional file logging.

        """
        self._cfg = cfg or RconConfig()
        setup_logging(self._cfg)

    def run(self, password: str, *commands: str) -> list[str]:
        """Authenticate, execute commands in order, disconnect, and return their outputs.

        Raises:
            RconError: Any connection, authentication, or execution failure.

        """
        return asyncio.run(self._run(password, commands))

    def execute(self, password: str, command: str) -> str:
        """Authenticate and execute a single command."""
        return self.run(password, command)[0]

    async def _run(self, password: str, commands: tuple[str, ...]) -> list[str]:
        async with RconConnection(self._cfg) as conn:
            await conn.authenticate(password)
            return [await conn.execute(command) for command in commands]
