"""Asyncio client for the Source RCON protocol."""

from mb_rcon.client import RconClient as RconClient
from mb_rcon.config import RconConfig as RconConfig
from mb_rcon.connection import RconConnection as RconConnection
from mb_rcon.errors import AlreadyAuthenticatedError as AlreadyAuthenticatedError
from mb_rcon.errors import AuthInProgressError as AuthInProgressError
from mb_rcon.errors import AuthRejectedError as AuthRejectedError
from mb_rcon.errors import AuthTimeoutError as AuthTimeoutError
from mb_rcon.errors import IdExhaustionError as IdExhaustionError
from mb_rcon.errors import MalformedPacketError as MalformedPacketError
from mb_rcon.errors import NotAuthenticatedError as NotAuthenticatedError
from mb_rcon.errors import NotWritableError as NotWritableError
from mb_rcon.errors import PacketTooLargeError as PacketTooLargeError
from mb_rcon.errors import RconError as RconError
from mb_rcon.errors import TransportError as TransportError
from mb_rcon.session import SessionState as SessionState
