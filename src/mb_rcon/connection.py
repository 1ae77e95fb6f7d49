"""Asyncio RCON connection: owns the socket, the read loop, and the in-flight table.

All state is mutated from one event loop (the read loop task and the calling coroutines),
so no locks are needed. Each request's frames are written with no await in between,
so concurrent callers never interleave partial writes.
"""

import asyncio
import contextlib
import logging
from types import TracebackType
from typing import Self

from mb_rcon.config import RconConfig
from mb_rcon.errors import (
    AuthRejectedError,
    AuthTimeoutError,
    MalformedPacketError,
    NotWritableError,
    PacketTooLargeError,
    RconError,
    TransportError,
)
from mb_rcon.inflight import InflightTable, PendingRequest
from mb_rcon.protocol import (
    SERVERDATA_AUTH,
    SERVERDATA_AUTH_RESPONSE,
    SERVERDATA_EXECCOMMAND,
    SERVERDATA_RESPONSE_VALUE,
    Packet,
    encode_packet,
    read_packet,
)
from mb_rcon.session import Session, SessionState

logger = logging.getLogger(__name__)


class RconConnection:
    """One Source RCON connection with pipelined command execution."""

    def __init__(self, config: RconConfig | None = None) -> None:
        """Initialize an unopened connection.

        Args:
            config: Connection settings; defaults are used when omitted.

        """
        self._config = config or RconConfig()
        self._session = Session()
        self._inflight = InflightTable()
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None
        self._read_task: asyncio.Task[None] | None = None

    @property
    def config(self) -> RconConfig:
        return self._config

    @property
    def state(self) -> SessionState:
        """Current session state."""
        return self._session.state

    @property
    def is_authenticated(self) -> bool:
        return self._session.is_authenticated

    async def __aenter__(self) -> Self:
        await self.open()
        return self

    async def __aexit__(
        self, exc_type: type[BaseException] | None, exc: BaseException | None, tb: TracebackType | None
    ) -> None:
        await self.disconnect()

    async def open(self) -> None:
        """Connect to the server and start the read loop.

        Raises:
            TransportError: Connection is closed or already open, or the server is unreachable
                within the configured timeout.

        """
        if self._session.state is SessionState.CLOSED or self._writer is not None:
            raise TransportError("Connection cannot be reopened.")
        cfg = self._config
        try:
            self._reader, self._writer = await asyncio.wait_for(
                asyncio.open_connection(cfg.host, cfg.port, local_addr=(cfg.local_address, 0)),
                timeout=cfg.timeout / 1000,
            )
        except TimeoutError as e:
            self._session.close()
            raise TransportError(f"Timed out connecting to {cfg.host}:{cfg.port}.") from e
        except OSError as e:
            self._session.close()
            raise TransportError(f"Unable to connect to {cfg.host}:{cfg.port}: {e}") from e
        logger.info("Connected to %s:%d", cfg.host, cfg.port)
        self._read_task = asyncio.create_task(self._read_loop())

    async def authenticate(self, password: str) -> None:
        """Authenticate with the RCON password.

        Raises:
            AlreadyAuthenticatedError: Already authenticated.
            AuthInProgressError: Another authenticate call is outstanding.
            NotWritableError: Connection is not open.
            IdExhaustionError: No free request id.
            PacketTooLargeError: Password frame exceeds the maximum packet size.
            AuthRejectedError: Wrong password; the connection is closed.
            AuthTimeoutError: No response within the auth timeout.
            TransportError: Connection closed before a response arrived.

        """
        self._session.begin_auth()
        writer = self._require_writable()
        future: asyncio.Future[str] = asyncio.get_running_loop().create_future()
        request = self._inflight.open_request(SERVERDATA_AUTH, future)
        self._session.auth_request = request
        try:
            writer.write(self._encode(SERVERDATA_AUTH, request.id, password))
            logger.debug("Sent auth request id=%d", request.id)
            await self._drain(writer)
            await asyncio.wait_for(future, timeout=self._config.auth_timeout / 1000)
        except TimeoutError:
            logger.warning("No auth response within %d ms", self._config.auth_timeout)
            raise AuthTimeoutError(self._config.auth_timeout) from None
        except AuthRejectedError:
            await self.disconnect()
            raise
        finally:
            self._inflight.discard(request)
            if self._session.auth_request is request:
                self._session.auth_request = None

    async def execute(self, command: str) -> str:
        """Execute a command and return its complete output.

        Raises:
            NotAuthenticatedError: Not authenticated.
            NotWritableError: Socket cannot accept writes.
            IdExhaustionError: Fewer than two free request ids.
            PacketTooLargeError: Command frame exceeds the maximum packet size; nothing is sent.
            TransportError: Connection failed or was closed before the response completed.

        """
        self._session.require_authenticated()
        writer = self._require_writable()
        future: asyncio.Future[str] = asyncio.get_running_loop().create_future()
        request = self._inflight.open_command(SERVERDATA_EXECCOMMAND, future)
        try:
            command_frame = self._encode(SERVERDATA_EXECCOMMAND, request.id, command)
            sentinel_frame = self._encode(SERVERDATA_RESPONSE_VALUE, request.sentinel_id or 0, "")
        except RconError:
            self._inflight.discard(request)
            raise
        writer.write(command_frame)
        writer.write(sentinel_frame)
        logger.debug("Sent command id=%d sentinel=%s", request.id, request.sentinel_id)
        # Once sent, both ids stay reserved until the marker or close, even if the caller stops waiting.
        await self._drain(writer)
        return await future

    async def disconnect(self) -> None:
        """Close the connection, failing every outstanding request.

        Safe to call more than once.

        Raises:
            TransportError: Socket reported an error while closing an open connection.

        """
        was_open = self._session.state is not SessionState.CLOSED
        self._close(TransportError("Connection closed."))
        task = self._read_task
        if task is not None and task is not asyncio.current_task():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        if self._writer is None:
            return
        try:
            await self._writer.wait_closed()
        except OSError as e:
            if was_open:
                raise TransportError(f"Error while closing connection: {e}") from e
            logger.debug("Ignoring close error on lost connection: %s", e)

    # --- Private helpers ---

    def _require_writable(self) -> asyncio.StreamWriter:
        """Return the writer or raise if it cannot accept data.

        Raises:
            NotWritableError: Not connected, or the socket is closing.

        """
        if self._writer is None or self._writer.is_closing():
            raise NotWritableError
        return self._writer

    def _encode(self, packet_type: int, packet_id: int, body: str) -> bytes:
        """Encode a frame and enforce the maximum packet size.

        Raises:
            MalformedPacketError: Body not representable in the configured encoding.
            PacketTooLargeError: Frame exceeds the maximum packet size.

        """
        frame = encode_packet(packet_type, packet_id, body, self._config.encoding)
        maximum = self._config.maximum_packet_size
        if maximum > 0 and len(frame) > maximum:
            raise PacketTooLargeError(len(frame), maximum)
        return frame

    async def _drain(self, writer: asyncio.StreamWriter) -> None:
        """Wait for the write buffer to flush.

        Raises:
            TransportError: Socket error or write timeout.

        """
        try:
            await asyncio.wait_for(writer.drain(), timeout=self._config.timeout / 1000)
        except TimeoutError as e:
            raise TransportError(f"Timed out writing to socket after {self._config.timeout} ms.") from e
        except OSError as e:
            raise TransportError(f"Socket error while writing: {e}") from e

    async def _read_loop(self) -> None:
        """Read and dispatch packets until the connection ends."""
        if self._reader is None:
            return
        cfg = self._config
        try:
            while self._session.state is not SessionState.CLOSED:
                packet = await read_packet(self._reader, cfg.encoding, cfg.maximum_packet_size)
                self._dispatch(packet)
        except asyncio.IncompleteReadError:
            self._on_connection_lost("Connection closed by server.")
        except MalformedPacketError as e:
            self._on_connection_lost(f"Malformed packet: {e}")
        except OSError as e:
            self._on_connection_lost(f"Socket error: {e}")
        except Exception:
            logger.exception("Error in read loop")
            self._on_connection_lost("Internal error in read loop.")

    def _dispatch(self, packet: Packet) -> None:
        """Route one inbound packet by type."""
        if packet.type == SERVERDATA_RESPONSE_VALUE:
            completed = self._inflight.feed(packet)
            if completed is not None:
                logger.debug("Command id=%d completed (%d chars)", completed.id, len(completed.body))
                completed.resolve()
        elif packet.type == SERVERDATA_AUTH_RESPONSE:
            self._on_auth_response(packet)
        else:
            logger.debug("Dropping packet id=%d of unexpected type %d", packet.id, packet.type)

    def _on_auth_response(self, packet: Packet) -> None:
        """Settle the outstanding auth request; a rejection closes the connection."""
        request: PendingRequest | None = self._session.auth_request
        if request is None and packet.id >= 0:
            logger.debug("Dropping unsolicited auth response id=%d", packet.id)
            return
        if self._session.on_auth_response(packet.id):
            logger.info("Authenticated to %s:%d", self._config.host, self._config.port)
            if request is not None:
                request.resolve()
            return
        logger.warning("Authentication rejected by %s:%d", self._config.host, self._config.port)
        if request is not None:
            request.fail(AuthRejectedError())
        self._close(TransportError("Authentication rejected."))

    def _on_connection_lost(self, reason: str) -> None:
        if self._session.state is SessionState.CLOSED:
            return
        logger.warning("Connection to %s:%d lost: %s", self._config.host, self._config.port, reason)
        self._close(TransportError(reason))

    def _close(self, exc: TransportError) -> None:
        """Mark the session closed, fail pending requests, and close the socket."""
        if self._session.state is not SessionState.CLOSED:
            logger.info("Closing connection to %s:%d", self._config.host, self._config.port)
        self._session.close()
        self._inflight.fail_all(exc)
        if self._writer is not None:
            self._writer.close()
