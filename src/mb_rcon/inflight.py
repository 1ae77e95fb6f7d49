"""In-flight request table: id allocation and multi-packet response reassembly.

Source RCON has no "last packet" flag. Every command with real id R is followed by an empty
RESPONSE_VALUE request with auxiliary id A. The server answers requests in order, so once it
answers A with COMPLETION_MARKER, every packet for R has already been received.
"""

import asyncio
import logging
from dataclasses import dataclass, field

from mb_rcon.errors import IdExhaustionError
from mb_rcon.protocol import COMPLETION_MARKER, Packet

logger = logging.getLogger(__name__)

# Request ids are issued from [MIN_REQUEST_ID, MAX_REQUEST_ID]
MIN_REQUEST_ID = 1
MAX_REQUEST_ID = 256


@dataclass(eq=False)
class PendingRequest:
    """A request sent to the server and not yet resolved."""

    id: int
    request_type: int
    future: asyncio.Future[str]
    body: str = ""
    sentinel_id: int | None = None  # auxiliary id whose marker reply completes this request

    def resolve(self) -> None:
        """Settle the future with the accumulated body, unless already settled."""
        if not self.future.done():
            self.future.set_result(self.body)

    def fail(self, exc: BaseException) -> None:
        """Settle the future with an error, unless already settled."""
        if not self.future.done():
            self.future.set_exception(exc)


@dataclass(frozen=True, eq=False)
class SentinelAck:
    """Auxiliary id entry pointing back to the request it completes."""

    id: int
    request: PendingRequest = field(repr=False)


class InflightTable:
    """Single table of outstanding requests keyed by request id.

    Holds pending requests and their sentinel entries in one mapping, so an id is either free
    or owned by exactly one entry.
    """

    def __init__(self) -> None:
        self._entries: dict[int, PendingRequest | SentinelAck] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, request_id: object) -> bool:
        return request_id in self._entries

    def get(self, request_id: int) -> PendingRequest | SentinelAck | None:
        """Return the entry for an id, or None if the id is free."""
        return self._entries.get(request_id)

    def allocate(self) -> int | None:
        """Return the smallest free id, or None if every id is outstanding."""
        for request_id in range(MIN_REQUEST_ID, MAX_REQUEST_ID + 1):
            if request_id not in self._entries:
                return request_id
        return None

    def open_request(self, request_type: int, future: asyncio.Future[str]) -> PendingRequest:
        """Register a request that completes on a direct reply (no sentinel).

        Raises:
            IdExhaustionError: No free id.

        """
        request_id = self.allocate()
        if request_id is None:
            raise IdExhaustionError
        request = PendingRequest(id=request_id, request_type=request_type, future=future)
        self._entries[request_id] = request
        return request

    def open_command(self, request_type: int, future: asyncio.Future[str]) -> PendingRequest:
        """Register a request together with its sentinel entry.

        Either both ids are registered or neither is.

        Raises:
            IdExhaustionError: Fewer than two free ids.

        """
        request = self.open_request(request_type, future)
        sentinel_id = self.allocate()
        if sentinel_id is None:
            del self._entries[request.id]
            raise IdExhaustionError
        request.sentinel_id = sentinel_id
        self._entries[sentinel_id] = SentinelAck(id=sentinel_id, request=request)
        return request

    def feed(self, packet: Packet) -> PendingRequest | None:
        """Consume a RESPONSE_VALUE packet.

        Body packets carry either the command id (what servers send) or its sentinel id, and
        are appended verbatim in arrival order. The completion marker on the sentinel id ends
        the response.

        Returns:
            The completed request, already removed from the table, when the packet is the
            completion marker for a tracked sentinel; otherwise None.

        """
        entry = self._entries.get(packet.id)
        if isinstance(entry, SentinelAck):
            if packet.body == COMPLETION_MARKER:
                self.discard(entry.request)
                return entry.request
            entry.request.body += packet.body
        elif isinstance(entry, PendingRequest) and entry.sentinel_id is not None:
            entry.body += packet.body
        else:
            logger.debug("Dropping response for untracked id %d", packet.id)
        return None

    def discard(self, request: PendingRequest) -> None:
        """Remove a request and its sentinel. No-op for entries already removed or reused."""
        if self._entries.get(request.id) is request:
            del self._entries[request.id]
        if request.sentinel_id is not None:
            sentinel = self._entries.get(request.sentinel_id)
            if isinstance(sentinel, SentinelAck) and sentinel.request is request:
                del self._entries[request.sentinel_id]

    def fail_all(self, exc: BaseException) -> None:
        """Fail every outstanding request with the given error and clear the table."""
        entries = list(self._entries.values())
        self._entries.clear()
        for entry in entries:
            if isinstance(entry, PendingRequest):
                entry.fail(exc)
