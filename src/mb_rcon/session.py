"""Session state machine: gates authentication and command execution."""

import enum

from mb_rcon.errors import AlreadyAuthenticatedError, AuthInProgressError, NotAuthenticatedError, TransportError
from mb_rcon.inflight import PendingRequest


class SessionState(enum.Enum):
    """Lifecycle of one RCON connection."""

    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    CLOSED = "closed"


class Session:
    """Tracks the session state and the single outstanding auth request."""

    def __init__(self) -> None:
        self._state = SessionState.UNAUTHENTICATED
        self.auth_request: PendingRequest | None = None

    @property
    def state(self) -> SessionState:
        """Current session state."""
        return self._state

    @property
    def is_authenticated(self) -> bool:
        return self._state is SessionState.AUTHENTICATED

    def begin_auth(self) -> None:
        """Check that an auth request may be sent now.

        Raises:
            AlreadyAuthenticatedError: Session is already authenticated.
            TransportError: Session is closed.
            AuthInProgressError: Another auth request is outstanding.

        """
        match self._state:
            case SessionState.AUTHENTICATED:
                raise AlreadyAuthenticatedError
            case SessionState.CLOSED:
                raise TransportError("Connection is closed.")
        if self.auth_request is not None:
            raise AuthInProgressError

    def on_auth_response(self, packet_id: int) -> bool:
        """Apply an AUTH_RESPONSE and return whether the password was accepted.

        A negative id means rejection; the state is left for the caller to close.
        """
        self.auth_request = None
        if packet_id < 0:
            return False
        if self._state is SessionState.UNAUTHENTICATED:
            self._state = SessionState.AUTHENTICATED
        return True

    def require_authenticated(self) -> None:
        """Raise unless commands may be executed.

        Raises:
            NotAuthenticatedError: Session is not authenticated.

        """
        if self._state is not SessionState.AUTHENTICATED:
            raise NotAuthenticatedError

    def close(self) -> None:
        """Move to the terminal closed state."""
        self._state = SessionState.CLOSED
        self.auth_request = None
