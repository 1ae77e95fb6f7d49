"""Error taxonomy for RCON client operations."""


class RconError(Exception):
    """Base error raised by RCON client operations."""

    def __init__(self, code: str, message: str) -> None:
        """Initialize with a machine-readable code and a human-readable message.

        Args:
            code: Machine-readable error code (e.g. "not_authenticated").
            message: Human-readable error description.

        """
        super().__init__(message)
        self.code = code


class MalformedPacketError(RconError):
    """A frame could not be encoded or decoded."""

    def __init__(self, message: str) -> None:
        super().__init__("malformed_packet", message)


class IdExhaustionError(RconError):
    """No request id is available for a new request."""

    def __init__(self, message: str = "No free request id available.") -> None:
        super().__init__("id_exhaustion", message)


class PacketTooLargeError(RconError):
    """Encoded request exceeds the configured maximum packet size."""

    def __init__(self, size: int, maximum: int) -> None:
        super().__init__("packet_too_large", f"Packet of {size} bytes exceeds maximum of {maximum} bytes.")
        self.size = size
        self.maximum = maximum


class AlreadyAuthenticatedError(RconError):
    def __init__(self) -> None:
        super().__init__("already_authenticated", "Already authenticated.")


class NotAuthenticatedError(RconError):
    def __init__(self) -> None:
        super().__init__("not_authenticated", "Not authenticated. Authenticate first.")


class AuthInProgressError(RconError):
    def __init__(self) -> None:
        super().__init__("auth_in_progress", "An authentication request is already outstanding.")


class AuthTimeoutError(RconError):
    def __init__(self, timeout_ms: int) -> None:
        super().__init__("auth_timeout", f"No authentication response within {timeout_ms} ms.")


class AuthRejectedError(RconError):
    def __init__(self) -> None:
        super().__init__("auth_rejected", "Server rejected the password.")


class NotWritableError(RconError):
    def __init__(self) -> None:
        super().__init__("not_writable", "Unable to write to socket.")


class TransportError(RconError):
    """Socket-level failure or connection close."""

    def __init__(self, message: str) -> None:
        super().__init__("transport", message)
