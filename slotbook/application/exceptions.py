class BookingEngineError(RuntimeError):
    """Base class for errors raised by the booking engine."""
    pass


class FormatError(BookingEngineError, ValueError):
    """Raised when a time string cannot be parsed into minutes since midnight."""
    pass


class ValidationError(BookingEngineError):
    """Raised when a pre-flight check fails before any remote call is made."""

    def __init__(self, message: str, level: str = "error") -> None:
        super().__init__(message)
        self.level = level


class TransportError(BookingEngineError):
    """Raised when the bookings backend is unreachable or answers with a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class EndpointUnsupportedError(TransportError):
    """Raised when the backend does not expose the requested endpoint (HTTP 404)."""
    pass


class ConflictError(BookingEngineError):
    """Raised when the backend rejects a booking because the time was claimed concurrently."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
