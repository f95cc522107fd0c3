class BookingBackendError(RuntimeError):
    """Raised when the booking backend fails (network errors, rejected operations, bad responses)."""
    pass


class BookingNotFoundError(BookingBackendError):
    """Raised when the backend has no booking with the requested id."""
    pass
