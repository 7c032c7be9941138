"""Error taxonomy for the parking core."""


class ParkingError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ParkingError):
    """Missing or malformed input."""


class NotFoundError(ParkingError):
    """A referenced spot or session does not exist."""


class ConflictError(ParkingError):
    """The plate already has an open session."""

    status_code = 409


class NoCapacityError(ParkingError):
    """No spot is available for an incoming vehicle."""


class UpstreamError(ParkingError):
    """An image fetch or OCR call failed."""

    status_code = 502


class StoreError(UpstreamError):
    """The persistent store rejected or did not return a write."""

    status_code = 400


class PaymentError(ParkingError):
    """The payment-order issuer failed after the exit was recorded."""

    status_code = 500

    def __init__(self, message: str, quote: object | None = None) -> None:
        super().__init__(message)
        self.quote = quote
