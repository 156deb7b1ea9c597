"""Domain errors raised by movement, location and inventory services.

Services raise these inside their transaction so the whole unit of work rolls
back. Views translate them into ``{"detail", "code", ...}`` responses using the
error's ``status_code``; any keyword context passed at raise time (product ids,
target column, ...) is merged into the response body.
"""

from rest_framework import status


class MovementEngineError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "error"
    default_detail = "Unable to process the request."

    def __init__(self, detail: str | None = None, **context):
        self.detail = detail or self.default_detail
        self.context = context
        super().__init__(self.detail)

    def as_response_data(self) -> dict:
        return {"detail": self.detail, "code": self.code, **self.context}


class InsufficientStock(MovementEngineError):
    code = "insufficient_stock"
    default_detail = "Quantity exceeds available stock."


class InvalidQuantity(MovementEngineError):
    code = "invalid_quantity"
    default_detail = "Invalid quantity."


class InvalidDestination(MovementEngineError):
    code = "invalid_destination"
    default_detail = "A destination area, location or person is required."


class ValidationFailed(MovementEngineError):
    code = "validation_failed"
    default_detail = "Validation failed."


class NotFoundError(MovementEngineError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_detail = "Not found."


class ProductNotFound(NotFoundError):
    code = "product_not_found"
    default_detail = "Product not found."


class LocationNotFound(NotFoundError):
    code = "location_not_found"
    default_detail = "Location not found."


class PersonNotFound(NotFoundError):
    code = "person_not_found"
    default_detail = "Person not found."


class MovementNotFound(NotFoundError):
    code = "movement_not_found"
    default_detail = "Movement not found."


class LocationResolutionFailed(MovementEngineError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "location_resolution_failed"
    default_detail = "Unable to resolve a location for the requested area."


class ValidationRequired(MovementEngineError):
    status_code = status.HTTP_409_CONFLICT
    code = "validation_required"
    default_detail = "Validation is required before moving to this column."


class InvalidStateTransition(MovementEngineError):
    status_code = status.HTTP_409_CONFLICT
    code = "invalid_state_transition"
    default_detail = "Operation not allowed in the current state."


class AlreadyConfirmed(MovementEngineError):
    status_code = status.HTTP_409_CONFLICT
    code = "already_confirmed"
    default_detail = "Movement has already been confirmed."


class Expired(MovementEngineError):
    status_code = status.HTTP_410_GONE
    code = "expired"
    default_detail = "Movement link has expired."


class TokenExpired(Expired):
    """Raised when the token is past its expiry but the row has not been flipped yet."""

    def __init__(self, detail: str | None = None, *, pk: int, **context):
        self.pk = pk
        super().__init__(detail, **context)


# EOF
