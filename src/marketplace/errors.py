"""Service error taxonomy.

Every business-rule violation is raised as a ``ServiceError`` carrying a
stable code, a human message and optional structured details. The API layer
maps these to the uniform error envelope.
"""

from typing import Any


class ServiceError(Exception):
    code = "INTERNAL_SERVER_ERROR"
    http_status = 400

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationFailed(ServiceError):
    code = "VALIDATION_ERROR"


class NotAuthenticated(ServiceError):
    code = "AUTHORIZATION_ERROR"
    http_status = 401


class NotAuthorized(ServiceError):
    code = "AUTHORIZATION_ERROR"
    http_status = 403


class NotFound(ServiceError):
    code = "NOT_FOUND"


class ProductNotFound(NotFound):
    code = "PRODUCT_NOT_FOUND"


class EmptyOrder(ValidationFailed):
    code = "EMPTY_ORDER"


class IllegalStateTransition(ServiceError):
    code = "ILLEGAL_STATE_TRANSITION"

    def __init__(self, entity: str, current: str, requested: str, message: str | None = None, **details) -> None:
        super().__init__(
            message or f"Cannot move {entity} from {current} to {requested}",
            {"entity": entity, "current": current, "requested": requested, **details},
        )
        self.current = current
        self.requested = requested


class InsufficientStock(ServiceError):
    code = "INSUFFICIENT_STOCK"


class NoApplicableRule(ServiceError):
    code = "NO_APPLICABLE_RULE"


class DriverUnavailable(ServiceError):
    code = "DRIVER_UNAVAILABLE"


class ShipmentAlreadyActive(ServiceError):
    code = "SHIPMENT_ALREADY_ACTIVE"


class InvalidCoordinates(ServiceError):
    code = "INVALID_COORDINATES"


class InternalError(ServiceError):
    code = "INTERNAL_SERVER_ERROR"
    http_status = 500
