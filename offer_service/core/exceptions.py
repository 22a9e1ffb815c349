# offer_service/core/exceptions.py
"""
Exception hierarchy for the offer negotiation service.
All exceptions inherit from OfferServiceError for consistent handling.
"""

from typing import List, Optional


class OfferServiceError(Exception):
    """Base exception for all offer service errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "OFFER_SERVICE_ERROR",
        details: Optional[dict] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


# ===========================================
# Lookup Exceptions
# ===========================================


class NotFoundError(OfferServiceError):
    """Referenced record does not exist."""

    def __init__(self, resource: str, resource_id: str):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(
            message=f"{resource} {resource_id} not found",
            error_code="NOT_FOUND",
            details={"resource": resource, "id": resource_id},
        )


class ForbiddenError(OfferServiceError):
    """Caller does not own the record it is acting on."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, error_code="FORBIDDEN", details=details)


# ===========================================
# State Machine Exceptions
# ===========================================


class InvalidTransitionError(OfferServiceError):
    """Attempted lifecycle change from a state that does not allow it."""

    def __init__(
        self,
        resource_id: str,
        current_status: str,
        target_status: str,
        message: Optional[str] = None,
    ):
        self.resource_id = resource_id
        self.current_status = current_status
        self.target_status = target_status
        super().__init__(
            message=message
            or f"Cannot move {resource_id} from '{current_status}' to '{target_status}'",
            error_code="INVALID_TRANSITION",
            details={
                "id": resource_id,
                "current_status": current_status,
                "target_status": target_status,
            },
        )


class OfferExpiredError(InvalidTransitionError):
    """The offer's validity window has lapsed."""

    def __init__(self, offer_id: str, target_status: str):
        super().__init__(
            resource_id=offer_id,
            current_status="expired",
            target_status=target_status,
            message=f"Offer {offer_id} has expired and can no longer be {target_status}",
        )
        self.error_code = "OFFER_EXPIRED"


# ===========================================
# Validation Exceptions
# ===========================================


class ValidationError(OfferServiceError):
    """Input validation error."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            details={"field": field} if field else {},
        )


# ===========================================
# Concurrency Exceptions
# ===========================================


class ConflictError(OfferServiceError):
    """A conditional update lost a race with another writer."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, error_code="CONFLICT", details=details)


class PartialFailureError(OfferServiceError):
    """
    The primary mutation succeeded but one or more best-effort secondary
    mutations failed. `completed` describes what was committed, `failed`
    lists the secondary operations that can be retried on their own.
    """

    def __init__(self, message: str, completed: dict, failed: List[dict]):
        self.completed = completed
        self.failed = failed
        super().__init__(
            message,
            error_code="PARTIAL_FAILURE",
            details={"completed": completed, "failed": failed},
        )


# ===========================================
# Persistence Exceptions
# ===========================================


class AdapterError(OfferServiceError):
    """
    Underlying persistence or transport failure. Whether the write landed is
    unknown, so callers decide on retries themselves.
    """

    retryable_status_unknown = True

    def __init__(self, message: str, operation: Optional[str] = None):
        self.operation = operation
        super().__init__(
            message,
            error_code="ADAPTER_ERROR",
            details={"operation": operation} if operation else {},
        )
