"""Domain error taxonomy shared by every workflow."""

from enum import StrEnum


class ErrorCode(StrEnum):
    """Machine-readable failure kinds carried on failed operation results."""

    VALIDATION = "VALIDATION_ERROR"
    CONFLICT = "CONFLICT"
    NOT_FOUND = "NOT_FOUND"
    INVALID_STATE = "INVALID_STATE"
    DEPENDENCY_FAILURE = "DEPENDENCY_FAILURE"
    ACCESS_DENIED = "ACCESS_DENIED"
    INTERNAL = "INTERNAL_ERROR"


class DomainError(Exception):
    """Base exception class for all domain-specific exceptions."""

    code: ErrorCode = ErrorCode.INTERNAL

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class ValidationError(DomainError):
    """Exception raised when input has the wrong shape."""

    code = ErrorCode.VALIDATION

    def __init__(self, message: str, errors: dict[str, str] | None = None) -> None:
        self.errors = errors or {}
        super().__init__(message)


class SignatureVerificationError(ValidationError):
    """Payment gateway signature did not match."""

    def __init__(self, message: str = "Payment verification failed") -> None:
        super().__init__(message)


class ConflictError(DomainError):
    """Duplicate record, or a record already sitting in a terminal state."""

    code = ErrorCode.CONFLICT


class ResourceNotFoundError(DomainError):
    """Exception raised when a requested resource is not found."""

    code = ErrorCode.NOT_FOUND

    def __init__(self, message: str, resource_type: str | None = None, resource_id: str | None = None) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(message)

    @classmethod
    def for_resource(cls, resource_type: str, resource_id: str) -> "ResourceNotFoundError":
        return cls(f"{resource_type} with ID {resource_id} not found", resource_type, resource_id)


class StateError(DomainError):
    """Operation is not valid for the record's current status."""

    code = ErrorCode.INVALID_STATE


class DependencyFailure(DomainError):
    """A collaborator (store, identity, gateway, mail) failed or returned garbage."""

    code = ErrorCode.DEPENDENCY_FAILURE


class AccessDeniedError(DomainError):
    """Account is not allowed to perform the operation yet."""

    code = ErrorCode.ACCESS_DENIED
