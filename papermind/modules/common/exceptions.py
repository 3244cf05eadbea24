"""Domain exception classes for business logic errors."""

from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base class for all domain-specific errors.

    ``kind`` is the stable machine-readable identifier rendered to clients.
    When ``expose`` is false the message may carry internal detail, so
    ``public_message`` is shown instead and the original text is only logged.
    """

    kind: str = "domain_error"
    expose: bool = True
    public_message: str = "The request could not be completed."

    def __init__(self, message: Optional[str] = None, **context: Any) -> None:
        super().__init__(message or self.public_message)
        self.context: Dict[str, Any] = context

    @property
    def message(self) -> str:
        return str(self)

    @property
    def client_message(self) -> str:
        return self.message if self.expose else self.public_message


class ResourceNotFoundError(DomainError):
    """Raised when a requested resource cannot be found."""

    kind = "not_found"
    public_message = "The requested resource was not found."


class DocumentNotFoundError(ResourceNotFoundError):
    """Raised when a document id does not exist."""

    pass


class ReminderNotFoundError(ResourceNotFoundError):
    """Raised when a reminder id does not exist."""

    pass


class ResourceConflictError(DomainError):
    """Raised when a request conflicts with the current state of a resource."""

    kind = "conflict"
    public_message = "The request conflicts with the current state of the resource."


class InvalidStatusTransitionError(ResourceConflictError):
    """Raised when a document status change is not allowed from its current status."""

    pass


class ValidationError(DomainError):
    """Raised when data validation fails."""

    kind = "validation_error"
    public_message = "The request is invalid."


class UnauthorizedError(DomainError):
    """Raised when the caller has no valid identity."""

    kind = "unauthorized"
    public_message = "Authentication required."


class PermissionDeniedError(DomainError):
    """Raised when a user attempts an action they don't have permission for."""

    kind = "forbidden"
    public_message = "You do not have access to this resource."


class ConfigurationError(DomainError):
    """Raised when a required setting is missing or invalid."""

    kind = "configuration_error"
    expose = False
    public_message = "The service is not configured correctly."


class ProcessingError(DomainError):
    """Raised when the upload pipeline or a question cannot be completed.

    The message is written for end users; the underlying stage error is
    chained as ``__cause__``.
    """

    kind = "processing_error"
    public_message = "The document could not be processed."


class StorageError(DomainError):
    """Raised when the object store fails."""

    kind = "storage_error"
    expose = False
    public_message = "The file storage service failed."


class StorageConflictError(StorageError):
    """Raised when writing to a storage key that already holds an object."""

    kind = "storage_conflict"
    public_message = "A stored file already exists at that location."


class StorageNotFoundError(StorageError):
    """Raised when reading a storage key that holds no object."""

    kind = "storage_not_found"
    public_message = "The stored file for this document could not be found."


class ExtractionError(DomainError):
    """Raised when text cannot be extracted from a file."""

    kind = "extraction_error"
    expose = False
    public_message = "Text could not be extracted from the file."


class AnalysisError(DomainError):
    """Raised when the language model call fails or returns unusable output."""

    kind = "analysis_error"
    expose = False
    public_message = "The document analysis service failed."
