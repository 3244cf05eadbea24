"""Common constants used across the application."""

from typing import Callable, Dict, Type

from fastapi import HTTPException, status

from .exceptions import (
    AnalysisError,
    ConfigurationError,
    DomainError,
    ExtractionError,
    PermissionDeniedError,
    ProcessingError,
    ResourceConflictError,
    ResourceNotFoundError,
    StorageError,
    UnauthorizedError,
    ValidationError,
)

EXCEPTION_MAPPING: Dict[Type[DomainError], Callable[[str], HTTPException]] = {
    ValidationError: lambda message: HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message),
    UnauthorizedError: lambda message: HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED, detail=message, headers={"WWW-Authenticate": "Bearer"}
    ),
    PermissionDeniedError: lambda message: HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=message),
    ResourceNotFoundError: lambda message: HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=message),
    ResourceConflictError: lambda message: HTTPException(status_code=status.HTTP_409_CONFLICT, detail=message),
    ProcessingError: lambda message: HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message),
    StorageError: lambda message: HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message),
    ExtractionError: lambda message: HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message),
    AnalysisError: lambda message: HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message),
    ConfigurationError: lambda message: HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message
    ),
}
