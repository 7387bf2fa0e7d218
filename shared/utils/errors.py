"""
Custom error classes for the schedule services.

Provides structured error handling with error codes,
context information, and proper exception chaining.
"""

from typing import Optional, Dict, Any
from dataclasses import dataclass


@dataclass
class ErrorContext:
    """Error context information."""
    service: str
    operation: str
    group_id: Optional[int] = None
    event_id: Optional[int] = None
    correlation_id: Optional[str] = None
    metadata: Dict[str, Any] = None

    def __post_init__(self):
        if self.metadata is None:
            self.metadata = {}


class DataProcessingError(Exception):
    """Base exception for service errors."""

    def __init__(
        self,
        message: str,
        error_code: str,
        context: Optional[ErrorContext] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary."""
        result = {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }

        if self.context:
            result["context"] = {
                "service": self.context.service,
                "operation": self.context.operation,
                "group_id": self.context.group_id,
                "event_id": self.context.event_id,
                "correlation_id": self.context.correlation_id,
                "metadata": self.context.metadata,
            }

        return result


class ValidationError(DataProcessingError):
    """Error raised when caller input is malformed."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        context: Optional[ErrorContext] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            context=context,
            details=details or {}
        )
        self.field = field
        self.value = value

        if field:
            self.details["field"] = field
        if value is not None:
            self.details["value"] = str(value)


class NotFoundError(DataProcessingError):
    """Error raised when a single-entity lookup matches nothing."""

    def __init__(
        self,
        message: str,
        resource: Optional[str] = None,
        resource_id: Optional[Any] = None,
        context: Optional[ErrorContext] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code="NOT_FOUND",
            context=context,
            details=details or {}
        )
        self.resource = resource
        self.resource_id = resource_id

        if resource:
            self.details["resource"] = resource
        if resource_id is not None:
            self.details["resource_id"] = resource_id


class ProjectionError(DataProcessingError):
    """Error raised when a store row cannot be projected into a record."""

    def __init__(
        self,
        message: str,
        column: Optional[str] = None,
        context: Optional[ErrorContext] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code="PROJECTION_ERROR",
            context=context,
            details=details or {}
        )
        self.column = column

        if column:
            self.details["column"] = column


class StorageError(DataProcessingError):
    """Error raised when storage operations fail."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        table: Optional[str] = None,
        context: Optional[ErrorContext] = None,
        details: Optional[Dict[str, Any]] = None,
        error_code: str = "STORAGE_ERROR"
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            context=context,
            details=details or {}
        )
        self.operation = operation
        self.table = table

        if operation:
            self.details["operation"] = operation
        if table:
            self.details["table"] = table


class StoreUnavailableError(StorageError):
    """Error raised when a store round trip fails or times out."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        context: Optional[ErrorContext] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            operation=operation,
            context=context,
            details=details,
            error_code="STORE_UNAVAILABLE"
        )
        self.timeout_seconds = timeout_seconds

        if timeout_seconds is not None:
            self.details["timeout_seconds"] = timeout_seconds


class ConfigurationError(DataProcessingError):
    """Error raised when configuration is invalid."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        context: Optional[ErrorContext] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code="CONFIGURATION_ERROR",
            context=context,
            details=details or {}
        )
        self.config_key = config_key
        self.config_value = config_value

        if config_key:
            self.details["config_key"] = config_key
        if config_value is not None:
            self.details["config_value"] = str(config_value)


def create_error_context(
    service: str,
    operation: str,
    group_id: Optional[int] = None,
    event_id: Optional[int] = None,
    correlation_id: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None
) -> ErrorContext:
    """Create error context."""
    return ErrorContext(
        service=service,
        operation=operation,
        group_id=group_id,
        event_id=event_id,
        correlation_id=correlation_id,
        metadata=metadata or {}
    )
