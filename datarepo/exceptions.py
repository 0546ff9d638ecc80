"""Repository layer exceptions.

Provides a typed exception hierarchy for data manager and repository
operations, enabling precise error handling and better debugging.
"""

from typing import Any


class RepositoryError(Exception):
    """Base exception for all repository errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class EntityNotFoundError(RepositoryError):
    """Raised when an entity is not found in the database."""

    def __init__(
        self,
        entity_type: str,
        entity_id: Any = None,
        **lookup_params: Any,
    ) -> None:
        details: dict[str, Any] = {"entity_type": entity_type}
        if entity_id is not None:
            details["entity_id"] = str(entity_id)
        details.update(lookup_params)

        message = f"{entity_type} not found"
        if entity_id is not None:
            message = f"{entity_type} with id '{entity_id}' not found"

        super().__init__(message, details)
        self.entity_type = entity_type
        self.entity_id = entity_id


class ValidationError(RepositoryError):
    """Raised when arguments or entity state fail validation."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        errors: list[str] | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if field:
            details["field"] = field
        if errors:
            details["errors"] = errors

        super().__init__(message, details)
        self.field = field
        self.errors = errors or []


class AccessDeniedError(RepositoryError):
    """Raised when an access constraint rejects an entity operation."""

    def __init__(self, entity_type: str, operation: str) -> None:
        message = f"Operation '{operation}' is not permitted for {entity_type}"
        details = {"entity_type": entity_type, "operation": operation}
        super().__init__(message, details)
        self.entity_type = entity_type
        self.operation = operation


class MetadataError(RepositoryError):
    """Raised when an entity class or name cannot be resolved."""

    def __init__(self, message: str, entity: str | None = None) -> None:
        details: dict[str, Any] = {}
        if entity:
            details["entity"] = entity
        super().__init__(message, details)
        self.entity = entity


class QueryCreationError(RepositoryError):
    """Raised when a repository method cannot be turned into a query."""

    def __init__(self, message: str, method: str | None = None) -> None:
        details: dict[str, Any] = {}
        if method:
            details["method"] = method
        super().__init__(message, details)
        self.method = method


class TransactionError(RepositoryError):
    """Raised when a transaction operation fails."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        details: dict[str, Any] = {}
        if original_error:
            details["original_error"] = str(original_error)
            details["error_type"] = type(original_error).__name__

        super().__init__(message, details)
        self.original_error = original_error


__all__ = [
    "AccessDeniedError",
    "EntityNotFoundError",
    "MetadataError",
    "QueryCreationError",
    "RepositoryError",
    "TransactionError",
    "ValidationError",
]
