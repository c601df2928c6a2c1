"""Custom exceptions for the Deep Pockets budget core.

This module provides a hierarchy of exception classes for consistent error
handling across the budget engines. All exceptions inherit from
DeepPocketsError, making it easy to catch all application-specific errors.

Ordinary outcomes are never signalled with exceptions: an unknown category id
comes back as a ``CategoryNotFound`` result, an empty diagnostic run returns an
empty list, and degenerate arithmetic is normalized to documented sentinels.

Example:
    try:
        ledger.delete_category("rent")
    except DeletionNotAllowedError as e:
        logger.warning("delete_refused", category_id=e.category_id)
    except DeepPocketsError as e:
        # Handle any Deep Pockets error
        logger.error("ledger_operation_failed", error=str(e))
"""

from typing import Any, Optional


class DeepPocketsError(Exception):
    """Base exception for all Deep Pockets errors.

    This is the root of the exception hierarchy. Catching this exception
    will catch all Deep Pockets-specific errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context.
        recoverable: Whether the error is potentially recoverable.

    Example:
        >>> raise DeepPocketsError("Something went wrong", details={"code": 500})
        DeepPocketsError: Something went wrong
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        """Initialize DeepPocketsError.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional context about the error.
            recoverable: Whether the error is potentially recoverable through
                user correction or an alternative call. Defaults to False.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        """Return string representation of the error."""
        return self.message

    def __repr__(self) -> str:
        """Return detailed representation of the error."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"recoverable={self.recoverable!r})"
        )


class ValidationError(DeepPocketsError):
    """Error raised when an input fails validation at the core boundary.

    The presentation layer is expected to hand the core clean numeric values.
    This exception covers the inputs that still arrive malformed: negative
    income or amounts, or a payoff request that names both (or neither) of
    a monthly payment and a target date.

    Attributes:
        field: The field that failed validation.
        value: The invalid value (if safe to include).
        constraint: The validation constraint that was violated.

    Example:
        >>> raise ValidationError(
        ...     "Monthly income cannot be negative",
        ...     field="income",
        ...     value=-100,
        ...     constraint="income >= 0",
        ... )
        ValidationError: Monthly income cannot be negative
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        constraint: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        """Initialize ValidationError.

        Args:
            message: Human-readable error description.
            field: The name of the field that failed validation.
            value: The invalid value.
            constraint: Description of the validation rule violated.
            details: Optional dictionary with additional context.
            recoverable: Whether the error can be fixed by user correction.
                Defaults to True since validation errors typically require
                user input correction.
        """
        super().__init__(message, details=details, recoverable=recoverable)
        self.field = field
        self.value = value
        self.constraint = constraint

        if field:
            self.details["field"] = field
        if value is not None:
            self.details["value"] = value
        if constraint:
            self.details["constraint"] = constraint


class DeletionNotAllowedError(DeepPocketsError):
    """Error raised when a protected allocation is deleted from the ledger.

    Essential-priority allocations that come from the catalog can be
    disabled but never deleted. Custom categories are always deletable.

    Attributes:
        category_id: Id of the allocation that was protected.
        priority: Priority of the protected allocation.

    Example:
        >>> raise DeletionNotAllowedError(
        ...     "Essential categories cannot be deleted",
        ...     category_id="groceries",
        ...     priority="essential",
        ... )
        DeletionNotAllowedError: Essential categories cannot be deleted
    """

    def __init__(
        self,
        message: str,
        *,
        category_id: Optional[str] = None,
        priority: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        """Initialize DeletionNotAllowedError.

        Args:
            message: Human-readable error description.
            category_id: Id of the allocation that could not be deleted.
            priority: Priority of that allocation.
            details: Optional dictionary with additional context.
            recoverable: Defaults to True; the caller can toggle the
                allocation off instead.
        """
        super().__init__(message, details=details, recoverable=recoverable)
        self.category_id = category_id
        self.priority = priority

        if category_id:
            self.details["category_id"] = category_id
        if priority:
            self.details["priority"] = priority


class ConfigurationError(DeepPocketsError):
    """Error raised when configuration is invalid or missing.

    This exception is raised when a category catalog or a rule set is
    malformed, for example a catalog holding two categories with the
    same id. Configuration errors are not recoverable at runtime.

    Attributes:
        config_key: The configuration key that is problematic.
        expected: Description of the expected value or format.
        actual: The actual value found (if any).

    Example:
        >>> raise ConfigurationError(
        ...     "Duplicate category id in catalog",
        ...     config_key="catalog",
        ...     expected="unique category ids",
        ...     actual="rent",
        ... )
        ConfigurationError: Duplicate category id in catalog
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: Optional[str] = None,
        expected: Optional[str] = None,
        actual: Optional[Any] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        """Initialize ConfigurationError.

        Args:
            message: Human-readable error description.
            config_key: The name of the configuration key that is problematic.
            expected: Description of what value was expected.
            actual: The actual value found.
            details: Optional dictionary with additional context.
            recoverable: Whether the error can be fixed at runtime.
                Defaults to False.
        """
        super().__init__(message, details=details, recoverable=recoverable)
        self.config_key = config_key
        self.expected = expected
        self.actual = actual

        if config_key:
            self.details["config_key"] = config_key
        if expected:
            self.details["expected"] = expected
        if actual is not None:
            self.details["actual"] = actual


__all__ = [
    "DeepPocketsError",
    "ValidationError",
    "DeletionNotAllowedError",
    "ConfigurationError",
]
