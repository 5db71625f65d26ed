"""Custom exceptions for the HomePlan affordability engine.

This module provides a hierarchy of exception classes for consistent error
handling across the engine. All exceptions inherit from HomePlanError,
making it easy to catch all application-specific errors.

Numeric edge cases inside the solver (zero income, zero interest rate,
an iteration budget running out) are handled by branch logic and reported
on the result. The exceptions here cover problems that must stop a
calculation: malformed input at the boundary, unresolved financing terms,
bad configuration, and invalid ledger edits.

Example:
    try:
        terms = resolve_terms(store.snapshot().mortgage_options)
    except UnresolvedRateError as e:
        # Ask the user to pick an interest rate
        show_rate_picker(e.details)
    except HomePlanError as e:
        logger.error("calculation_failed", error=str(e))
"""

from typing import Any, Optional


class HomePlanError(Exception):
    """Base exception for all HomePlan errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context.
        recoverable: Whether the error is potentially recoverable.

    Example:
        >>> raise HomePlanError("Something went wrong", details={"code": 500})
        HomePlanError: Something went wrong
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        """Initialize HomePlanError.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional context about the error.
            recoverable: Whether the error can be fixed by correcting input.
                Defaults to False.
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


class InvalidInputError(HomePlanError):
    """Error raised when a financial input is malformed or out of range.

    Raised at the boundary before any value reaches the solver. The
    offending field is always reported; values are never silently
    coerced to zero.

    Attributes:
        field: The input field that failed validation.
        value: The rejected value.
        constraint: The validation constraint that was violated.

    Example:
        >>> raise InvalidInputError(
        ...     "Interest rate out of range",
        ...     field="interest_rate",
        ...     value=Decimal("27"),
        ...     constraint="0 <= interest_rate <= 20",
        ... )
        InvalidInputError: Interest rate out of range
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
        """Initialize InvalidInputError.

        Args:
            message: Human-readable error description.
            field: The name of the field that failed validation.
            value: The invalid value.
            constraint: Description of the validation rule violated.
            details: Optional dictionary with additional context.
            recoverable: Whether the error can be fixed by user correction.
                Defaults to True.
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


class UnresolvedTermsError(HomePlanError):
    """Error raised when financing terms cannot be resolved.

    A calculation never proceeds with a missing rate or term. Callers
    must surface this to the user instead of substituting a default.

    Attributes:
        group_id: The option group that could not be resolved.
        raw_value: The unparseable option value, if one was selected.
    """

    def __init__(
        self,
        message: str,
        *,
        group_id: Optional[str] = None,
        raw_value: Optional[Any] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.group_id = group_id
        self.raw_value = raw_value

        if group_id:
            self.details["group_id"] = group_id
        if raw_value is not None:
            self.details["raw_value"] = raw_value


class UnresolvedRateError(UnresolvedTermsError):
    """No active, parseable interest-rate option was found."""


class UnresolvedTermError(UnresolvedTermsError):
    """No active, parseable loan-term option was found."""


class LedgerError(HomePlanError):
    """Error raised when a ledger edit cannot be applied.

    Attributes:
        category_id: The category or option group targeted by the edit.
        item_id: The item targeted by the edit (if applicable).

    Example:
        >>> raise LedgerError(
        ...     "Unknown item",
        ...     category_id="income",
        ...     item_id="income-9",
        ... )
        LedgerError: Unknown item
    """

    def __init__(
        self,
        message: str,
        *,
        category_id: Optional[str] = None,
        item_id: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.category_id = category_id
        self.item_id = item_id

        if category_id:
            self.details["category_id"] = category_id
        if item_id:
            self.details["item_id"] = item_id


class ConfigurationError(HomePlanError):
    """Error raised when configuration is invalid or missing.

    Attributes:
        config_key: The configuration key that is problematic.
        expected: Description of the expected value or format.
        actual: The actual value found (if any).

    Example:
        >>> raise ConfigurationError(
        ...     "No reference rate configured",
        ...     config_key="HOMEPLAN_REFERENCE_RATE",
        ...     expected="Annual rate in percent, e.g. 6.85",
        ... )
        ConfigurationError: No reference rate configured
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
    "HomePlanError",
    "InvalidInputError",
    "UnresolvedTermsError",
    "UnresolvedRateError",
    "UnresolvedTermError",
    "LedgerError",
    "ConfigurationError",
]
