"""
Error Kinds for the Financial Assistant

DESIGN DECISION: Components RAISE these exceptions. Only the capability
boundary (see fin_assistant.capabilities) converts them into structured
error results for the caller. This keeps the core functions honest and
the host process alive.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Categories of failure reported to callers."""
    MISSING_REQUIRED_PARAMETER = "missing_required_parameter"
    INVALID_INPUT = "invalid_input"
    DATA_NOT_FOUND = "data_not_found"
    CONFIGURATION_ERROR = "configuration_error"
    INTERNAL_ERROR = "internal_error"


class FinancialAssistantError(Exception):
    """Base exception carrying a human-readable message and optional detail."""

    kind: ErrorKind = ErrorKind.INTERNAL_ERROR

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        return self.message


class MissingRequiredParameterError(FinancialAssistantError):
    """A required parameter (context name, CSV path, income) was not supplied."""
    kind = ErrorKind.MISSING_REQUIRED_PARAMETER


class InvalidInputError(FinancialAssistantError):
    """Input is present but unusable (negative income, bad date or amount)."""
    kind = ErrorKind.INVALID_INPUT


class DataNotFoundError(FinancialAssistantError):
    """A context or CSV file is absent, unreadable or malformed."""
    kind = ErrorKind.DATA_NOT_FOUND


class ConfigurationError(FinancialAssistantError):
    """The tax slab configuration is malformed or incomplete."""
    kind = ErrorKind.CONFIGURATION_ERROR


class StorageError(FinancialAssistantError):
    """A context could not be written (unwritable or blocked directory)."""
    kind = ErrorKind.INTERNAL_ERROR
