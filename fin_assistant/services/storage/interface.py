"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for context storage.
This allows us to:
1. Keep flat JSON files today
2. Use in-memory storage for testing
3. Keep the analysis engine decoupled from where records live

The interface is intentionally small: a context is written once by
ingestion and read (whole) by every analysis.
"""

import re
from abc import ABC, abstractmethod
from pathlib import Path

from fin_assistant.errors import InvalidInputError, MissingRequiredParameterError


CONTEXT_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


def validate_context_name(context_name) -> str:
    """
    Check a context name is present and safe to use as a file name.
    
    Raises:
        MissingRequiredParameterError: if the name is absent or blank
        InvalidInputError: if it contains path separators or odd characters
    """
    if context_name is None or not str(context_name).strip():
        raise MissingRequiredParameterError("contextName is required.")
    
    name = str(context_name).strip()
    if name.endswith(".json"):
        name = name[: -len(".json")]
    if not CONTEXT_NAME_PATTERN.match(name) or ".." in name:
        raise InvalidInputError(
            f"Invalid context name '{context_name}'.",
            details="Use letters, digits, '_', '-' or '.' only.",
        )
    return name


class TransactionContextStore(ABC):
    """
    Abstract interface for transaction context storage.
    
    Any storage implementation must implement these methods.
    """
    
    @abstractmethod
    async def read_records(self, context_name: str) -> list[dict]:
        """
        Read every raw record of a context.
        
        Args:
            context_name: Name of the stored context
            
        Returns:
            Records in stored order
            
        Raises:
            DataNotFoundError: If the context is absent, unreadable or malformed
        """
        pass
    
    @abstractmethod
    async def write_records(self, context_name: str, records: list[dict]) -> Path:
        """
        Store records under a context name, replacing any previous content.
        
        Args:
            context_name: Name of the context
            records: Raw records (column name → value)
            
        Returns:
            Location the records were written to
            
        Raises:
            StorageError: If the location cannot be created or written
        """
        pass
    
    @abstractmethod
    async def context_exists(self, context_name: str) -> bool:
        """Check whether a context has been stored."""
        pass
    
    @abstractmethod
    async def list_contexts(self) -> list[str]:
        """List stored context names, sorted."""
        pass
