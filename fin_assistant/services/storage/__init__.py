"""
Storage Services Package

Provides the abstract context store and its flat JSON file implementation.
"""

from fin_assistant.services.storage.interface import (
    TransactionContextStore,
    validate_context_name,
)
from fin_assistant.services.storage.json_store import JsonContextStore

__all__ = [
    "JsonContextStore",
    "TransactionContextStore",
    "validate_context_name",
]
