"""Services package."""

from fin_assistant.services.ingest import CsvIngestor, read_transaction_csv
from fin_assistant.services.storage import (
    JsonContextStore,
    TransactionContextStore,
    validate_context_name,
)

__all__ = [
    # Ingestion
    "CsvIngestor",
    "read_transaction_csv",
    # Storage
    "JsonContextStore",
    "TransactionContextStore",
    "validate_context_name",
]
