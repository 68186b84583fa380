"""CSV ingestion package."""

from fin_assistant.services.ingest.csv_ingest import (
    EXPECTED_COLUMNS,
    CsvIngestor,
    read_transaction_csv,
)

__all__ = ["EXPECTED_COLUMNS", "CsvIngestor", "read_transaction_csv"]
