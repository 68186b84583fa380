"""
CSV Ingestion Service

Reads a transaction CSV and stores it as a JSON context for later analysis.

DESIGN DECISION: Ingestion copies values as text. Normalizing amounts and
dates is the loader's job at query time, so a bad cell is reported when
the data is used, with the record it came from.
"""

from pathlib import Path
from typing import Optional, Union

import pandas as pd
import structlog

from fin_assistant.errors import (
    DataNotFoundError,
    InvalidInputError,
    MissingRequiredParameterError,
)
from fin_assistant.models.results import IngestResult
from fin_assistant.services.storage import TransactionContextStore, validate_context_name


logger = structlog.get_logger(__name__)

EXPECTED_COLUMNS = ("Date", "Description", "Amount", "Category", "Type")


def read_transaction_csv(csv_path: Union[str, Path]) -> list[dict]:
    """
    Parse a CSV with a header row into a list of records.
    
    Every value is kept as stripped text; blank lines are skipped.
    
    Raises:
        DataNotFoundError: if the file is missing or cannot be parsed
        InvalidInputError: if an expected column is absent
    """
    path = Path(csv_path)
    if not path.is_file():
        raise DataNotFoundError(
            f"CSV file '{csv_path}' was not found.",
            details=f"Looked for {path.resolve()}",
        )
    
    try:
        df = pd.read_csv(
            path,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            skipinitialspace=True,
        )
    except pd.errors.EmptyDataError as e:
        raise DataNotFoundError(f"CSV file '{csv_path}' is empty.", details=str(e)) from e
    except (pd.errors.ParserError, UnicodeDecodeError, OSError) as e:
        raise DataNotFoundError(f"Could not parse CSV file '{csv_path}'.", details=str(e)) from e
    
    df.columns = [str(c).strip() for c in df.columns]
    missing = [col for col in EXPECTED_COLUMNS if col not in df.columns]
    if missing:
        raise InvalidInputError(
            f"CSV file '{csv_path}' is missing expected columns: {', '.join(missing)}.",
            details=f"Found columns: {', '.join(df.columns)}",
        )
    
    df = df.apply(lambda col: col.str.strip())
    # Rows that are entirely empty after trimming carry no transaction
    df = df[(df != "").any(axis=1)]
    return df.to_dict(orient="records")


class CsvIngestor:
    """Turns a CSV statement into a named transaction context."""
    
    def __init__(self, store: TransactionContextStore):
        self._store = store
    
    async def ingest(
        self,
        csv_file_path: Optional[str],
        context_name: Optional[str] = None,
    ) -> IngestResult:
        """
        Parse the CSV and store its records.
        
        Relative paths resolve against the current working directory.
        The context name defaults to the CSV file name without extension.
        """
        if csv_file_path is None or not str(csv_file_path).strip():
            raise MissingRequiredParameterError("csvFilePath is required.")
        
        csv_path = Path(str(csv_file_path).strip()).expanduser()
        resolved_name = validate_context_name(context_name or csv_path.stem)
        
        records = read_transaction_csv(csv_path)
        output_path = await self._store.write_records(resolved_name, records)
        
        logger.info(
            "csv_ingested",
            csv_file_path=str(csv_path),
            context=resolved_name,
            records=len(records),
        )
        
        return IngestResult(
            success=True,
            message=(
                f"CSV data from '{csv_file_path}' successfully processed and stored as JSON "
                f"at '{output_path}'. Context name: '{resolved_name}'."
            ),
            csv_file_path=str(csv_file_path),
            context_name=resolved_name,
            output_file_path=str(output_path),
            record_count=len(records),
        )
