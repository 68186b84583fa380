"""
JSON File Storage Implementation

Each context is one pretty-printed JSON array at
<context_dir>/<context_name>.json.

DESIGN DECISION: No caching. Every read goes back to disk so a query
always sees the file as it is now, at the cost of repeated I/O
(acceptable for personal-sized statements).
"""

import json
from pathlib import Path
from typing import Optional, Union

import structlog

from fin_assistant.config import get_settings
from fin_assistant.errors import DataNotFoundError, StorageError
from fin_assistant.services.storage.interface import (
    TransactionContextStore,
    validate_context_name,
)


logger = structlog.get_logger(__name__)


class JsonContextStore(TransactionContextStore):
    """Filesystem-backed context storage."""
    
    def __init__(self, context_dir: Optional[Union[str, Path]] = None):
        """
        Args:
            context_dir: Directory holding context files.
                         Defaults to the configured data/context directory.
        """
        if context_dir is None:
            context_dir = get_settings().app.context_dir
        self._context_dir = Path(context_dir)
    
    @property
    def context_dir(self) -> Path:
        return self._context_dir
    
    def context_path(self, context_name: str) -> Path:
        """File path for a context name (validated)."""
        name = validate_context_name(context_name)
        return self._context_dir / f"{name}.json"
    
    async def read_records(self, context_name: str) -> list[dict]:
        path = self.context_path(context_name)
        
        if not path.is_file():
            raise DataNotFoundError(
                f"Transaction context '{context_name}' was not found.",
                details=f"Expected file at {path}",
            )
        
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise DataNotFoundError(
                f"Could not read transaction context '{context_name}'.",
                details=str(e),
            ) from e
        
        try:
            records = json.loads(content)
        except json.JSONDecodeError as e:
            raise DataNotFoundError(
                f"Transaction context '{context_name}' is not valid JSON.",
                details=f"{path}: {e}",
            ) from e
        
        if not isinstance(records, list):
            raise DataNotFoundError(
                f"Transaction context '{context_name}' must contain a JSON array.",
                details=f"{path} holds a {type(records).__name__}",
            )
        
        for index, record in enumerate(records):
            if not isinstance(record, dict):
                raise DataNotFoundError(
                    f"Transaction context '{context_name}' has a malformed record.",
                    details=f"Record {index} is a {type(record).__name__}, expected an object",
                )
        
        logger.debug("context_read", context=context_name, records=len(records))
        return records
    
    async def write_records(self, context_name: str, records: list[dict]) -> Path:
        path = self.context_path(context_name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(
                json.dumps(records, indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
        except OSError as e:
            raise StorageError(
                f"Could not write transaction context '{context_name}'.",
                details=f"{path}: {e}",
            ) from e
        logger.info("context_written", context=context_name, records=len(records), path=str(path))
        return path
    
    async def context_exists(self, context_name: str) -> bool:
        return self.context_path(context_name).is_file()
    
    async def list_contexts(self) -> list[str]:
        if not self._context_dir.is_dir():
            return []
        return sorted(path.stem for path in self._context_dir.glob("*.json"))
