"""
Tax Slab Configuration Loader

The slab tables, rebate rules and cess rate live in a JSON file so a new
financial year is a data change, not a code change.

DESIGN DECISION: The whole file is validated on load (see
TaxConfiguration). A gapped or overlapping table is rejected here
rather than silently producing zero tax later.
"""

import json
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from fin_assistant.config import get_settings
from fin_assistant.errors import ConfigurationError
from fin_assistant.models.tax import TaxConfiguration


def load_tax_configuration(path: Optional[Union[str, Path]] = None) -> TaxConfiguration:
    """
    Read and validate a slab configuration file.
    
    Args:
        path: File to read; defaults to the configured (or bundled) table
        
    Raises:
        ConfigurationError: if the file is missing, not JSON, or malformed
    """
    if path is None:
        path = get_settings().app.resolved_tax_slabs_path
    path = Path(path)
    
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigurationError(
            "Tax slab configuration file was not found.",
            details=str(path),
        ) from e
    except OSError as e:
        raise ConfigurationError(
            "Tax slab configuration file could not be read.",
            details=f"{path}: {e}",
        ) from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            "Tax slab configuration file is not valid JSON.",
            details=f"{path}: {e}",
        ) from e
    
    return parse_tax_configuration(raw, source=str(path))


def parse_tax_configuration(raw: dict, source: str = "<memory>") -> TaxConfiguration:
    """Validate an already-decoded configuration mapping."""
    try:
        return TaxConfiguration.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(
            "Tax slab configuration is malformed.",
            details=f"{source}: {e}",
        ) from e
