"""
Transaction analysis package.

Deterministic filtering, period resolution and aggregation over
stored transaction contexts.
"""

from fin_assistant.analysis.aggregator import aggregate, describe_aggregation, format_inr
from fin_assistant.analysis.executor import TransactionAnalyzer
from fin_assistant.analysis.filters import filter_transactions
from fin_assistant.analysis.loader import TransactionLoader, normalize_records
from fin_assistant.analysis.periods import resolve_period

__all__ = [
    "TransactionAnalyzer",
    "TransactionLoader",
    "aggregate",
    "describe_aggregation",
    "filter_transactions",
    "format_inr",
    "normalize_records",
    "resolve_period",
]
