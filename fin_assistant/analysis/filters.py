"""
Transaction Filter Engine

Applies type, category and date predicates to a transaction sequence.

GUARANTEES:
- Original order is preserved
- The input sequence is never modified
- Predicates combine with AND; absent predicates match everything
- A transaction without a category never matches a category filter
"""

from typing import Iterable, Optional

from fin_assistant.models.transaction import (
    DateRange,
    Transaction,
    TransactionFilter,
    TransactionType,
)


def matches_type(transaction: Transaction, transaction_type: Optional[TransactionType]) -> bool:
    return transaction_type is None or transaction.type == transaction_type


def matches_category(transaction: Transaction, category: Optional[str]) -> bool:
    """Case-insensitive exact match; 'coffee' matches 'Coffee' but not 'Coffee Beans'."""
    if not category:
        return True
    if transaction.category is None:
        return False
    return transaction.category.casefold() == category.strip().casefold()


def matches_date_range(transaction: Transaction, date_range: Optional[DateRange]) -> bool:
    return date_range is None or date_range.contains(transaction.date)


def filter_transactions(
    transactions: Iterable[Transaction],
    criteria: Optional[TransactionFilter] = None,
) -> list[Transaction]:
    """Return the transactions satisfying every predicate in `criteria`."""
    if criteria is None or criteria.is_empty:
        return list(transactions)
    
    return [
        t for t in transactions
        if matches_type(t, criteria.transaction_type)
        and matches_category(t, criteria.category)
        and matches_date_range(t, criteria.date_range)
    ]
