"""
Aggregation and Summary Formatting

Reduces a filtered transaction set to one number and phrases it.

GUARANTEES:
- Pure reduction: input is never mutated or reordered
- The empty set yields 0 for every mode (no division by zero)
"""

from typing import Optional, Sequence

from fin_assistant.models.transaction import (
    AggregationMode,
    AggregationResult,
    Transaction,
    TransactionType,
)


def aggregate(
    transactions: Sequence[Transaction],
    mode: AggregationMode = AggregationMode.SUM,
) -> AggregationResult:
    """Compute sum, count or average of transaction amounts."""
    mode = AggregationMode(mode)
    count = len(transactions)
    total = sum(t.amount for t in transactions)
    
    if mode == AggregationMode.SUM:
        value = total
    elif mode == AggregationMode.COUNT:
        value = float(count)
    else:
        value = total / count if count else 0.0
    
    return AggregationResult(mode=mode, value=value, count=count)


def format_inr(value: float) -> str:
    """
    Format an amount in rupees with Indian digit grouping.
    
    >>> format_inr(150000)
    '₹1,50,000'
    >>> format_inr(-1234.5)
    '-₹1,234.50'
    """
    text = f"{abs(value):.2f}"
    whole, fraction = text.split(".")
    
    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        pairs = []
        while len(head) > 2:
            pairs.insert(0, head[-2:])
            head = head[:-2]
        if head:
            pairs.insert(0, head)
        whole = ",".join(pairs + [tail])
    
    sign = "-" if value < 0 and float(text) != 0 else ""
    suffix = "" if fraction == "00" else f".{fraction}"
    return f"{sign}₹{whole}{suffix}"


def describe_aggregation(
    result: AggregationResult,
    context_name: str,
    category: Optional[str] = None,
    transaction_type: Optional[TransactionType] = None,
    period_label: Optional[str] = None,
) -> str:
    """
    Compose the human-readable summary of an aggregation.
    
    Example: "The total Expense Coffee amount for 'my_transactions'
    for last week is ₹150."
    """
    qualifiers = " ".join(
        part for part in (
            transaction_type.value if transaction_type else None,
            category,
        ) if part
    )
    qualifiers = f"{qualifiers} " if qualifiers else ""
    scope = f"for '{context_name}'"
    if period_label:
        scope = f"{scope} {period_label}"
    
    if result.mode == AggregationMode.COUNT:
        noun = "transaction" if result.count == 1 else "transactions"
        verb = "is" if result.count == 1 else "are"
        return f"There {verb} {result.count} {qualifiers}{noun} {scope}."
    
    if result.mode == AggregationMode.AVERAGE:
        return (
            f"The {result.label} {qualifiers}amount per transaction {scope} "
            f"is {format_inr(result.value)}."
        )
    
    return f"The {result.label} {qualifiers}amount {scope} is {format_inr(result.value)}."
