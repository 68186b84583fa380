"""
Transaction Store Loader

Reads a stored context and normalizes every record into a Transaction.

DESIGN DECISION: Validation happens here, at the boundary. A record with
an unreadable amount or date stops the query with an InvalidInput error
naming the offending records. Nothing downstream ever sees NaN or an
invalid date.
"""

from typing import Optional
from uuid import UUID

from pydantic import ValidationError

from fin_assistant.audit import AuditLogger
from fin_assistant.errors import InvalidInputError
from fin_assistant.models.transaction import Transaction
from fin_assistant.services.storage import TransactionContextStore


MAX_REPORTED_ISSUES = 5


def _describe_issue(index: int, error: ValidationError) -> str:
    problems = "; ".join(
        f"{'.'.join(str(p) for p in issue['loc']) or 'record'}: {issue['msg']}"
        for issue in error.errors()
    )
    return f"record {index}: {problems}"


def normalize_records(records: list[dict]) -> list[Transaction]:
    """
    Convert raw records into Transactions, preserving order.
    
    Raises:
        InvalidInputError: listing (up to a few of) the records that failed
    """
    transactions = []
    issues = []
    
    for index, record in enumerate(records):
        try:
            transactions.append(Transaction.model_validate(record))
        except ValidationError as e:
            issues.append(_describe_issue(index, e))
    
    if issues:
        shown = issues[:MAX_REPORTED_ISSUES]
        more = len(issues) - len(shown)
        details = "\n".join(shown)
        if more:
            details += f"\n... and {more} more"
        raise InvalidInputError(
            f"{len(issues)} of {len(records)} transaction records could not be read.",
            details=details,
        )
    
    return transactions


class TransactionLoader:
    """Fetches a context from storage and returns normalized transactions."""
    
    def __init__(
        self,
        store: TransactionContextStore,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._audit_logger = audit_logger
    
    async def load(
        self,
        context_name: str,
        correlation_id: Optional[UUID] = None,
    ) -> list[Transaction]:
        """Read and normalize the whole context. Nothing is cached between calls."""
        records = await self._store.read_records(context_name)
        transactions = normalize_records(records)
        
        if self._audit_logger:
            await self._audit_logger.log_context_loaded(
                context_name=context_name,
                record_count=len(transactions),
                correlation_id=correlation_id,
            )
        
        return transactions
