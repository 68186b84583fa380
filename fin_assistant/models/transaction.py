"""
Transaction Data Models

These models define the strict schemas for transaction data flowing
through the analysis engine. They are designed to:
1. Normalize raw JSON/CSV values (amount strings, date strings) at the boundary
2. Reject unusable data loudly instead of propagating NaN or invalid dates
3. Stay immutable once built, so a query works on a stable snapshot

DESIGN DECISION: Stored records use the CSV column names (Date, Amount, ...).
Field aliases map them onto Python names; populate_by_name lets code and
tests use either form.
"""

import datetime as dt
import math
import re
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of money for a transaction."""
    EXPENSE = "Expense"
    INCOME = "Income"
    
    @classmethod
    def _missing_(cls, value):
        # Bank exports are inconsistent about case ("expense", "INCOME")
        if isinstance(value, str):
            wanted = value.strip().lower()
            for member in cls:
                if member.value.lower() == wanted:
                    return member
        return None


class AggregationMode(str, Enum):
    """Supported reductions over a filtered transaction set."""
    SUM = "sum"
    COUNT = "count"
    AVERAGE = "average"


# Accepted date layouts besides ISO 8601, tried in order.
# Day-first variants follow Indian bank statement conventions.
_DATE_FORMATS = ("%d-%m-%Y", "%d/%m/%Y", "%Y/%m/%d", "%d %b %Y", "%d %B %Y")

_ISO_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}")

# Characters tolerated around an amount: currency symbols, grouping, spaces
_AMOUNT_NOISE = re.compile(r"[₹$,\s]|INR|Rs\.?", re.IGNORECASE)


def parse_calendar_date(value) -> dt.date:
    """
    Parse a date value from stored data or user input.
    
    Accepts date/datetime objects, ISO strings (optionally with a time part)
    and a few day-first layouts. Raises ValueError when nothing fits.
    """
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Unparseable date: {value!r}")
    
    text = value.strip()
    if _ISO_PREFIX.match(text):
        try:
            return dt.date.fromisoformat(text[:10])
        except ValueError:
            raise ValueError(f"Unparseable date: {value!r}")
    
    for fmt in _DATE_FORMATS:
        try:
            return dt.datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"Unparseable date: {value!r}")


def parse_amount(value) -> float:
    """
    Parse a signed amount into a finite float.
    
    "₹1,200.50", " -45 " and 99 are all accepted. Empty strings, text and
    non-finite values raise ValueError - an unreadable amount is never zero.
    """
    if isinstance(value, bool):
        raise ValueError(f"Unparseable amount: {value!r}")
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        cleaned = _AMOUNT_NOISE.sub("", value)
        if not cleaned:
            raise ValueError(f"Unparseable amount: {value!r}")
        try:
            number = float(cleaned)
        except ValueError:
            raise ValueError(f"Unparseable amount: {value!r}")
    else:
        raise ValueError(f"Unparseable amount: {value!r}")
    
    if not math.isfinite(number):
        raise ValueError(f"Amount must be a finite number, got {value!r}")
    return number


# =============================================================================
# CORE TRANSACTION MODEL
# =============================================================================

class Transaction(BaseModel):
    """
    A single normalized transaction.
    
    Built by the loader from a stored record at query time and
    discarded when the query completes. Never mutated.
    """
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )
    
    date: dt.date = Field(
        ...,
        alias="Date",
        description="Calendar date of the transaction"
    )
    description: str = Field(
        default="",
        alias="Description",
        description="Free-text narration"
    )
    amount: float = Field(
        ...,
        alias="Amount",
        description="Signed amount in INR"
    )
    category: Optional[str] = Field(
        default=None,
        alias="Category",
        description="Category label, e.g. Coffee or Rent"
    )
    type: TransactionType = Field(
        ...,
        alias="Type",
        description="Expense or Income"
    )
    
    @field_validator('date', mode='before')
    @classmethod
    def parse_date(cls, v):
        return parse_calendar_date(v)
    
    @field_validator('amount', mode='before')
    @classmethod
    def parse_amount_value(cls, v):
        return parse_amount(v)
    
    @field_validator('type', mode='before')
    @classmethod
    def parse_type(cls, v):
        return TransactionType(v) if isinstance(v, str) else v
    
    @field_validator('description', mode='before')
    @classmethod
    def default_description(cls, v):
        return "" if v is None else str(v)
    
    @field_validator('category', mode='before')
    @classmethod
    def blank_category_is_missing(cls, v):
        if v is None:
            return None
        text = str(v).strip()
        return text or None


class DateRange(BaseModel):
    """Inclusive calendar window used by the date predicate."""
    model_config = ConfigDict(frozen=True)
    
    start: dt.date
    end: dt.date
    
    @model_validator(mode='after')
    def validate_order(self) -> 'DateRange':
        if self.start > self.end:
            raise ValueError("Date range start cannot be after its end")
        return self
    
    def contains(self, day: dt.date) -> bool:
        return self.start <= day <= self.end
    
    def describe(self) -> str:
        if self.start == self.end:
            return f"on {self.start.isoformat()}"
        return f"from {self.start.isoformat()} to {self.end.isoformat()}"


class TransactionFilter(BaseModel):
    """
    Predicates applied by the filter engine.
    
    Every predicate is optional; absent ones match everything.
    """
    model_config = ConfigDict(frozen=True)
    
    transaction_type: Optional[TransactionType] = None
    category: Optional[str] = None
    date_range: Optional[DateRange] = None
    
    @property
    def is_empty(self) -> bool:
        return (
            self.transaction_type is None
            and not self.category
            and self.date_range is None
        )


# =============================================================================
# QUERY MODELS
# =============================================================================

class AnalysisQuery(BaseModel):
    """
    Parameters accepted by the analysis entry point.
    
    Field aliases match the camelCase names an AI tool call sends.
    Dates stay strings here; the period resolver parses them so that
    bad dates surface as InvalidInput errors.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )
    
    context_name: Optional[str] = Field(
        default=None,
        alias="contextName",
        description="Name of the stored transaction context (required)"
    )
    category: Optional[str] = None
    time_period: Optional[str] = Field(
        default=None,
        alias="timePeriod",
        description="last week, last month, this month, this year or 'YYYY-MM-DD to YYYY-MM-DD'"
    )
    transaction_type: Optional[TransactionType] = Field(
        default=None,
        alias="transactionType"
    )
    aggregation: AggregationMode = AggregationMode.SUM
    start_date: Optional[str] = Field(default=None, alias="startDate")
    end_date: Optional[str] = Field(default=None, alias="endDate")
    
    @field_validator('category', 'time_period', 'start_date', 'end_date', mode='before')
    @classmethod
    def blank_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v
    
    @field_validator('transaction_type', mode='before')
    @classmethod
    def parse_transaction_type(cls, v):
        if isinstance(v, str):
            return TransactionType(v) if v.strip() else None
        return v
    
    @field_validator('aggregation', mode='before')
    @classmethod
    def default_aggregation(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return AggregationMode.SUM
        if isinstance(v, str):
            return v.strip().lower()
        return v


class AggregationResult(BaseModel):
    """Scalar produced by the aggregator."""
    model_config = ConfigDict(frozen=True)
    
    mode: AggregationMode
    value: float
    count: int = Field(ge=0)
    
    @property
    def label(self) -> str:
        return {
            AggregationMode.SUM: "total",
            AggregationMode.COUNT: "count",
            AggregationMode.AVERAGE: "average",
        }[self.mode]


class IngestQuery(BaseModel):
    """Parameters accepted by the CSV ingestion entry point."""
    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )
    
    csv_file_path: Optional[str] = Field(
        default=None,
        alias="csvFilePath",
        description="Path of the CSV file to ingest (required)"
    )
    context_name: Optional[str] = Field(
        default=None,
        alias="contextName",
        description="Name to store the context under; defaults to the file name"
    )
