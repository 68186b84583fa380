"""
Tests for the Financial Assistant models

Test strategy:
1. Unit tests for individual components (models, parsers)
2. Flow tests with a scripted generative model
3. No real API calls in tests
"""

import json
from datetime import date
from uuid import uuid4

import pytest
from pydantic import ValidationError

from fin_assistant.errors import ErrorKind, InvalidInputError
from fin_assistant.models import (
    AggregationMode,
    AnalysisQuery,
    AnalysisResult,
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
    DateRange,
    TaxConfiguration,
    TaxRegime,
    TaxSlab,
    ToolResult,
    Transaction,
    TransactionType,
)
from fin_assistant.models.transaction import parse_amount, parse_calendar_date


class TestTransactionModel:
    """Tests for normalizing stored records into Transactions."""
    
    def test_transaction_from_stored_record(self):
        """Test a record keyed by CSV column names."""
        tx = Transaction.model_validate({
            "Date": "2024-06-10",
            "Description": " Cafe Coffee Day ",
            "Amount": "₹1,200.50",
            "Category": "Coffee",
            "Type": "expense",
        })
        assert tx.date == date(2024, 6, 10)
        assert tx.description == "Cafe Coffee Day"
        assert tx.amount == 1200.50
        assert tx.category == "Coffee"
        assert tx.type == TransactionType.EXPENSE
    
    def test_transaction_by_field_name(self):
        tx = Transaction(date=date(2024, 1, 1), amount=10, type="Income")
        assert tx.category is None
        assert tx.description == ""
    
    def test_blank_category_is_missing(self):
        tx = Transaction(date="2024-01-01", amount=5, category="   ", type="Expense")
        assert tx.category is None
    
    def test_unreadable_amount_rejected(self):
        """An unreadable amount is never treated as zero."""
        with pytest.raises(ValidationError):
            Transaction(date="2024-01-01", amount="twelve", type="Expense")
    
    def test_empty_amount_rejected(self):
        with pytest.raises(ValidationError):
            Transaction(date="2024-01-01", amount="", type="Expense")
    
    def test_invalid_date_rejected(self):
        with pytest.raises(ValidationError):
            Transaction(date="2024-02-30", amount=1, type="Expense")
    
    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            Transaction(date="2024-01-01", amount=1, type="Transfer")
    
    def test_transaction_is_immutable(self):
        tx = Transaction(date="2024-01-01", amount=1, type="Expense")
        with pytest.raises(ValidationError):
            tx.amount = 2


class TestParsers:
    """Tests for the amount and date parsers."""
    
    @pytest.mark.parametrize("raw,expected", [
        ("100", 100.0),
        (" -45 ", -45.0),
        ("₹1,50,000", 150000.0),
        ("Rs. 250", 250.0),
        ("INR 99.5", 99.5),
        (42, 42.0),
    ])
    def test_parse_amount(self, raw, expected):
        assert parse_amount(raw) == expected
    
    @pytest.mark.parametrize("raw", ["", "abc", "nan", "inf", True, None])
    def test_parse_amount_rejects(self, raw):
        with pytest.raises(ValueError):
            parse_amount(raw)
    
    @pytest.mark.parametrize("raw", [
        "2024-06-10",
        "2024-06-10T09:30:00",
        "10-06-2024",
        "10/06/2024",
        "2024/06/10",
        "10 Jun 2024",
        "10 June 2024",
    ])
    def test_parse_calendar_date_formats(self, raw):
        assert parse_calendar_date(raw) == date(2024, 6, 10)
    
    def test_parse_calendar_date_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_calendar_date("yesterday")


class TestQueryModels:
    """Tests for tool-call argument models."""
    
    def test_analysis_query_camel_case(self):
        query = AnalysisQuery.model_validate({
            "contextName": "my_transactions",
            "timePeriod": "last week",
            "transactionType": "Expense",
            "aggregation": "COUNT",
        })
        assert query.context_name == "my_transactions"
        assert query.time_period == "last week"
        assert query.transaction_type == TransactionType.EXPENSE
        assert query.aggregation == AggregationMode.COUNT
    
    def test_analysis_query_defaults(self):
        query = AnalysisQuery(context_name="x", category="  ", aggregation="")
        assert query.category is None
        assert query.aggregation == AggregationMode.SUM
    
    def test_analysis_query_rejects_unknown_aggregation(self):
        with pytest.raises(ValidationError):
            AnalysisQuery(context_name="x", aggregation="median")
    
    def test_date_range_order(self):
        with pytest.raises(ValidationError):
            DateRange(start=date(2024, 2, 1), end=date(2024, 1, 1))
    
    def test_date_range_is_inclusive(self):
        window = DateRange(start=date(2024, 1, 1), end=date(2024, 1, 31))
        assert window.contains(date(2024, 1, 1))
        assert window.contains(date(2024, 1, 31))
        assert not window.contains(date(2024, 2, 1))


class TestTaxModels:
    """Tests for slab configuration validation."""
    
    def test_legacy_sentinel_is_open_ended(self):
        slab = TaxSlab(min_income=1500000, max_income=9007199254740991, rate=0.3, base_tax=140000)
        assert slab.max_income is None
        assert slab.is_open_ended
        assert slab.contains(10 ** 12)
    
    def test_regime_is_case_insensitive(self):
        assert TaxRegime("NEW") == TaxRegime.NEW
        assert TaxRegime(" Old ") == TaxRegime.OLD
    
    def test_rate_bounds(self):
        with pytest.raises(ValidationError):
            TaxSlab(min_income=0, max_income=10, rate=1.5)
    
    def _config(self, new_slabs):
        under = [{"min_income": 0, "max_income": None, "rate": 0.0}]
        return {
            "regimes": {
                "old": {
                    "less_than_60": under,
                    "between_60_and_80": under,
                    "above_80": under,
                },
                "new": {"all_ages": new_slabs},
            },
            "rebate_87A": {
                "old": {"max_income": 0, "max_rebate": 0},
                "new": {"max_income": 0, "max_rebate": 0},
            },
            "cess_rate": 0.04,
        }
    
    def test_gapped_table_rejected(self):
        with pytest.raises(ValidationError, match="gap"):
            TaxConfiguration.model_validate(self._config([
                {"min_income": 0, "max_income": 300000, "rate": 0.0},
                {"min_income": 400000, "max_income": None, "rate": 0.1},
            ]))
    
    def test_overlapping_table_rejected(self):
        with pytest.raises(ValidationError, match="overlap"):
            TaxConfiguration.model_validate(self._config([
                {"min_income": 0, "max_income": 300000, "rate": 0.0},
                {"min_income": 200000, "max_income": None, "rate": 0.1},
            ]))
    
    def test_open_ended_slab_must_be_last(self):
        with pytest.raises(ValidationError, match="open-ended"):
            TaxConfiguration.model_validate(self._config([
                {"min_income": 0, "max_income": None, "rate": 0.0},
                {"min_income": 300000, "max_income": None, "rate": 0.1},
            ]))
    
    def test_missing_age_table_rejected(self):
        raw = self._config([{"min_income": 0, "max_income": None, "rate": 0.0}])
        del raw["regimes"]["old"]["above_80"]
        with pytest.raises(ValidationError, match="above_80"):
            TaxConfiguration.model_validate(raw)


class TestResultModels:
    """Tests for the tool result envelope."""
    
    def test_from_error(self):
        result = ToolResult.from_error(
            InvalidInputError("bad date", details="2024-13-01"),
            prefix="Failed to analyze",
        )
        assert not result.success
        assert result.error_kind == ErrorKind.INVALID_INPUT
        assert result.message == "Failed to analyze: bad date"
        assert result.details == "2024-13-01"
    
    def test_payload_uses_camel_case(self):
        result = AnalysisResult(
            success=True,
            message="ok",
            context_name="my_transactions",
            result=150.0,
            filtered_transactions_count=2,
            total_transactions_count=6,
        )
        payload = result.to_payload()
        assert payload["contextName"] == "my_transactions"
        assert payload["filteredTransactionsCount"] == 2
        assert "errorKind" not in payload
        json.dumps(payload)


class TestAuditModels:
    """Tests for audit models."""
    
    def test_audit_event_creation(self):
        """Test AuditEvent creation."""
        event = AuditEvent(
            event_type=AuditEventType.CSV_INGESTED,
            description="CSV ingested",
        )
        assert event.event_id is not None
        assert event.timestamp is not None
        assert event.severity == AuditSeverity.INFO
    
    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        correlation_id = uuid4()
        event = AuditEventBuilder.context_loaded("my_transactions", 6, correlation_id)
        log_dict = event.to_log_dict()
        
        assert log_dict["event_type"] == "context_loaded"
        assert log_dict["severity"] == "debug"
        assert log_dict["entity_id"] == "my_transactions"
        assert log_dict["correlation_id"] == str(correlation_id)
    
    def test_tool_failed_event(self):
        event = AuditEventBuilder.tool_failed("calculate_tax", "invalid_input", "negative income")
        assert event.severity == AuditSeverity.WARNING
        assert event.error_code == "invalid_input"
        assert event.entity_type == "tool"
    
    def test_tax_event_does_not_carry_income(self):
        event = AuditEventBuilder.tax_calculated("new", "all_ages", 145600.0)
        assert "income" not in event.details
        assert event.details["tax"] == 145600.0
