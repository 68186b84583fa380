"""
Shared fixtures for the Financial Assistant tests.

No network calls: the generative model is replaced by FakeModel,
and every context lives in a temporary directory.
"""

import json
from datetime import date
from types import SimpleNamespace

import pytest

from fin_assistant.analysis import TransactionAnalyzer, TransactionLoader
from fin_assistant.capabilities import FinancialCapabilities
from fin_assistant.config import BUNDLED_TAX_SLABS_PATH
from fin_assistant.services.ingest import CsvIngestor
from fin_assistant.services.storage import JsonContextStore
from fin_assistant.tax import TaxCalculator, load_tax_configuration


# Reference day for relative periods; "last week" is 2024-06-08..2024-06-15
TODAY = date(2024, 6, 15)


SAMPLE_RECORDS = [
    {"Date": "2024-06-10", "Description": "Cafe Coffee Day", "Amount": "100", "Category": "Coffee", "Type": "Expense"},
    {"Date": "2024-06-12", "Description": "Starbucks", "Amount": "₹50", "Category": "coffee", "Type": "expense"},
    {"Date": "2024-06-01", "Description": "June salary", "Amount": "50000", "Category": "Salary", "Type": "Income"},
    {"Date": "2024-05-20", "Description": "Blue Tokai", "Amount": 80, "Category": "Coffee", "Type": "Expense"},
    {"Date": "2024-06-14", "Description": "Groceries", "Amount": "1,200.50", "Category": "Food", "Type": "Expense"},
    {"Date": "2024-01-05", "Description": "January rent", "Amount": "15000", "Category": "Rent", "Type": "Expense"},
]


SAMPLE_CSV = """Date,Description,Amount,Category,Type
2024-06-10,Cafe Coffee Day,100,Coffee,Expense
2024-06-12, Starbucks ,50,Coffee,Expense

2024-06-01,June salary,50000,Salary,Income
"""


class FakeModel:
    """Stands in for a Gemini GenerativeModel; replies are scripted in order."""
    
    def __init__(self, replies):
        self.replies = list(replies)
        self.prompts = []
    
    async def generate_content_async(self, prompt):
        self.prompts.append(prompt)
        return SimpleNamespace(text=self.replies.pop(0))


@pytest.fixture
def context_dir(tmp_path):
    return tmp_path / "context"


@pytest.fixture
def store(context_dir):
    return JsonContextStore(context_dir)


@pytest.fixture
def stored_context(context_dir):
    """Write SAMPLE_RECORDS as the 'my_transactions' context."""
    context_dir.mkdir(parents=True, exist_ok=True)
    (context_dir / "my_transactions.json").write_text(
        json.dumps(SAMPLE_RECORDS, ensure_ascii=False),
        encoding="utf-8",
    )
    return "my_transactions"


@pytest.fixture
def csv_file(tmp_path):
    path = tmp_path / "june_statement.csv"
    path.write_text(SAMPLE_CSV, encoding="utf-8")
    return path


@pytest.fixture
def tax_config():
    return load_tax_configuration(BUNDLED_TAX_SLABS_PATH)


@pytest.fixture
def analyzer(store):
    return TransactionAnalyzer(TransactionLoader(store))


@pytest.fixture
def capabilities(store, analyzer, tax_config):
    return FinancialCapabilities(
        analyzer=analyzer,
        tax_calculator=TaxCalculator(configuration=tax_config),
        ingestor=CsvIngestor(store),
        store=store,
    )


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def sample_records():
    return [dict(record) for record in SAMPLE_RECORDS]


@pytest.fixture
def make_model():
    """Build a FakeModel with scripted replies."""
    return FakeModel
