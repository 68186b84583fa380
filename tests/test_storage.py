"""
Tests for context storage and CSV ingestion.
"""

import json

import pytest

from fin_assistant.errors import (
    DataNotFoundError,
    InvalidInputError,
    MissingRequiredParameterError,
    StorageError,
)
from fin_assistant.services.ingest import CsvIngestor, read_transaction_csv
from fin_assistant.services.storage import JsonContextStore, validate_context_name


class TestContextNames:
    """Tests for context name validation."""
    
    @pytest.mark.parametrize("raw,expected", [
        ("my_transactions", "my_transactions"),
        (" june-2024 ", "june-2024"),
        ("statement.json", "statement"),
    ])
    def test_valid_names(self, raw, expected):
        assert validate_context_name(raw) == expected
    
    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_missing_name(self, raw):
        with pytest.raises(MissingRequiredParameterError):
            validate_context_name(raw)
    
    @pytest.mark.parametrize("raw", ["../etc/passwd", "a/b", "a..b", ".hidden", "name with spaces"])
    def test_unsafe_names(self, raw):
        with pytest.raises(InvalidInputError):
            validate_context_name(raw)


class TestJsonContextStore:
    """Tests for the JSON file store."""
    
    @pytest.mark.asyncio
    async def test_write_then_read(self, store, sample_records):
        path = await store.write_records("my_transactions", sample_records)
        
        assert path == store.context_dir / "my_transactions.json"
        assert await store.read_records("my_transactions") == sample_records
        assert await store.context_exists("my_transactions")
    
    @pytest.mark.asyncio
    async def test_written_file_is_pretty_json(self, store, sample_records):
        path = await store.write_records("my_transactions", sample_records)
        text = path.read_text(encoding="utf-8")
        assert text.startswith("[\n  {")
        assert "₹50" in text
    
    @pytest.mark.asyncio
    async def test_missing_context(self, store):
        with pytest.raises(DataNotFoundError, match="was not found"):
            await store.read_records("nope")
        assert not await store.context_exists("nope")
    
    @pytest.mark.asyncio
    async def test_invalid_json(self, store, context_dir):
        context_dir.mkdir(parents=True)
        (context_dir / "broken.json").write_text("[{", encoding="utf-8")
        with pytest.raises(DataNotFoundError, match="not valid JSON"):
            await store.read_records("broken")
    
    @pytest.mark.asyncio
    async def test_not_an_array(self, store, context_dir):
        context_dir.mkdir(parents=True)
        (context_dir / "object.json").write_text(json.dumps({"Date": "2024-01-01"}), encoding="utf-8")
        with pytest.raises(DataNotFoundError, match="JSON array"):
            await store.read_records("object")
    
    @pytest.mark.asyncio
    async def test_non_object_record(self, store, context_dir):
        context_dir.mkdir(parents=True)
        (context_dir / "mixed.json").write_text(json.dumps([{"Amount": 1}, 5]), encoding="utf-8")
        with pytest.raises(DataNotFoundError, match="malformed record"):
            await store.read_records("mixed")
    
    @pytest.mark.asyncio
    async def test_unwritable_location(self, tmp_path, sample_records):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        store = JsonContextStore(blocker / "ctx")
        
        with pytest.raises(StorageError, match="Could not write") as exc_info:
            await store.write_records("my_transactions", sample_records)
        assert str(blocker) in exc_info.value.details
    
    @pytest.mark.asyncio
    async def test_list_contexts(self, store, sample_records):
        assert await store.list_contexts() == []
        await store.write_records("b_context", sample_records)
        await store.write_records("a_context", [])
        assert await store.list_contexts() == ["a_context", "b_context"]


class TestCsvIngestion:
    """Tests for reading CSV statements."""
    
    def test_read_transaction_csv(self, csv_file):
        records = read_transaction_csv(csv_file)
        
        assert len(records) == 3
        assert records[1] == {
            "Date": "2024-06-12",
            "Description": "Starbucks",
            "Amount": "50",
            "Category": "Coffee",
            "Type": "Expense",
        }
    
    def test_values_stay_text(self, csv_file):
        records = read_transaction_csv(csv_file)
        assert all(isinstance(value, str) for record in records for value in record.values())
    
    def test_missing_csv(self, tmp_path):
        with pytest.raises(DataNotFoundError):
            read_transaction_csv(tmp_path / "absent.csv")
    
    def test_empty_csv(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("", encoding="utf-8")
        with pytest.raises(DataNotFoundError, match="empty"):
            read_transaction_csv(path)
    
    def test_missing_columns(self, tmp_path):
        path = tmp_path / "partial.csv"
        path.write_text("Date,Amount\n2024-01-01,10\n", encoding="utf-8")
        with pytest.raises(InvalidInputError, match="Description, Category, Type"):
            read_transaction_csv(path)
    
    @pytest.mark.asyncio
    async def test_ingest_defaults_context_name(self, store, csv_file):
        result = await CsvIngestor(store).ingest(str(csv_file))
        
        assert result.success
        assert result.context_name == "june_statement"
        assert result.record_count == 3
        assert result.output_file_path == str(store.context_dir / "june_statement.json")
        assert result.message == (
            f"CSV data from '{csv_file}' successfully processed and stored as JSON "
            f"at '{result.output_file_path}'. Context name: 'june_statement'."
        )
    
    @pytest.mark.asyncio
    async def test_ingest_relative_path(self, store, csv_file, monkeypatch):
        monkeypatch.chdir(csv_file.parent)
        result = await CsvIngestor(store).ingest("june_statement.csv", "june")
        assert result.context_name == "june"
        assert len(await store.read_records("june")) == 3
    
    @pytest.mark.asyncio
    async def test_ingest_requires_path(self, store):
        with pytest.raises(MissingRequiredParameterError, match="csvFilePath"):
            await CsvIngestor(store).ingest(None)
    
    @pytest.mark.asyncio
    async def test_ingest_into_unwritable_location(self, tmp_path, csv_file):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        
        with pytest.raises(StorageError):
            await CsvIngestor(JsonContextStore(blocker / "ctx")).ingest(str(csv_file))
