"""
Unit tests for database operations
"""
import pytest
from unittest.mock import patch, MagicMock
from app.database import Database


@pytest.fixture
def mock_client():
    client = MagicMock()
    with patch('app.database.get_supabase_admin_client', return_value=client):
        yield client


class TestDatabase:
    """Test cases for Database class"""

    def test_insert_record_success(self, mock_client):
        """Insert returns the created row"""
        mock_data = {"id": "q-1", "subject": "Science"}
        mock_client.table.return_value.insert.return_value.execute.return_value.data = [mock_data]

        result = Database.insert("questions", {"subject": "Science"})

        assert result == mock_data
        mock_client.table.assert_called_with("questions")

    def test_insert_record_failure(self, mock_client):
        """Insert errors propagate"""
        mock_client.table.return_value.insert.return_value.execute.side_effect = Exception("Database error")

        with pytest.raises(Exception):
            Database.insert("questions", {"subject": "Science"})

    def test_insert_many(self, mock_client):
        rows = [{"option_order": 1}, {"option_order": 2}]
        mock_client.table.return_value.insert.return_value.execute.return_value.data = rows

        assert Database.insert_many("question_options", rows) == rows
        mock_client.table.return_value.insert.assert_called_with(rows)

    def test_select_with_filters(self, mock_client):
        """Select applies equality filters"""
        mock_data = [{"id": "q-1"}]
        query = mock_client.table.return_value.select.return_value
        query.eq.return_value.execute.return_value.data = mock_data

        result = Database.select("questions", filters={"id": "q-1"})

        assert result == mock_data
        query.eq.assert_called_with("id", "q-1")

    def test_select_null_filter_uses_is(self, mock_client):
        query = mock_client.table.return_value.select.return_value
        query.is_.return_value.execute.return_value.data = []

        Database.select("attempts", filters={"score": None})

        query.is_.assert_called_with("score", "null")

    def test_select_with_in_filter_order_and_limit(self, mock_client):
        query = mock_client.table.return_value.select.return_value
        chained = query.in_.return_value.order.return_value.limit.return_value
        chained.execute.return_value.data = [{"id": "o-1"}]

        result = Database.select(
            "question_options", in_filters={"question_id": ("q-1", "q-2")},
            order_by="option_order", limit=5
        )

        assert result == [{"id": "o-1"}]
        query.in_.assert_called_with("question_id", ["q-1", "q-2"])
        query.in_.return_value.order.assert_called_with("option_order", desc=False)

    def test_select_with_columns(self, mock_client):
        mock_client.table.return_value.select.return_value.execute.return_value.data = []

        Database.select("questions", columns="class,subject")

        mock_client.table.return_value.select.assert_called_with("class,subject")

    def test_count(self, mock_client):
        query = mock_client.table.return_value.select.return_value
        query.eq.return_value.execute.return_value.count = 12

        assert Database.count("questions", {"is_active": True}) == 12
        mock_client.table.return_value.select.assert_called_with("id", count="exact")

    def test_update_record_success(self, mock_client):
        mock_data = [{"id": "q-1", "is_active": False}]
        mock_client.table.return_value.update.return_value.eq.return_value.execute.return_value.data = mock_data

        result = Database.update("questions", {"is_active": False}, {"id": "q-1"})

        assert result == mock_data[0]

    def test_upsert(self, mock_client):
        row = {"attempt_id": "a-1", "question_id": "q-1", "selected_option_id": "o-1"}
        mock_client.table.return_value.upsert.return_value.execute.return_value.data = [row]

        result = Database.upsert("attempt_answers", row, on_conflict="attempt_id,question_id")

        assert result == [row]
        mock_client.table.return_value.upsert.assert_called_with(row, on_conflict="attempt_id,question_id")

    def test_delete_record_success(self, mock_client):
        mock_client.table.return_value.delete.return_value.eq.return_value.execute.return_value.data = []

        assert Database.delete("questions", {"id": "q-1"}) == []
