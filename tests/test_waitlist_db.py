"""Tests for waitlist persistence."""

from unittest.mock import MagicMock, patch

import pytest

from app.core.errors import DatabaseError
from app.core.schemas_waitlist import WaitlistEntryCreate
from app.db.waitlist import DuplicateEntryError, create_entry, get_all_entries


class FakeAPIError(Exception):
    def __init__(self, code):
        super().__init__(f"error {code}")
        self.code = code


@pytest.fixture
def entry():
    return WaitlistEntryCreate(
        email="grace@example.com", name="Grace", position="Engineer", use_case="Reading papers"
    )


def test_create_entry_returns_inserted_row(supabase_chain, entry):
    sb, chain = supabase_chain()
    chain.execute.return_value = MagicMock(data=[{"id": "w-1", "email": "grace@example.com"}])

    with patch("app.db.waitlist.get_supabase", return_value=sb):
        result = create_entry(entry)

    assert result["id"] == "w-1"
    record = chain.insert.call_args[0][0]
    assert record["email"] == "grace@example.com"
    assert record["use_case"] == "Reading papers"
    assert record["id"]
    assert record["created_at"]


def test_create_entry_falls_back_to_record(supabase_chain, entry):
    sb, chain = supabase_chain()
    chain.execute.return_value = MagicMock(data=[])

    with patch("app.db.waitlist.get_supabase", return_value=sb):
        result = create_entry(entry)

    assert result["name"] == "Grace"


def test_duplicate_email(supabase_chain, entry):
    sb, chain = supabase_chain()
    chain.execute.side_effect = FakeAPIError("23505")

    with patch("app.db.waitlist.get_supabase", return_value=sb):
        with pytest.raises(DuplicateEntryError):
            create_entry(entry)


def test_other_insert_errors(supabase_chain, entry):
    sb, chain = supabase_chain()
    chain.execute.side_effect = FakeAPIError("08006")

    with patch("app.db.waitlist.get_supabase", return_value=sb):
        with pytest.raises(DatabaseError) as exc_info:
            create_entry(entry)

    assert not isinstance(exc_info.value, DuplicateEntryError)


def test_get_all_entries_newest_first(supabase_chain):
    sb, chain = supabase_chain()
    chain.execute.return_value = MagicMock(data=[{"id": "2"}, {"id": "1"}])

    with patch("app.db.waitlist.get_supabase", return_value=sb):
        assert [e["id"] for e in get_all_entries()] == ["2", "1"]

    chain.order.assert_called_with("created_at", desc=True)
