"""Tests for chat message persistence."""

from datetime import datetime
from unittest.mock import patch

import pytest

from app.core.errors import DatabaseError
from app.core.schemas_messages import ChatMessage
from app.db import messages


def test_fetch_orders_newest_first_and_maps_rows(supabase_chain):
    sb, chain = supabase_chain()
    chain.execute.return_value.data = [
        {
            "content": "It is about memory.",
            "created_at": "2024-05-01T10:00:01+00:00",
            "user_email": "ada@example.com",
            "is_user_message": False,
        },
        {
            "content": "What is this about?",
            "created_at": "2024-05-01T10:00:00Z",
            "user_email": "ada@example.com",
            "is_user_message": True,
        },
    ]

    with patch("app.db.messages.get_supabase", return_value=sb):
        result = messages.get_all_messages_by_email_and_s3_key("ada@example.com", "k")

    chain.order.assert_called_with("created_at", desc=True)
    eq_calls = [c[0] for c in chain.eq.call_args_list]
    assert ("user_email", "ada@example.com") in eq_calls
    assert ("s3_key", "k") in eq_calls

    assert [m.is_user for m in result] == [False, True]
    assert result[0].timestamp - result[1].timestamp == 1000
    assert result[1].to_wire() == {
        "content": "What is this about?",
        "timestamp": result[1].timestamp,
        "userId": "ada@example.com",
        "isUser": True,
    }


def test_fetch_wraps_errors(supabase_chain):
    sb, chain = supabase_chain()
    chain.execute.side_effect = RuntimeError("timeout")

    with patch("app.db.messages.get_supabase", return_value=sb):
        with pytest.raises(DatabaseError):
            messages.get_all_messages_by_email_and_s3_key("a@b.c", "k")


def test_save_message_pair_inserts_both_rows_with_offset(supabase_chain):
    sb, chain = supabase_chain()
    question = ChatMessage(content="Why?", userId="ada@example.com", isUser=True)
    answer = ChatMessage(content="Because.", userId="ai", isUser=False)

    with patch("app.db.messages.get_supabase", return_value=sb):
        messages.save_message_pair("ada@example.com", "k", question, answer)

    chain.insert.assert_called_once()
    rows = chain.insert.call_args[0][0]
    assert [r["is_user_message"] for r in rows] == [True, False]
    assert [r["content"] for r in rows] == ["Why?", "Because."]
    assert all(r["user_email"] == "ada@example.com" and r["s3_key"] == "k" for r in rows)

    asked = datetime.fromisoformat(rows[0]["created_at"])
    answered = datetime.fromisoformat(rows[1]["created_at"])
    assert (answered - asked).total_seconds() == 1


def test_save_message_pair_wraps_errors(supabase_chain):
    sb, chain = supabase_chain()
    chain.execute.side_effect = RuntimeError("insert failed")
    question = ChatMessage(content="q", userId="a@b.c")
    answer = ChatMessage(content="a", userId="ai", isUser=False)

    with patch("app.db.messages.get_supabase", return_value=sb):
        with pytest.raises(DatabaseError, match="Failed to save message pair"):
            messages.save_message_pair("a@b.c", "k", question, answer)


def test_save_message_pair_wraps_client_init_failure():
    question = ChatMessage(content="q", userId="a@b.c")
    answer = ChatMessage(content="a", userId="ai", isUser=False)

    with patch("app.db.messages.get_supabase", side_effect=RuntimeError("Failed to initialize Supabase client")):
        with pytest.raises(DatabaseError):
            messages.save_message_pair("a@b.c", "k", question, answer)
