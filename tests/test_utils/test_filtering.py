"""
Unit tests for the feedback list filters.
"""

import pytest
from datetime import datetime, timedelta

from guestpulse.models.feedback import FeedbackRecord
from guestpulse.utils.filtering import filter_feedback, newest_first, recent_feedback

NOW = datetime(2024, 6, 30, 12, 0)


@pytest.fixture
def records():
    return [
        FeedbackRecord("a", rating=5, comment="Amazing spa treatment", category="Spa Services",
                       status="responded", user_name="Sara Tesfaye", created_at=NOW - timedelta(days=3)),
        FeedbackRecord("b", rating=2, comment="Food arrived cold", category="Dining Experience",
                       status="pending", user_name="Jean Dupont", created_at=NOW - timedelta(days=1)),
        FeedbackRecord("c", rating=2, comment="Slow check-in", category="Staff Service",
                       status="reviewed", user_name=None, created_at=NOW - timedelta(days=2)),
        FeedbackRecord("d", rating=None, comment="", category="Water Park",
                       status="pending", created_at=None)
    ]


def test_no_filters_returns_everything(records):
    assert [r.feedback_id for r in filter_feedback(records)] == ["a", "b", "c", "d"]


def test_search_is_case_insensitive(records):
    assert [r.feedback_id for r in filter_feedback(records, search="SPA")] == ["a"]


def test_search_matches_name_comment_and_category(records):
    assert [r.feedback_id for r in filter_feedback(records, search="jean")] == ["b"]
    assert [r.feedback_id for r in filter_feedback(records, search="check-in")] == ["c"]
    assert [r.feedback_id for r in filter_feedback(records, search="water")] == ["d"]


def test_status_filter(records):
    assert [r.feedback_id for r in filter_feedback(records, status="pending")] == ["b", "d"]


def test_rating_filter_accepts_string(records):
    assert [r.feedback_id for r in filter_feedback(records, rating="2")] == ["b", "c"]


def test_filters_combine(records):
    result = filter_feedback(records, search="s", status="reviewed", rating=2)

    assert [r.feedback_id for r in result] == ["c"]


def test_newest_first_puts_untimed_last(records):
    assert [r.feedback_id for r in newest_first(records)] == ["b", "c", "a", "d"]


def test_recent_feedback_limit(records):
    assert [r.feedback_id for r in recent_feedback(records, limit=2)] == ["b", "c"]


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
