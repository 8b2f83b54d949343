"""
Unit tests for the CSV trend table writer.
"""

import json
import os
import tempfile
import pytest
import pandas as pd
from datetime import datetime, timedelta

from guestpulse.agents.aggregation import StatsAggregator, TrendDetector
from guestpulse.models.feedback import FeedbackRecord
from guestpulse.utils.export import TrendTableWriter

NOW = datetime(2024, 6, 30, 12, 0)
CATEGORIES = ["Room Comfort", "Spa Services"]


@pytest.fixture
def stats_and_trends():
    records = [
        FeedbackRecord("a", rating=5, category="Spa Services", created_at=NOW - timedelta(days=1)),
        FeedbackRecord("b", rating=1, category="Room Comfort", created_at=NOW - timedelta(days=2)),
        FeedbackRecord("c", rating=5, category="Room Comfort", created_at=NOW - timedelta(days=20))
    ]
    stats = StatsAggregator().compute(records, NOW)
    trends = TrendDetector(categories=CATEGORIES).compute(records, NOW)
    return stats, trends


def test_write_trend_tables(stats_and_trends):
    stats, trends = stats_and_trends

    with tempfile.TemporaryDirectory() as tmpdir:
        paths = TrendTableWriter(tmpdir).write(stats, trends, "2024-06-30")

        daily = pd.read_csv(paths["daily"])
        assert list(daily.columns) == ["date", "count", "averageRating"]
        assert len(daily) == 30
        assert daily["count"].sum() == 3
        assert daily.iloc[-1]["date"] == "2024-06-30"

        categories = pd.read_csv(paths["categories"])
        # Biggest drop first: Room Comfort went from 3.0 (month) to 1.0 (recent)
        assert categories.iloc[0]["Category"] == "Room Comfort"
        assert categories.iloc[0]["Change"] == -2.0
        assert set(categories["Category"]) == set(CATEGORIES)

        with open(paths["metadata"]) as f:
            metadata = json.load(f)
        assert metadata["date_range"] == {"start": "2024-06-01", "end": "2024-06-30"}
        assert metadata["total_feedbacks"] == 3
        assert metadata["feedbacks_in_range"] == 3


def test_write_creates_output_dir(stats_and_trends):
    stats, trends = stats_and_trends

    with tempfile.TemporaryDirectory() as tmpdir:
        output_dir = os.path.join(tmpdir, "reports", "june")
        paths = TrendTableWriter(output_dir).write(stats, trends, "2024-06-30")

        assert all(os.path.exists(path) for path in paths.values())


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
