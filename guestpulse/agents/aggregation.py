"""
Stats Aggregator and Trend Detector.

Computes dashboard statistics and rolling 7-day vs 30-day rating trends
from the full list of feedback records.
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence
from collections import Counter
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP

from guestpulse.errors import PersistenceError
from guestpulse.models.analytics import (
    CategoryTrend,
    DailyTrend,
    FeedbackStats,
    RATING_KEYS,
    RatingTrends,
)
from guestpulse.models.feedback import FeedbackRecord, FeedbackStatus
import config.settings as settings

logger = logging.getLogger(__name__)


def to_local(moment: datetime) -> datetime:
    """Express a timestamp as naive local time (Firestore returns aware UTC)."""
    if moment.tzinfo is not None:
        return moment.astimezone().replace(tzinfo=None)
    return moment


def round_rating(value: float) -> float:
    """Round half-up to one decimal place."""
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def _defined_ratings(records: Iterable[FeedbackRecord]) -> List[float]:
    return [r.rating for r in records if r.has_rating]


def _mean(values: Sequence[float]) -> float:
    """Mean with a divisor of at least 1, so an empty window averages to 0."""
    return sum(values) / max(len(values), 1)


class StatsAggregator:
    """
    Builds FeedbackStats for the dashboard.

    Pure: reads the records, never mutates them, and returns the same
    result for the same records and reference time.
    """

    def __init__(self, series_days: int = settings.TREND_SERIES_DAYS):
        self.series_days = series_days

    def compute(
        self,
        records: Sequence[FeedbackRecord],
        now: Optional[datetime] = None
    ) -> FeedbackStats:
        """
        Compute summary statistics and the daily trend series.

        Args:
            records: Full feedback set (no pagination)
            now: Reference time, defaults to the current local time

        Returns:
            FeedbackStats over all records
        """
        now = to_local(now or datetime.now())

        ratings = _defined_ratings(records)
        average_rating = round_rating(_mean(ratings)) if ratings else 0.0

        category_breakdown = dict(Counter(r.category for r in records if r.category))

        # Only whole-star ratings in 1..5 land in a bucket
        rating_distribution = {key: 0 for key in RATING_KEYS}
        for rating in ratings:
            if float(rating).is_integer():
                key = str(int(rating))
                if key in rating_distribution:
                    rating_distribution[key] += 1

        status_counts = Counter(r.status for r in records)

        stats = FeedbackStats(
            total_count=len(records),
            average_rating=average_rating,
            category_breakdown=category_breakdown,
            rating_distribution=rating_distribution,
            pending_count=status_counts.get(FeedbackStatus.PENDING, 0),
            responded_count=status_counts.get(FeedbackStatus.RESPONDED, 0),
            reviewed_count=status_counts.get(FeedbackStatus.REVIEWED, 0),
            trends_data=self._daily_series(records, now)
        )

        logger.info(
            f"Computed stats for {stats.total_count} feedbacks "
            f"(average rating {stats.average_rating}, {len(ratings)} rated)"
        )
        return stats

    def _daily_series(
        self,
        records: Sequence[FeedbackRecord],
        now: datetime
    ) -> List[DailyTrend]:
        """Bucket records into local calendar days, oldest first, ending today."""
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)

        buckets: Dict[datetime, List[FeedbackRecord]] = {}
        for record in records:
            if record.created_at is None:
                continue
            created = to_local(record.created_at)
            day = created.replace(hour=0, minute=0, second=0, microsecond=0)
            buckets.setdefault(day, []).append(record)

        series = []
        for offset in range(self.series_days - 1, -1, -1):
            day_start = today - timedelta(days=offset)
            day_records = buckets.get(day_start, [])
            day_ratings = _defined_ratings(day_records)
            series.append(DailyTrend(
                date=day_start.date().isoformat(),
                count=len(day_records),
                average_rating=round_rating(_mean(day_ratings)) if day_ratings else 0.0
            ))

        return series


class TrendDetector:
    """
    Compares 7-day and 30-day average ratings, overall and per category,
    and writes the result to the ratingTrends snapshot.
    """

    def __init__(
        self,
        store=None,
        categories: Optional[Sequence[str]] = None,
        recent_days: int = settings.RECENT_WINDOW_DAYS,
        month_days: int = settings.MONTH_WINDOW_DAYS
    ):
        """
        Initialize trend detector.

        Args:
            store: Feedback store used by persist(); optional for pure use
            categories: Fixed category set to report on
            recent_days: Length of the "recent" window
            month_days: Length of the "month" window
        """
        self.store = store
        self.categories = list(categories if categories is not None else settings.FEEDBACK_CATEGORIES)
        self.recent_days = recent_days
        self.month_days = month_days

    def compute(
        self,
        records: Sequence[FeedbackRecord],
        now: Optional[datetime] = None
    ) -> RatingTrends:
        """Compute rolling averages relative to now."""
        now = to_local(now or datetime.now())

        recent_records = self._window(records, now - timedelta(days=self.recent_days))
        month_records = self._window(records, now - timedelta(days=self.month_days))

        overall_recent = _mean(_defined_ratings(recent_records))
        overall_month = _mean(_defined_ratings(month_records))

        category_trends = {}
        for category in self.categories:
            recent = _mean(_defined_ratings(r for r in recent_records if r.category == category))
            month = _mean(_defined_ratings(r for r in month_records if r.category == category))
            category_trends[category] = CategoryTrend(
                recent=recent,
                month=month,
                change=recent - month
            )

        logger.info(
            f"Rating trends: recent={overall_recent:.2f} ({len(recent_records)} feedbacks), "
            f"month={overall_month:.2f} ({len(month_records)} feedbacks)"
        )

        return RatingTrends(
            overall_recent=overall_recent,
            overall_month=overall_month,
            overall_change=overall_recent - overall_month,
            category_trends=category_trends
        )

    def persist(self, trends: RatingTrends) -> None:
        """
        Overwrite the cached trends snapshot.

        Raises:
            PersistenceError: If no store is configured or the write fails
        """
        if self.store is None:
            raise PersistenceError("No store configured for trend snapshots")
        self.store.save_trends_snapshot(trends)

    def detect(
        self,
        records: Sequence[FeedbackRecord],
        now: Optional[datetime] = None
    ) -> RatingTrends:
        """Compute trends and persist them as the current snapshot."""
        trends = self.compute(records, now)
        self.persist(trends)
        return trends

    @staticmethod
    def _window(records: Sequence[FeedbackRecord], since: datetime) -> List[FeedbackRecord]:
        return [
            r for r in records
            if r.created_at is not None and to_local(r.created_at) >= since
        ]
