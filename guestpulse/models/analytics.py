"""
Analytics data models.

Derived results of aggregation: dashboard statistics, rolling rating
trends, and the cached summary snapshot.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from datetime import datetime

from guestpulse.models.feedback import parse_timestamp

RATING_KEYS = ("1", "2", "3", "4", "5")


@dataclass
class DailyTrend:
    """Feedback volume and average rating for one calendar day."""
    date: str  # YYYY-MM-DD, local calendar day
    count: int = 0
    average_rating: float = 0.0

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "count": self.count,
            "averageRating": self.average_rating
        }


@dataclass
class FeedbackStats:
    """
    Dashboard statistics over the full feedback set.
    Recomputed on demand, never persisted.
    """
    total_count: int = 0
    average_rating: float = 0.0
    category_breakdown: Dict[str, int] = field(default_factory=dict)
    rating_distribution: Dict[str, int] = field(
        default_factory=lambda: {key: 0 for key in RATING_KEYS}
    )
    pending_count: int = 0
    responded_count: int = 0
    reviewed_count: int = 0
    trends_data: List[DailyTrend] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to the camelCase shape the dashboard consumes."""
        return {
            "totalCount": self.total_count,
            "averageRating": self.average_rating,
            "categoryBreakdown": dict(self.category_breakdown),
            "ratingDistribution": dict(self.rating_distribution),
            "pendingCount": self.pending_count,
            "respondedCount": self.responded_count,
            "reviewedCount": self.reviewed_count,
            "trendsData": [day.to_dict() for day in self.trends_data]
        }


@dataclass
class CategoryTrend:
    """7-day vs 30-day average rating for a single category."""
    recent: float = 0.0
    month: float = 0.0
    change: float = 0.0

    def to_dict(self) -> dict:
        return {"recent": self.recent, "month": self.month, "change": self.change}

    @classmethod
    def from_dict(cls, data: dict) -> "CategoryTrend":
        return cls(
            recent=data.get("recent", 0.0),
            month=data.get("month", 0.0),
            change=data.get("change", 0.0)
        )


@dataclass
class RatingTrends:
    """
    Rolling rating averages, overall and per category.
    Persisted as the analytics/ratingTrends snapshot document.
    """
    overall_recent: float = 0.0
    overall_month: float = 0.0
    overall_change: float = 0.0
    category_trends: Dict[str, CategoryTrend] = field(default_factory=dict)
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "overallRecent": self.overall_recent,
            "overallMonth": self.overall_month,
            "overallChange": self.overall_change,
            "categoryTrends": {
                category: trend.to_dict()
                for category, trend in self.category_trends.items()
            }
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RatingTrends":
        """Create RatingTrends from a snapshot document."""
        return cls(
            overall_recent=data.get("overallRecent", 0.0),
            overall_month=data.get("overallMonth", 0.0),
            overall_change=data.get("overallChange", 0.0),
            category_trends={
                category: CategoryTrend.from_dict(trend)
                for category, trend in (data.get("categoryTrends") or {}).items()
            },
            updated_at=parse_timestamp(data.get("updatedAt"))
        )


@dataclass
class FeedbackSummary:
    """LLM-written management summary, persisted as analytics/feedbackSummary."""
    summary: str
    based_on: int
    period: str = "Past 30 days"
    generated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "summary": self.summary,
            "basedOn": self.based_on,
            "period": self.period,
            "generatedAt": self.generated_at
        }
