"""
Trend table export.

Writes the daily trend series and the category trend table to CSV for
offline reporting.
"""

import json
import logging
import os
from typing import Dict
from datetime import datetime, timezone

import pandas as pd

from guestpulse.models.analytics import FeedbackStats, RatingTrends

logger = logging.getLogger(__name__)


class TrendTableWriter:
    """Writes FeedbackStats and RatingTrends as CSV tables plus metadata."""

    def __init__(self, output_dir: str):
        self.output_dir = output_dir

    def write(
        self,
        stats: FeedbackStats,
        trends: RatingTrends,
        generated_for: str
    ) -> Dict[str, str]:
        """
        Export the trend tables.

        Args:
            stats: Dashboard statistics (daily series)
            trends: Rolling rating trends (per category)
            generated_for: Reference date label (YYYY-MM-DD) used in file names

        Returns:
            Dict with "daily", "categories" and "metadata" file paths
        """
        os.makedirs(self.output_dir, exist_ok=True)

        daily_df = pd.DataFrame(
            [day.to_dict() for day in stats.trends_data],
            columns=["date", "count", "averageRating"]
        )
        daily_path = os.path.join(self.output_dir, f"daily_trends_{generated_for}.csv")
        daily_df.to_csv(daily_path, index=False)

        category_rows = []
        for category, trend in trends.category_trends.items():
            category_rows.append({
                "Category": category,
                "Recent": round(trend.recent, 2),
                "Month": round(trend.month, 2),
                "Change": round(trend.change, 2),
                "Feedbacks": stats.category_breakdown.get(category, 0)
            })
        category_df = pd.DataFrame(
            category_rows,
            columns=["Category", "Recent", "Month", "Change", "Feedbacks"]
        )
        if not category_df.empty:
            # Biggest drops first
            category_df = category_df.sort_values("Change", ascending=True)
        category_path = os.path.join(self.output_dir, f"category_trends_{generated_for}.csv")
        category_df.to_csv(category_path, index=False)

        metadata_path = os.path.join(self.output_dir, f"trends_{generated_for}_metadata.json")
        metadata = {
            "generated_for": generated_for,
            "date_range": {
                "start": stats.trends_data[0].date if stats.trends_data else None,
                "end": stats.trends_data[-1].date if stats.trends_data else None
            },
            "total_feedbacks": stats.total_count,
            "feedbacks_in_range": int(daily_df["count"].sum()) if not daily_df.empty else 0,
            "average_rating": stats.average_rating,
            "overall_recent": trends.overall_recent,
            "overall_month": trends.overall_month,
            "overall_change": trends.overall_change,
            "generated_at": datetime.now(timezone.utc).isoformat()
        }
        with open(metadata_path, 'w') as f:
            json.dump(metadata, f, indent=2)

        logger.info(
            f"Trend tables saved to {self.output_dir} "
            f"({len(daily_df)} days, {len(category_df)} categories)"
        )

        return {
            "daily": daily_path,
            "categories": category_path,
            "metadata": metadata_path
        }
