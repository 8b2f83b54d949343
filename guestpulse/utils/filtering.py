"""
Client-side filtering for the feedback list.

The store returns the whole collection; search, status and rating filters
are applied in memory.
"""

from typing import List, Optional, Sequence, Union

from guestpulse.models.feedback import FeedbackRecord

ALL = "all"


def _created_sort_key(record: FeedbackRecord):
    created = record.created_at
    if created is None:
        return (0, 0.0)
    if created.tzinfo is None:
        created = created.astimezone()
    return (1, created.timestamp())


def newest_first(records: Sequence[FeedbackRecord]) -> List[FeedbackRecord]:
    """Sort by created_at descending; records without a timestamp go last."""
    return sorted(records, key=_created_sort_key, reverse=True)


def filter_feedback(
    records: Sequence[FeedbackRecord],
    search: Optional[str] = None,
    status: str = ALL,
    rating: Union[str, int] = ALL
) -> List[FeedbackRecord]:
    """
    Apply the dashboard list filters.

    Args:
        records: Feedbacks to filter (order is preserved)
        search: Case-insensitive substring matched against guest name,
                comment and category
        status: Exact status, or "all"
        rating: Exact star rating, or "all"

    Returns:
        Matching feedbacks
    """
    result = list(records)

    if search:
        term = search.lower()
        result = [
            r for r in result
            if term in (r.user_name or "").lower()
            or term in (r.comment or "").lower()
            or term in (r.category or "").lower()
        ]

    if status != ALL:
        result = [r for r in result if r.status == status]

    if rating != ALL:
        wanted = int(rating)
        result = [r for r in result if r.has_rating and r.rating == wanted]

    return result


def recent_feedback(records: Sequence[FeedbackRecord], limit: int = 5) -> List[FeedbackRecord]:
    """Newest feedbacks for the dashboard overview."""
    return newest_first(records)[:limit]
