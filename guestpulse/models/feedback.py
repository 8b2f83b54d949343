"""
Feedback data model.

Represents one guest-submitted feedback document from the Firestore
"feedbacks" collection.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional
from datetime import datetime


class FeedbackStatus:
    """Workflow states of a feedback record."""
    PENDING = "pending"
    REVIEWED = "reviewed"
    RESPONDED = "responded"

    ALL = (PENDING, REVIEWED, RESPONDED)

    @classmethod
    def validate(cls, status: str) -> str:
        if status not in cls.ALL:
            raise ValueError(f"Invalid status: {status}. Must be one of {', '.join(cls.ALL)}")
        return status


class Language:
    """Languages a guest response can be localized to."""
    ENGLISH = "English"
    AMHARIC = "Amharic"
    FRENCH = "French"
    ARABIC = "Arabic"

    ALL = (ENGLISH, AMHARIC, FRENCH, ARABIC)

    @classmethod
    def parse(cls, name: str) -> str:
        """Resolve a language name case-insensitively."""
        for language in cls.ALL:
            if language.lower() == (name or "").strip().lower():
                return language
        raise ValueError(f"Unsupported language: {name}. Must be one of {', '.join(cls.ALL)}")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Coerce a stored timestamp into a datetime.

    Firestore returns timezone-aware datetimes; JSON fixtures and older
    documents may carry ISO-8601 strings.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return datetime.fromisoformat(text)
    raise ValueError(f"Unsupported timestamp value: {value!r}")


def _parse_rating(value: Any) -> Optional[float]:
    # bool is an int subclass; a stray True must not count as a 1-star rating
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value) if float(value).is_integer() else float(value)
    if isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            return None
        return int(number) if number.is_integer() else number
    return None


@dataclass
class FeedbackRecord:
    """
    Guest feedback as stored in Firestore.

    status is kept as read: values outside FeedbackStatus.ALL are preserved
    so aggregation can ignore them instead of failing. response_date is
    expected to be set only when status is "responded", but nothing here
    enforces that.
    """
    feedback_id: str
    rating: Optional[float] = None  # 1-5 stars, None when the guest gave no rating
    comment: str = ""
    category: Optional[str] = None
    status: str = FeedbackStatus.PENDING
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    response: Optional[str] = None
    response_date: Optional[datetime] = None
    user_id: Optional[str] = None
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    ai_analysis: Optional[Dict[str, Any]] = None

    @property
    def has_rating(self) -> bool:
        return self.rating is not None

    @classmethod
    def from_dict(cls, feedback_id: str, data: Dict[str, Any]) -> "FeedbackRecord":
        """Create FeedbackRecord from a Firestore document dict."""
        return cls(
            feedback_id=feedback_id,
            rating=_parse_rating(data.get("rating")),
            comment=data.get("comment") or "",
            category=data.get("category") or None,
            status=data.get("status") or FeedbackStatus.PENDING,
            created_at=parse_timestamp(data.get("createdAt")),
            updated_at=parse_timestamp(data.get("updatedAt")),
            response=data.get("response"),
            response_date=parse_timestamp(data.get("responseDate")),
            user_id=data.get("userId"),
            user_name=data.get("userName"),
            user_email=data.get("userEmail"),
            ai_analysis=data.get("aiAnalysis")
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a Firestore document dict (id excluded)."""
        data = {
            "rating": self.rating,
            "comment": self.comment,
            "category": self.category,
            "status": self.status,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "userId": self.user_id,
            "userName": self.user_name,
            "userEmail": self.user_email
        }
        if self.response is not None:
            data["response"] = self.response
            data["responseDate"] = self.response_date
        if self.ai_analysis is not None:
            data["aiAnalysis"] = self.ai_analysis
        return data
