"""
AI analysis data model.

Structured output of the response composer and the explicit result type
wrapping each LLM call.
"""

from dataclasses import dataclass, field
from typing import Any, Generic, List, Optional, TypeVar

from guestpulse.errors import ComposerError

T = TypeVar('T')

SENTIMENT_MIN = -10.0
SENTIMENT_MAX = 10.0


@dataclass
class AIAnalysis:
    """
    Suggested guest reply plus sentiment and staff follow-ups.

    is_fallback marks an analysis built from the rating template after the
    LLM call failed.
    """
    suggested_response: str
    sentiment_score: float = 0.0  # -10 (very negative) to +10 (very positive)
    top_issues: List[str] = field(default_factory=list)
    recommended_actions: List[str] = field(default_factory=list)
    is_fallback: bool = False

    def __post_init__(self):
        # Clamp sentiment into the documented range
        self.sentiment_score = max(SENTIMENT_MIN, min(SENTIMENT_MAX, float(self.sentiment_score)))

    def to_dict(self) -> dict:
        """Firestore aiAnalysis payload (reply text is stored as the response)."""
        return {
            "sentimentScore": self.sentiment_score,
            "topIssues": list(self.top_issues),
            "recommendedActions": list(self.recommended_actions)
        }


@dataclass
class ComposerResult(Generic[T]):
    """Outcome of one composer call: either a value or a ComposerError."""
    value: Optional[T] = None
    error: Optional[ComposerError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "ComposerResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ComposerError) -> "ComposerResult[T]":
        return cls(error=error)

    def unwrap_or(self, fallback: Any) -> T:
        """Return the value, or the fallback when the call failed."""
        return self.value if self.ok else fallback
