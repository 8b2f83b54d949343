"""
Feedback Dashboard orchestrator.

Coordinates the store, the aggregators and the response composer for each
dashboard action.
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union
from datetime import datetime, timedelta

from guestpulse.agents.aggregation import StatsAggregator, TrendDetector, to_local
from guestpulse.agents.ingestion import MockFeedbackGenerator
from guestpulse.agents.response_composer import NO_FEEDBACK_SUMMARY, SUMMARY_FAILED, ResponseComposer
from guestpulse.errors import DataFetchError, FeedbackNotFoundError
from guestpulse.models.analysis import AIAnalysis
from guestpulse.models.analytics import FeedbackStats, FeedbackSummary, RatingTrends
from guestpulse.models.feedback import FeedbackRecord, FeedbackStatus, Language
from guestpulse.utils.filtering import ALL, filter_feedback, newest_first, recent_feedback
from guestpulse.utils.export import TrendTableWriter
from guestpulse.utils.storage import FirestoreFeedbackStore
import config.settings as settings

logger = logging.getLogger(__name__)


class FeedbackDashboard:
    """
    Entry point for every dashboard action.

    Each call reads the feedback collection once and works on that snapshot.
    Read failures surface as DataFetchError and write failures as
    PersistenceError; composer failures are already replaced by fallbacks.
    """

    def __init__(
        self,
        store: FirestoreFeedbackStore,
        composer: Optional[ResponseComposer] = None,
        categories: Optional[Sequence[str]] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        """
        Initialize the dashboard.

        Args:
            store: Feedback store
            composer: Response composer; required only for AI actions
            categories: Fixed category set for trend reporting
            clock: Source of the reference time
        """
        self.store = store
        self.composer = composer
        self.clock = clock

        self.stats_aggregator = StatsAggregator()
        self.trend_detector = TrendDetector(
            store=store,
            categories=categories if categories is not None else settings.FEEDBACK_CATEGORIES
        )

        logger.info("Feedback dashboard initialized")

    # Listing

    def list_feedback(
        self,
        search: Optional[str] = None,
        status: str = ALL,
        rating: Union[str, int] = ALL
    ) -> List[FeedbackRecord]:
        """All feedbacks, newest first, with the list filters applied."""
        return filter_feedback(self.store.list_feedback(), search=search, status=status, rating=rating)

    def recent_feedback(self, limit: int = settings.RECENT_FEEDBACK_LIMIT) -> List[FeedbackRecord]:
        return recent_feedback(self.store.list_feedback(), limit=limit)

    # Analytics

    def get_stats(self, now: Optional[datetime] = None) -> FeedbackStats:
        records = self.store.list_feedback()
        return self.stats_aggregator.compute(records, now or self.clock())

    def refresh_trends(self, now: Optional[datetime] = None) -> RatingTrends:
        """Recompute rating trends and overwrite the cached snapshot."""
        records = self.store.list_feedback()
        trends = self.trend_detector.detect(records, now or self.clock())
        logger.info(f"Rating trends refreshed (overall change {trends.overall_change:+.2f})")
        return trends

    def export_trend_tables(
        self,
        output_dir: str,
        now: Optional[datetime] = None
    ) -> Tuple[FeedbackStats, Dict[str, str]]:
        """Write stats and trends from one read as CSV tables; the snapshot is left untouched."""
        now = now or self.clock()
        records = self.store.list_feedback()
        stats = self.stats_aggregator.compute(records, now)
        trends = self.trend_detector.compute(records, now)
        paths = TrendTableWriter(output_dir).write(stats, trends, to_local(now).date().isoformat())
        return stats, paths

    def cached_trends(self) -> Optional[RatingTrends]:
        return self.store.load_trends_snapshot()

    def generate_summary(self, now: Optional[datetime] = None) -> str:
        """
        Summarize the last 30 days of feedback and cache the summary.

        Returns the no-data sentinel without calling the model when there is
        no recent feedback, and the failure message without writing a
        snapshot when the model call fails.
        """
        composer = self._require_composer()
        now = to_local(now or self.clock())
        since = now - timedelta(days=settings.SUMMARY_WINDOW_DAYS)

        recent = newest_first([
            r for r in self.store.list_feedback()
            if r.created_at is not None and to_local(r.created_at) >= since
        ])

        if not recent:
            logger.info("No recent feedback to summarize")
            return NO_FEEDBACK_SUMMARY

        result = composer.try_summarize(recent)
        if not result.ok:
            logger.warning(f"Feedback summary failed: {result.error}")
            return SUMMARY_FAILED

        self.store.save_summary_snapshot(FeedbackSummary(
            summary=result.value,
            based_on=len(recent),
            period=settings.SUMMARY_PERIOD_LABEL
        ))
        logger.info(f"Feedback summary generated from {len(recent)} feedbacks")
        return result.value

    # Responses

    def suggest_response(
        self,
        feedback_id: str,
        language: str = Language.ENGLISH
    ) -> Tuple[AIAnalysis, str]:
        """
        Draft an AI reply for one feedback in the requested language.

        Raises:
            FeedbackNotFoundError: If the feedback doesn't exist
            ValueError: If the language is not supported
        """
        composer = self._require_composer()
        language = Language.parse(language)
        record = self._load(feedback_id)
        history = self._guest_history(record)
        return composer.localized_response(record, language, history)

    def respond(
        self,
        feedback_id: str,
        response: str,
        analysis: Optional[AIAnalysis] = None
    ) -> None:
        """Record the reply sent to the guest, with its AI analysis when there is one."""
        if not response or not response.strip():
            raise ValueError("Response text must not be empty")

        if analysis is not None and not analysis.is_fallback:
            self.store.save_ai_response(feedback_id, analysis, response)
        else:
            self.store.save_response(feedback_id, response)

    def mark_reviewed(self, feedback_id: str) -> None:
        self.store.update_status(feedback_id, FeedbackStatus.REVIEWED)

    def update_status(self, feedback_id: str, status: str) -> None:
        self.store.update_status(feedback_id, status)

    # Development

    def seed(
        self,
        count: int = settings.MOCK_FEEDBACK_COUNT,
        days: int = settings.MOCK_FEEDBACK_DAYS
    ) -> List[str]:
        """Write generated demo feedback; returns the new document ids."""
        records = MockFeedbackGenerator().generate(count, days, self.clock())
        ids = [self.store.add_feedback(record) for record in records]
        logger.info(f"Seeded {len(ids)} feedbacks")
        return ids

    def _load(self, feedback_id: str) -> FeedbackRecord:
        record = self.store.get_feedback(feedback_id)
        if record is None:
            raise FeedbackNotFoundError(feedback_id)
        return record

    def _guest_history(self, record: FeedbackRecord) -> List[FeedbackRecord]:
        # History is optional prompt context; a failed read only loses context
        try:
            return self.store.list_guest_history(
                record.user_email,
                exclude_id=record.feedback_id,
                limit=settings.GUEST_HISTORY_LIMIT
            )
        except DataFetchError as e:
            logger.warning(f"Could not load history for {record.feedback_id}: {e}")
            return []

    def _require_composer(self) -> ResponseComposer:
        if self.composer is None:
            raise RuntimeError("This action needs a ResponseComposer; set GOOGLE_API_KEY")
        return self.composer
