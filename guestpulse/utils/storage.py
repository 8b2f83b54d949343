"""
Storage utility.

Firestore access for feedback documents and the cached analytics
snapshots (rating trends, feedback summary).
"""

import logging
from typing import List, Optional

from google.cloud import firestore

from guestpulse.errors import DataFetchError, PersistenceError
from guestpulse.models.analysis import AIAnalysis
from guestpulse.models.analytics import FeedbackSummary, RatingTrends
from guestpulse.models.feedback import FeedbackRecord, FeedbackStatus
from guestpulse.utils.filtering import newest_first
import config.settings as settings

logger = logging.getLogger(__name__)


class FirestoreFeedbackStore:
    """
    Manages all Firestore reads and writes.

    Handles:
    - Feedback documents ({feedback_collection}/{id})
    - Rating trends snapshot ({analytics_collection}/ratingTrends)
    - Feedback summary snapshot ({analytics_collection}/feedbackSummary)
    """

    def __init__(
        self,
        client: firestore.Client,
        feedback_collection: str = settings.FEEDBACK_COLLECTION,
        analytics_collection: str = settings.ANALYTICS_COLLECTION
    ):
        """
        Initialize the store.

        Args:
            client: Firestore client, constructed by the caller
            feedback_collection: Collection holding feedback documents
            analytics_collection: Collection holding snapshot documents
        """
        self.client = client
        self.feedback_collection = feedback_collection
        self.analytics_collection = analytics_collection

        logger.info(
            f"Initialized FirestoreFeedbackStore with feedback_collection={feedback_collection}, "
            f"analytics_collection={analytics_collection}"
        )

    # Reads

    def list_feedback(self) -> List[FeedbackRecord]:
        """
        Load every feedback document, newest first.

        Raises:
            DataFetchError: If the query fails
        """
        try:
            query = self.client.collection(self.feedback_collection).order_by(
                "createdAt", direction=firestore.Query.DESCENDING
            )
            records = [
                FeedbackRecord.from_dict(doc.id, doc.to_dict() or {})
                for doc in query.stream()
            ]
        except Exception as e:
            logger.error(f"Failed to list feedbacks: {e}")
            raise DataFetchError(f"Failed to list feedbacks: {e}") from e

        logger.debug(f"Loaded {len(records)} feedbacks from {self.feedback_collection}")
        return records

    def get_feedback(self, feedback_id: str) -> Optional[FeedbackRecord]:
        """
        Load a single feedback document.

        Returns:
            FeedbackRecord, or None if the document doesn't exist
        """
        try:
            snapshot = self.client.collection(self.feedback_collection).document(feedback_id).get()
        except Exception as e:
            logger.error(f"Failed to load feedback {feedback_id}: {e}")
            raise DataFetchError(f"Failed to load feedback {feedback_id}: {e}") from e

        if not snapshot.exists:
            logger.warning(f"No feedback found for {feedback_id}")
            return None

        try:
            return FeedbackRecord.from_dict(snapshot.id, snapshot.to_dict() or {})
        except ValueError as e:
            logger.error(f"Malformed feedback {feedback_id}: {e}")
            raise DataFetchError(f"Malformed feedback {feedback_id}: {e}") from e

    def list_guest_history(
        self,
        user_email: Optional[str],
        exclude_id: Optional[str] = None,
        limit: int = settings.GUEST_HISTORY_LIMIT
    ) -> List[FeedbackRecord]:
        """
        Most recent feedbacks from the same guest, newest first.

        Filtering happens client-side over list_feedback(), like every other
        dashboard filter.
        """
        if not user_email:
            return []

        history = [
            record for record in self.list_feedback()
            if record.user_email == user_email and record.feedback_id != exclude_id
        ]
        return newest_first(history)[:limit]

    def load_trends_snapshot(self) -> Optional[RatingTrends]:
        """Load the cached ratingTrends snapshot, or None if never written."""
        try:
            snapshot = self._analytics_doc(settings.TRENDS_DOCUMENT).get()
        except Exception as e:
            logger.error(f"Failed to load trends snapshot: {e}")
            raise DataFetchError(f"Failed to load trends snapshot: {e}") from e

        if not snapshot.exists:
            return None
        return RatingTrends.from_dict(snapshot.to_dict() or {})

    # Writes

    def add_feedback(self, record: FeedbackRecord) -> str:
        """
        Create a feedback document with server-side timestamps.

        A created_at already set on the record is kept, so seeded data can
        be spread over past days. A naive created_at is taken as local time;
        Firestore would otherwise store it as UTC.

        Returns:
            Generated document id
        """
        data = record.to_dict()
        created_at = record.created_at
        if created_at is not None and created_at.tzinfo is None:
            created_at = created_at.astimezone()
        data["createdAt"] = created_at or firestore.SERVER_TIMESTAMP
        data["updatedAt"] = firestore.SERVER_TIMESTAMP

        try:
            doc_ref = self.client.collection(self.feedback_collection).document()
            doc_ref.set(data)
        except Exception as e:
            logger.error(f"Failed to add feedback: {e}")
            raise PersistenceError(f"Failed to add feedback: {e}") from e

        logger.debug(f"Added feedback {doc_ref.id}")
        return doc_ref.id

    def update_status(self, feedback_id: str, status: str) -> None:
        """
        Change the workflow status of a feedback.

        Raises:
            ValueError: If status is not a known status
            PersistenceError: If the update fails
        """
        FeedbackStatus.validate(status)
        self._update_feedback(feedback_id, {"status": status})
        logger.info(f"Feedback {feedback_id} marked {status}")

    def save_response(self, feedback_id: str, response: str) -> None:
        """Record a staff response and mark the feedback responded."""
        self._update_feedback(feedback_id, {
            "response": response,
            "responseDate": firestore.SERVER_TIMESTAMP,
            "status": FeedbackStatus.RESPONDED
        })
        logger.info(f"Saved response for feedback {feedback_id}")

    def save_ai_response(
        self,
        feedback_id: str,
        analysis: AIAnalysis,
        response: Optional[str] = None
    ) -> None:
        """
        Record an AI-assisted response together with its analysis.

        Args:
            feedback_id: Target feedback
            analysis: Composer output
            response: Final text sent to the guest (defaults to the suggestion,
                      differs when the reply was translated or edited)
        """
        self._update_feedback(feedback_id, {
            "response": response or analysis.suggested_response,
            "responseDate": firestore.SERVER_TIMESTAMP,
            "status": FeedbackStatus.RESPONDED,
            "aiAnalysis": analysis.to_dict()
        })
        logger.info(f"Saved AI response for feedback {feedback_id}")

    def save_trends_snapshot(self, trends: RatingTrends) -> None:
        """Overwrite the ratingTrends snapshot (merge, last writer wins)."""
        data = trends.to_dict()
        data["updatedAt"] = firestore.SERVER_TIMESTAMP
        self._set_analytics(settings.TRENDS_DOCUMENT, data)

    def save_summary_snapshot(self, summary: FeedbackSummary) -> None:
        """Overwrite the feedbackSummary snapshot (merge, last writer wins)."""
        data = summary.to_dict()
        data["generatedAt"] = summary.generated_at or firestore.SERVER_TIMESTAMP
        data["updatedAt"] = firestore.SERVER_TIMESTAMP
        self._set_analytics(settings.SUMMARY_DOCUMENT, data)

    def _update_feedback(self, feedback_id: str, fields: dict) -> None:
        fields = dict(fields, updatedAt=firestore.SERVER_TIMESTAMP)
        try:
            self.client.collection(self.feedback_collection).document(feedback_id).update(fields)
        except Exception as e:
            logger.error(f"Failed to update feedback {feedback_id}: {e}")
            raise PersistenceError(f"Failed to update feedback {feedback_id}: {e}") from e

    def _set_analytics(self, document: str, data: dict) -> None:
        try:
            self._analytics_doc(document).set(data, merge=True)
        except Exception as e:
            logger.error(f"Failed to save {document} snapshot: {e}")
            raise PersistenceError(f"Failed to save {document} snapshot: {e}") from e
        logger.info(f"Saved {self.analytics_collection}/{document} snapshot")

    def _analytics_doc(self, document: str):
        return self.client.collection(self.analytics_collection).document(document)
