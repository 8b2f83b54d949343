"""
Mock feedback generator.

Produces synthetic resort feedback for seeding an empty development
collection. Guest submission itself happens outside GuestPulse.
"""

import logging
from typing import List, Optional
from datetime import datetime, timedelta

from guestpulse.models.feedback import FeedbackRecord, FeedbackStatus

logger = logging.getLogger(__name__)


# (comment, rating, category)
TEMPLATES = [
    ("The room was spacious and the fireplace made evenings cozy.", 5, "Room Comfort"),
    ("Air conditioning in our room was noisy all night.", 2, "Room Comfort"),
    ("Mosquito net had holes, we were bitten.", 1, "Room Comfort"),

    ("Reception staff were incredibly welcoming.", 5, "Staff Service"),
    ("Waited 40 minutes at check-in with no explanation.", 2, "Staff Service"),
    ("Housekeeping skipped our room two days in a row.", 2, "Staff Service"),

    ("Breakfast buffet had great Ethiopian options.", 5, "Dining Experience"),
    ("Summit restaurant food arrived cold.", 2, "Dining Experience"),
    ("Dinner was good but overpriced.", 3, "Dining Experience"),

    ("Kids loved the water park slides!", 5, "Water Park"),
    ("Water park was overcrowded and lifeguards were few.", 2, "Water Park"),

    ("Best massage I have ever had.", 5, "Spa Services"),
    ("Spa booking system lost our reservation.", 2, "Spa Services"),

    ("Playground is great but needs more shade.", 4, "Family Facilities"),
    ("Our wedding in the stone hall was perfect.", 5, "Events & Weddings"),
    ("Lake view at sunset was breathtaking.", 5, "Nature & Views"),
    ("Gate security checked every car thoroughly, felt safe.", 4, "Security & Safety"),
    ("Too expensive for what is offered.", 2, "Value for Money"),
    ("Worth every birr for the weekend package.", 4, "Value for Money"),
]

GUESTS = [
    ("Abebe Kebede", "abebe@example.com"),
    ("Sara Tesfaye", "sara@example.com"),
    ("Jean Dupont", "jean@example.com"),
    ("Layla Hassan", "layla@example.com"),
    ("Michael Brown", "michael@example.com"),
]


class MockFeedbackGenerator:
    """
    Generates realistic feedback spread over the trailing days.

    Output is deterministic for the same count, days and reference time:
    templates, guests and statuses cycle rather than being sampled.
    """

    def generate(
        self,
        count: int,
        days: int = 30,
        now: Optional[datetime] = None
    ) -> List[FeedbackRecord]:
        """
        Generate synthetic feedback records.

        Args:
            count: Number of records to generate
            days: Spread records over this many trailing days
            now: Reference time, defaults to now

        Returns:
            List of FeedbackRecord objects (feedback_id left empty for the store to assign)
        """
        if count < 0 or days < 1:
            raise ValueError("count must be >= 0 and days must be >= 1")

        now = now or datetime.now()
        statuses = [FeedbackStatus.PENDING, FeedbackStatus.PENDING, FeedbackStatus.REVIEWED]

        records = []
        for i in range(count):
            comment, rating, category = TEMPLATES[i % len(TEMPLATES)]
            user_name, user_email = GUESTS[i % len(GUESTS)]

            # Walk backwards one day per record, wrapping at the window edge
            created_at = now - timedelta(days=i % days, hours=(i * 5) % 24)

            records.append(FeedbackRecord(
                feedback_id="",
                rating=rating,
                comment=comment,
                category=category,
                status=statuses[i % len(statuses)],
                created_at=created_at,
                updated_at=created_at,
                user_id=f"guest_{i % len(GUESTS)}",
                user_name=user_name,
                user_email=user_email
            ))

        logger.info(f"Generated {len(records)} mock feedbacks over {days} days")
        return records
