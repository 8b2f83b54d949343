"""
Configuration settings for GuestPulse.

Centralized configuration for the store, the response composer and the
analytics windows. Secrets and deployment-specific values come from
environment variables.
"""

import os
from pathlib import Path

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent
OUTPUT_ROOT = Path(os.getenv("GUESTPULSE_OUTPUT_ROOT", str(PROJECT_ROOT / "output")))

# API Configuration
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY", "")

# Firestore
FIRESTORE_PROJECT = os.getenv("FIRESTORE_PROJECT") or None  # None lets the client infer it
FEEDBACK_COLLECTION = os.getenv("FEEDBACK_COLLECTION", "feedbacks")
ANALYTICS_COLLECTION = os.getenv("ANALYTICS_COLLECTION", "analytics")
TRENDS_DOCUMENT = "ratingTrends"
SUMMARY_DOCUMENT = "feedbackSummary"

# LLM Models
COMPOSER_MODEL = os.getenv("COMPOSER_MODEL", "gemini-1.5-flash")
MAX_OUTPUT_TOKENS = 500

# Temperature settings per task
RESPONSE_TEMPERATURE = 0.7
SUMMARY_TEMPERATURE = 0.3
TRANSLATION_TEMPERATURE = 0.2

COMPOSER_MAX_RETRIES = int(os.getenv("COMPOSER_MAX_RETRIES", "2"))

# Analytics windows (days)
TREND_SERIES_DAYS = 30
RECENT_WINDOW_DAYS = 7
MONTH_WINDOW_DAYS = 30
SUMMARY_WINDOW_DAYS = 30
SUMMARY_PERIOD_LABEL = "Past 30 days"

# Guest history passed to the composer
GUEST_HISTORY_LIMIT = 3

# Resort
RESORT_NAME = "Kuriftu Resort"

FEEDBACK_CATEGORIES = [
    "Room Comfort",
    "Staff Service",
    "Dining Experience",
    "Water Park",
    "Spa Services",
    "Family Facilities",
    "Events & Weddings",
    "Nature & Views",
    "Security & Safety",
    "Value for Money",
]

# Dashboard
RECENT_FEEDBACK_LIMIT = 5

# Demo data
MOCK_FEEDBACK_COUNT = 60
MOCK_FEEDBACK_DAYS = 45

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE = "guestpulse.log"
