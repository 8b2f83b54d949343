"""
GuestPulse - Guest Feedback Dashboard

CLI entry point for the dashboard backend.
"""

import argparse
import json
import logging
import sys

from google.cloud import firestore

from guestpulse.agents.response_composer import ResponseComposer
from guestpulse.errors import GuestPulseError
from guestpulse.models.feedback import FeedbackStatus, Language
from guestpulse.orchestrator import FeedbackDashboard
from guestpulse.utils.storage import FirestoreFeedbackStore
import config.settings as settings

# Commands that call the LLM
AI_COMMANDS = {"summary", "respond"}


def setup_logging(log_level: str = "INFO"):
    """Configure logging for the entire application."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format=settings.LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(settings.LOG_FILE)
        ]
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="GuestPulse - Guest Feedback Analytics",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Dashboard statistics, exported as CSV
  python main.py stats --export output/

  # Recompute and cache 7-day vs 30-day rating trends
  python main.py trends

  # Draft a French reply and save it
  python main.py respond abc123 --language French --save

Note: Set GOOGLE_API_KEY before running summary or respond.
Firestore credentials come from GOOGLE_APPLICATION_CREDENTIALS.
        """
    )

    parser.add_argument(
        "--log-level",
        default=settings.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Logging level (default: {settings.LOG_LEVEL})"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    stats = subparsers.add_parser("stats", help="Print dashboard statistics")
    stats.add_argument(
        "--export",
        metavar="DIR",
        nargs="?",
        const=str(settings.OUTPUT_ROOT),
        help=f"Also write trend tables as CSV to DIR (default: {settings.OUTPUT_ROOT})"
    )

    subparsers.add_parser("trends", help="Recompute and cache rating trends")
    subparsers.add_parser("summary", help="Generate and cache a 30-day feedback summary")

    listing = subparsers.add_parser("list", help="List feedbacks")
    listing.add_argument("--search", help="Search guest name, comment and category")
    listing.add_argument("--status", default="all", choices=["all", *FeedbackStatus.ALL])
    listing.add_argument("--rating", default="all", choices=["all", "1", "2", "3", "4", "5"])
    listing.add_argument("--limit", type=int, default=20)

    respond = subparsers.add_parser("respond", help="Draft (and optionally save) a reply")
    respond.add_argument("feedback_id")
    respond.add_argument("--language", default=Language.ENGLISH, choices=list(Language.ALL))
    respond.add_argument("--text", help="Save this reply instead of drafting one with AI")
    respond.add_argument("--save", action="store_true", help="Save the reply and mark responded")

    review = subparsers.add_parser("review", help="Mark a feedback as reviewed")
    review.add_argument("feedback_id")

    seed = subparsers.add_parser("seed", help="Write demo feedback to the collection")
    seed.add_argument("--count", type=int, default=settings.MOCK_FEEDBACK_COUNT)
    seed.add_argument("--days", type=int, default=settings.MOCK_FEEDBACK_DAYS)

    return parser


def build_dashboard(needs_composer: bool) -> FeedbackDashboard:
    store = FirestoreFeedbackStore(firestore.Client(project=settings.FIRESTORE_PROJECT))
    composer = ResponseComposer(api_key=settings.GOOGLE_API_KEY) if needs_composer else None
    return FeedbackDashboard(store=store, composer=composer)


def run_command(args, dashboard: FeedbackDashboard) -> None:
    if args.command == "stats":
        if args.export:
            stats, paths = dashboard.export_trend_tables(args.export)
            print(json.dumps(stats.to_dict(), indent=2))
            print(f"Trend tables: {paths['daily']}, {paths['categories']}")
        else:
            print(json.dumps(dashboard.get_stats().to_dict(), indent=2))

    elif args.command == "trends":
        trends = dashboard.refresh_trends()
        print(json.dumps(trends.to_dict(), indent=2))

    elif args.command == "summary":
        print(dashboard.generate_summary())

    elif args.command == "list":
        records = dashboard.list_feedback(search=args.search, status=args.status, rating=args.rating)
        for record in records[:args.limit]:
            created = record.created_at.strftime("%Y-%m-%d") if record.created_at else "-"
            print(f"{record.feedback_id}  {created}  {record.rating}/5  {record.status:<9}  "
                  f"{record.category or '-'}  {record.comment[:60]}")
        print(f"{len(records)} feedbacks")

    elif args.command == "respond":
        if args.text:
            dashboard.respond(args.feedback_id, args.text)
            print(f"Response saved for {args.feedback_id}")
            return
        analysis, reply = dashboard.suggest_response(args.feedback_id, args.language)
        print(reply)
        print()
        print(f"Sentiment: {analysis.sentiment_score:+.0f}")
        print(f"Top issues: {', '.join(analysis.top_issues) or '-'}")
        print(f"Recommended actions: {', '.join(analysis.recommended_actions) or '-'}")
        if args.save:
            dashboard.respond(args.feedback_id, reply, analysis)
            print(f"Response saved for {args.feedback_id}")

    elif args.command == "review":
        dashboard.mark_reviewed(args.feedback_id)
        print(f"Feedback {args.feedback_id} marked reviewed")

    elif args.command == "seed":
        ids = dashboard.seed(count=args.count, days=args.days)
        print(f"Seeded {len(ids)} feedbacks")


def main():
    """Main CLI entry point."""
    args = build_parser().parse_args()

    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    needs_composer = args.command in AI_COMMANDS and not getattr(args, "text", None)
    if needs_composer and not settings.GOOGLE_API_KEY:
        logger.error(
            "GOOGLE_API_KEY environment variable not set. "
            f"It is required for the '{args.command}' command."
        )
        sys.exit(1)

    try:
        dashboard = build_dashboard(needs_composer)
        run_command(args, dashboard)
        sys.exit(0)

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        sys.exit(1)

    except (GuestPulseError, ValueError) as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"\n{args.command} failed: {e}")
        sys.exit(1)

    except Exception as e:
        logger.error(f"{args.command} failed: {e}", exc_info=True)
        print(f"\n{args.command} failed: {e}")
        print(f"Check {settings.LOG_FILE} for details")
        sys.exit(1)


if __name__ == "__main__":
    main()
