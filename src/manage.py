"""Site Reviews management CLI.

Creates and drops the database schema and lets a moderator work through the
pending queue. Moderation goes through the same command as the HTTP routes.

Usage:
    python src/manage.py setup-db                                  # Create all tables
    python src/manage.py drop-db                                   # Drop all tables
    python src/manage.py queue [--site S --entity E --slug X]      # List pending reviews
    python src/manage.py approve <review_id> --moderator <id>      # Publish a review
    python src/manage.py reject <review_id> --moderator <id> --reason "..."
"""

import argparse
import os
import sys


def setup_database(domain):
    """Create the database schema."""
    from site_reviews.utils.db import setup_db

    print("Creating site_reviews database schema...")
    setup_db(domain)
    print("  site_reviews schema ready.")
    print("Done.")


def drop_database(domain):
    """Drop the database schema."""
    from site_reviews.utils.db import drop_db

    print("Dropping site_reviews database schema...")
    drop_db(domain)
    print("  site_reviews schema dropped.")
    print("Done.")


def show_queue(site=None, entity=None, slug=None):
    """Print pending reviews, oldest first."""
    from site_reviews.projections.moderation_queue import pending_reviews
    from site_reviews.review.review import ReviewScope

    scope = ReviewScope.parse(site, entity, slug) if (site or entity or slug) else None
    items = pending_reviews(scope)
    if not items:
        print("No pending reviews.")
        return

    for item in items:
        print(f"{item.review_id}  {item.scope.as_path()}  {item.rating}/5  {item.display_name}")
        print(f"    {item.body}")
    print(f"{len(items)} pending.")


def moderate(review_id, moderator_id, action, reason=None):
    """Apply one moderation decision."""
    from protean.utils.globals import current_domain

    from site_reviews.review.moderation import ModerateReview

    status = current_domain.process(
        ModerateReview(review_id=review_id, moderator_id=moderator_id, action=action, reason=reason),
        asynchronous=False,
    )
    print(f"Review {review_id} is now {status}.")


def build_parser():
    parser = argparse.ArgumentParser(description="Site Reviews management")
    parser.add_argument("--env", help="Config environment (default: PROTEAN_ENV)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    queue_parser = subparsers.add_parser("queue", help="List pending reviews, oldest first")
    queue_parser.add_argument("--site", help="Site slug")
    queue_parser.add_argument("--entity", help="Entity type")
    queue_parser.add_argument("--slug", help="Entity slug")

    approve_parser = subparsers.add_parser("approve", help="Approve a pending review")
    approve_parser.add_argument("review_id")
    approve_parser.add_argument("--moderator", required=True, help="Moderator id recorded in the audit log")
    approve_parser.add_argument("--notes", help="Optional moderation notes")

    reject_parser = subparsers.add_parser("reject", help="Reject a pending review")
    reject_parser.add_argument("review_id")
    reject_parser.add_argument("--moderator", required=True, help="Moderator id recorded in the audit log")
    reject_parser.add_argument("--reason", required=True, help="Why the review is rejected")

    return parser


def run(args, domain) -> int:
    """Run a parsed command against an initialized domain."""
    from protean.exceptions import ProteanException

    from site_reviews.exceptions import SiteReviewsError, error_message

    try:
        with domain.domain_context():
            if args.command == "setup-db":
                setup_database(domain)
            elif args.command == "drop-db":
                drop_database(domain)
            elif args.command == "queue":
                show_queue(args.site, args.entity, args.slug)
            elif args.command == "approve":
                moderate(args.review_id, args.moderator, "Approve", args.notes)
            elif args.command == "reject":
                moderate(args.review_id, args.moderator, "Reject", args.reason)
    except (SiteReviewsError, ProteanException) as exc:
        print(f"Error: {error_message(exc)}", file=sys.stderr)
        return 1

    return 0


def main(argv=None):
    args = build_parser().parse_args(argv)
    if args.env:
        # Protean reads the overlay when the domain module is first imported
        os.environ["PROTEAN_ENV"] = args.env

    from site_reviews.domain import site_reviews
    from site_reviews.utils.logging import configure_logging

    print("Initializing site_reviews domain...")
    site_reviews.init()
    configure_logging(level="WARNING")
    return run(args, site_reviews)


if __name__ == "__main__":
    sys.exit(main())
