"""
CLI script for sending change digest emails.

Usage:
    # Send daily digest emails (changes since yesterday 05:00, Helsinki time)
    python -m notifications.send_digests --daily-digest

    # Pin the reference time used to compute the cutoff
    python -m notifications.send_digests --daily-digest --now 2026-01-21T07:00

    # Send one user their digest on demand
    python -m notifications.send_digests --user-id 7f0c...

    # Dry run (render, don't actually send emails)
    python -m notifications.send_digests --daily-digest --dry-run
"""

import argparse
import logging
import sys

from notifications.dispatcher import Dispatcher
from shared.config import get_timezone
from shared.errors import NotFoundError, NotificationError, NotModifiedError
from shared.utils import parse_date_string, print_summary


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Send MSCR change digest emails")

    parser.add_argument(
        "--daily-digest", action="store_true", help="Send daily digest emails to all subscribers"
    )

    parser.add_argument(
        "--user-id",
        type=str,
        help="Send the digest to a single user on demand",
    )

    parser.add_argument(
        "--now",
        type=str,
        help="Reference time for the cutoff (defaults to now; naive times use NOTIFICATION_TIMEZONE)",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Dry run mode (don't actually send emails)",
    )

    args = parser.parse_args(argv)

    if not args.daily_digest and not args.user_id:
        parser.error("Must specify --daily-digest or --user-id")

    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    now = None
    if args.now:
        now = parse_date_string(args.now, get_timezone())
        if now is None:
            parser.error(f"Could not parse --now value: {args.now}")

    dispatcher = Dispatcher(dry_run=args.dry_run)

    if args.user_id:
        try:
            dispatcher.notify_user(args.user_id, now=now)
        except NotFoundError:
            print(f"  ⚠️  User {args.user_id} not found or not on daily digests")
            return 1
        except NotModifiedError:
            print(f"  ⊘ Nothing changed for user {args.user_id}")
            return 1
        except NotificationError as e:
            print(f"  ✗ Failed to notify user {args.user_id}: {e}")
            return 1
        print(f"  ✓ Sent digest to user {args.user_id}")
        return 0

    report = dispatcher.run_scheduled_pass(now=now)
    for user_id, error in report.failed.items():
        print(f"  ✗ Failed to send to user {user_id}: {error}")
    print_summary(report.cutoff, report.stats["sent"], report.stats["failed"], report.dry_run)
    return 0 if report.ok else 1


if __name__ == "__main__":
    sys.exit(main())
