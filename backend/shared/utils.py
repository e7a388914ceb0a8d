from datetime import datetime, time, timedelta
from zoneinfo import ZoneInfo

from dateutil import parser as date_parser

# Changes are collected from 05:00 on the previous day
CUTOFF_HOUR = 5


def parse_date_string(date_str: str, tz_name: str) -> datetime | None:
    """Parse various date formats into an aware datetime (naive input uses tz_name)."""
    if not date_str:
        return None
    try:
        dt = date_parser.parse(date_str, fuzzy=True)
    except (ValueError, OverflowError, TypeError):
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=ZoneInfo(tz_name))
    return dt


def compute_cutoff(now: datetime, tz_name: str) -> datetime:
    """
    Compute the "changed since" cutoff for a pass: yesterday at 05:00 local time.

    Args:
        now: Reference instant; naive values are taken as local to tz_name
        tz_name: IANA time zone name (e.g. "Europe/Helsinki")

    Returns:
        Timezone-aware cutoff datetime
    """
    tz = ZoneInfo(tz_name)
    local_now = now.astimezone(tz) if now.tzinfo else now.replace(tzinfo=tz)
    yesterday = local_now.date() - timedelta(days=1)
    return datetime.combine(yesterday, time(hour=CUTOFF_HOUR), tzinfo=tz)


def print_summary(cutoff: datetime, sent: int, failed: int, dry_run: bool) -> None:
    """Print digest run summary."""
    print(f"\n{'=' * 60}")
    print(f"[{datetime.now()}] Daily Digest Processing Complete{' (dry run)' if dry_run else ''}")
    print(f"{'=' * 60}")
    print(f"Changes since: {cutoff.isoformat()}")
    print(f"✓ Sent:   {sent}")
    print(f"✗ Failed: {failed}")
    print(f"Total:    {sent + failed}")
    print(f"{'=' * 60}\n")
