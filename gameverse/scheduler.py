"""
Challenge Refresh Scheduler.

Pure functions. All challenges of a generation share one expiresAt, so only
the first element is checked. "Today" is local wall-clock time taken from the
datetime the caller passes in.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from gameverse.catalog import CHALLENGE_TEMPLATES
from gameverse.models import Challenge

logger = logging.getLogger(__name__)


def start_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def next_midnight(now: datetime) -> datetime:
    return start_of_day(now) + timedelta(days=1)


def today_key(now: datetime) -> str:
    """ISO date used as the dailyLogs key."""
    return now.date().isoformat()


def timestamp(now: datetime) -> str:
    return now.isoformat(timespec="seconds")


def parse_timestamp(value: str) -> Optional[datetime]:
    """
    Parse a stored ISO timestamp into a naive local datetime.

    Accepts the "Z"/offset forms written by older exports. Returns None for
    anything unparseable.
    """
    if not value:
        return None
    text = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        parsed = datetime.fromisoformat(text)
    except (TypeError, ValueError):
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def needs_refresh(challenges: List[Challenge], now: datetime) -> bool:
    """
    True when the list is empty or its generation has expired.

    expiresAt is always a midnight, so a generation that expired at today's
    midnight counts as stale. The check is <= rather than a strict <, which
    would keep yesterday's set alive for the whole of today; it matches
    is_expired(), where a challenge is expired from expiresAt onwards.
    """
    if not challenges:
        return True
    expires = parse_timestamp(challenges[0].expires_at)
    if expires is None:
        logger.warning(f"[SCHEDULER] Unreadable expiresAt {challenges[0].expires_at!r}; regenerating")
        return True
    return expires <= start_of_day(now)


def generate_challenges(now: datetime) -> List[Challenge]:
    """New generation from the templates, expiring at the next midnight."""
    expires_at = timestamp(next_midnight(now))
    return [Challenge.from_template(t, expires_at) for t in CHALLENGE_TEMPLATES]


def refresh_challenges(challenges: List[Challenge], now: datetime) -> List[Challenge]:
    """Return challenges unchanged if still fresh, otherwise a new generation."""
    if needs_refresh(challenges, now):
        logger.info("[SCHEDULER] Challenge generation expired; generating a new set")
        return generate_challenges(now)
    return challenges


def is_expired(challenge: Challenge, now: datetime) -> bool:
    expires = parse_timestamp(challenge.expires_at)
    return expires is None or expires <= now


def time_until_reset(now: datetime) -> timedelta:
    return next_midnight(now) - now


def format_countdown(remaining: timedelta) -> str:
    """'5h 03m 09s' style countdown for the challenges screen."""
    total = max(0, int(remaining.total_seconds()))
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours}h {minutes:02d}m {seconds:02d}s"
