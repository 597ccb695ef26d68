from datetime import datetime, timedelta

from gameverse.catalog import CHALLENGE_TEMPLATES
from gameverse.scheduler import (
    format_countdown,
    generate_challenges,
    is_expired,
    needs_refresh,
    next_midnight,
    parse_timestamp,
    refresh_challenges,
    time_until_reset,
    today_key,
)

NOON = datetime(2026, 10, 18, 12, 0, 0)


def test_empty_list_needs_refresh():
    assert needs_refresh([], NOON)


def test_generation_expires_at_next_midnight():
    challenges = generate_challenges(NOON)
    assert len(challenges) == len(CHALLENGE_TEMPLATES)
    assert {c.expires_at for c in challenges} == {"2026-10-19T00:00:00"}
    assert not any(c.completed for c in challenges)


def test_refresh_same_day_returns_identical_list():
    challenges = generate_challenges(NOON)
    assert refresh_challenges(challenges, NOON) is challenges
    later = NOON.replace(hour=23, minute=59, second=59)
    assert refresh_challenges(challenges, later) is challenges


def test_yesterdays_generation_is_replaced():
    yesterday = generate_challenges(NOON - timedelta(days=1))
    yesterday[0].completed = True
    yesterday[0].completed_at = "2026-10-17T09:00:00"

    fresh = refresh_challenges(yesterday, NOON)
    assert fresh is not yesterday
    assert not any(c.completed for c in fresh)
    assert {c.expires_at for c in fresh} == {"2026-10-19T00:00:00"}


def test_generation_stale_from_midnight():
    challenges = generate_challenges(NOON)
    assert not needs_refresh(challenges, datetime(2026, 10, 18, 23, 59, 59))
    assert needs_refresh(challenges, datetime(2026, 10, 19, 0, 0, 0))


def test_unreadable_expiry_forces_regeneration():
    challenges = generate_challenges(NOON)
    challenges[0].expires_at = "sometime"
    assert needs_refresh(challenges, NOON)


def test_is_expired_at_deadline():
    challenge = generate_challenges(NOON)[0]
    assert not is_expired(challenge, NOON)
    assert is_expired(challenge, datetime(2026, 10, 19))


def test_parse_timestamp_forms():
    assert parse_timestamp("2026-10-19T00:00:00") == datetime(2026, 10, 19)
    assert parse_timestamp("") is None
    assert parse_timestamp("garbage") is None
    utc = parse_timestamp("2026-10-19T00:00:00Z")
    assert utc is not None and utc.tzinfo is None


def test_date_helpers():
    assert today_key(NOON) == "2026-10-18"
    assert next_midnight(NOON) == datetime(2026, 10, 19)
    assert time_until_reset(NOON) == timedelta(hours=12)


def test_format_countdown():
    assert format_countdown(timedelta(hours=5, minutes=3, seconds=9)) == "5h 03m 09s"
    assert format_countdown(timedelta(seconds=-3)) == "0h 00m 00s"
