"""GameVerse version registry.

Single source of truth for runtime versioning.
"""

CURRENT_VERSION = "1.2.0"
CURRENT_MILESTONE = "voice-buddy+streak-unification"
CURRENT_DATE = "2026-10-12"

VERSION_HISTORY = [
    {
        "version": "1.0.0",
        "date": "2026-08-03",
        "notes": "Progress store, badge catalog, daily challenges",
    },
    {
        "version": "1.1.0",
        "date": "2026-09-07",
        "notes": "Voice buddy: wake word, intent resolver, dispatcher",
    },
    {
        "version": "1.2.0",
        "date": CURRENT_DATE,
        "notes": "Win streak folded into game progress; restart backoff cap; export/import",
    },
]


def get_version():
    return {
        "version": CURRENT_VERSION,
        "milestone": CURRENT_MILESTONE,
        "date": CURRENT_DATE,
        "history": VERSION_HISTORY,
    }
