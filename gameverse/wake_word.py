"""
Wake-word spotting over recognizer transcripts.

The platform recognizer does the audio work; this module only looks for the
"hey buddy" trigger phrase in text, tolerating the near-homophones speech
engines commonly produce ("hey body", "hay buddy", "hey but", "hey bud").

If the phrase is followed by more words, those words are the command.
"""

import re
from dataclasses import dataclass

WAKE_PHRASE = "hey buddy"

# Longest alternatives first so "buddy" is not cut to "bud".
_WAKE_PATTERN = re.compile(
    r"\b(?:hey|hay)\s+(?:buddy|buddie|budy|body|bud|but)\b[\s,.!?]*(?P<command>.*)$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class WakeMatch:
    detected: bool
    command: str = ""

    @property
    def has_command(self) -> bool:
        return bool(self.command)


NO_WAKE = WakeMatch(False)


def detect_wake_word(transcript: str) -> WakeMatch:
    """Find the wake phrase anywhere in transcript and split off the trailing command."""
    if not transcript:
        return NO_WAKE
    match = _WAKE_PATTERN.search(transcript.strip())
    if not match:
        return NO_WAKE
    command = match.group("command").strip().strip(",.!?").strip()
    return WakeMatch(True, command.lower())


def strip_wake_word(text: str) -> str:
    """Command text after the wake phrase, or the whole text when there is none (lowercased, trimmed)."""
    wake = detect_wake_word(text)
    if wake.detected:
        return wake.command
    return text.strip().lower()
