"""
RAM-only chat transcript for the assistant panel.

Contract:
- No disk writes.
- Fixed-size ring buffer; the oldest messages fall off.
- Always starts with (and after clear, holds only) one assistant message.
"""

from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Deque, List, Optional
import logging

logger = logging.getLogger(__name__)

DEFAULT_GREETING = "Hi! I'm your GameVerse Buddy. How can I help you today?"
CLEARED_MESSAGE = "Chat history cleared. How can I help you?"


@dataclass
class ChatMessage:
    role: str
    content: str
    timestamp: str


class ChatHistory:
    def __init__(
        self,
        max_messages: int = 50,
        greeting: str = DEFAULT_GREETING,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.max_messages = max(1, int(max_messages))
        self._clock = clock or datetime.now
        self._messages: Deque[ChatMessage] = deque(maxlen=self.max_messages)
        self.add("assistant", greeting)

    def add(self, role: str, content: str) -> ChatMessage:
        if role not in ("user", "assistant"):
            raise ValueError(f"role must be user or assistant, got {role!r}")
        message = ChatMessage(role, content, self._clock().isoformat(timespec="seconds"))
        self._messages.append(message)
        return message

    def add_user(self, content: str) -> ChatMessage:
        return self.add("user", content)

    def add_assistant(self, content: str) -> ChatMessage:
        return self.add("assistant", content)

    def clear(self) -> None:
        self._messages.clear()
        self.add("assistant", CLEARED_MESSAGE)
        logger.info("[CHAT] History cleared")

    def messages(self) -> List[ChatMessage]:
        return list(self._messages)

    def last(self) -> Optional[ChatMessage]:
        return self._messages[-1] if self._messages else None

    def __len__(self) -> int:
        return len(self._messages)
