"""
Structured store events.

ProgressStore emits these instead of firing UI notifications itself; a
presentation layer subscribes and decides how to show them.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional


class StoreEventType(Enum):
    BADGE_UNLOCKED = "badge_unlocked"
    CHALLENGE_COMPLETED = "challenge_completed"
    CHALLENGES_REFRESHED = "challenges_refreshed"
    DATA_RESET = "data_reset"
    DATA_IMPORTED = "data_imported"


@dataclass(frozen=True)
class StoreEvent:
    type: StoreEventType
    item_id: Optional[str] = None
    title: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def message(self) -> str:
        """Short human-readable line, e.g. for a toast."""
        if self.type == StoreEventType.BADGE_UNLOCKED:
            return f"Badge Unlocked: {self.title}"
        if self.type == StoreEventType.CHALLENGE_COMPLETED:
            return f"Challenge Completed: {self.title} (+{self.details.get('reward_coins', 0)} coins)"
        if self.type == StoreEventType.CHALLENGES_REFRESHED:
            return "Daily challenges refreshed"
        if self.type == StoreEventType.DATA_RESET:
            return "All progress has been reset"
        return "Progress data imported"


StoreListener = Callable[[StoreEvent], None]
