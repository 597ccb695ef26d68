from gameverse.events import StoreEvent, StoreEventType


def test_badge_message():
    event = StoreEvent(StoreEventType.BADGE_UNLOCKED, item_id="rps_novice", title="Rookie Thrower")
    assert event.message == "Badge Unlocked: Rookie Thrower"


def test_other_messages():
    assert StoreEvent(StoreEventType.DATA_RESET).message == "All progress has been reset"
    assert StoreEvent(StoreEventType.CHALLENGES_REFRESHED).message == "Daily challenges refreshed"
    assert StoreEvent(StoreEventType.DATA_IMPORTED).message == "Progress data imported"
