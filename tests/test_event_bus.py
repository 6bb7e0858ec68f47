"""
Event bus tests
"""


def test_publish_sync_calls_subscribers_in_order(event_bus):
    from core.event_bus import EventType

    calls = []
    event_bus.subscribe(EventType.QUEUE_CHANGED, lambda data: calls.append(("first", data)))
    event_bus.subscribe(EventType.QUEUE_CHANGED, lambda data: calls.append(("second", data)))

    assert event_bus.publish_sync(EventType.QUEUE_CHANGED, 3) is True
    assert calls == [("first", 3), ("second", 3)]


def test_unsubscribe(event_bus):
    from core.event_bus import EventType

    calls = []
    sub_id = event_bus.subscribe(EventType.TRACK_CHANGED, calls.append)

    assert event_bus.unsubscribe(sub_id) is True
    assert event_bus.unsubscribe(sub_id) is False

    event_bus.publish_sync(EventType.TRACK_CHANGED, "x")
    assert calls == []


def test_failing_callback_does_not_stop_others(event_bus):
    from core.event_bus import EventType

    calls = []

    def broken(_data):
        raise ValueError("subscriber bug")

    event_bus.subscribe(EventType.SETTINGS_CHANGED, broken)
    event_bus.subscribe(EventType.SETTINGS_CHANGED, calls.append)

    event_bus.publish_sync(EventType.SETTINGS_CHANGED, "new")

    assert calls == ["new"]


def test_instances_are_independent():
    from core.event_bus import EventBus, EventType

    first, second = EventBus(), EventBus()
    calls = []
    first.subscribe(EventType.QUEUE_CHANGED, calls.append)

    second.publish_sync(EventType.QUEUE_CHANGED, "other")
    first.publish_sync(EventType.QUEUE_CHANGED, "mine")

    assert calls == ["mine"]


def test_clear_drops_all_subscriptions(event_bus):
    from core.event_bus import EventType

    calls = []
    event_bus.subscribe(EventType.QUEUE_CHANGED, calls.append)
    event_bus.subscribe(EventType.TRACK_CHANGED, calls.append)

    event_bus.clear()
    event_bus.publish_sync(EventType.QUEUE_CHANGED, 1)
    event_bus.publish_sync(EventType.TRACK_CHANGED, 2)

    assert calls == []
