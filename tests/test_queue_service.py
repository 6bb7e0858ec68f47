"""
Queue service tests
"""

import random

import pytest

from fakes import make_track, make_tracks


@pytest.fixture
def queue(event_bus):
    from services.queue_service import QueueService

    return QueueService(event_bus, rng=random.Random(42))


def ids(tracks):
    return [t.id for t in tracks]


class TestNavigation:
    def test_advance_pops_head_and_records_history(self, queue):
        queue.enqueue(make_tracks([1, 2, 3]))

        assert queue.advance().id == 1
        assert queue.advance().id == 2

        assert queue.current_track.id == 2
        assert ids(queue.queue) == [3]
        assert ids(queue.history) == [1]

    def test_advance_past_end_clears_current(self, queue):
        queue.enqueue(make_tracks([1]))
        queue.advance()

        assert queue.advance() is None
        assert queue.current_track is None
        assert ids(queue.history) == [1]

    def test_advance_on_empty_state_is_noop(self, queue):
        assert queue.advance() is None
        assert queue.history == []

    def test_repeat_one_keeps_current(self, queue):
        from models.queue_state import RepeatMode

        queue.enqueue(make_tracks([1, 2]))
        queue.advance()
        queue.set_repeat_mode(RepeatMode.ONE)

        assert queue.advance().id == 1
        assert ids(queue.queue) == [2]

    def test_repeat_all_recycles_history(self, queue):
        from models.queue_state import RepeatMode

        queue.enqueue(make_tracks([1, 2]))
        queue.set_repeat_mode(RepeatMode.ALL)
        queue.advance()
        queue.advance()

        assert queue.advance().id == 1
        assert ids(queue.queue) == [2]
        assert queue.history == []

    def test_go_back_returns_current_to_queue_front(self, queue):
        queue.enqueue(make_tracks([1, 2, 3]))
        queue.advance()
        queue.advance()

        assert queue.go_back().id == 1
        assert queue.current_track.id == 1
        assert ids(queue.queue) == [2, 3]

    def test_go_back_without_history_is_noop(self, queue):
        queue.play_now(make_track(1))

        assert queue.go_back() is None
        assert queue.current_track.id == 1

    def test_play_now_leaves_queue_untouched(self, queue):
        queue.enqueue(make_tracks([1, 2]))
        queue.play_now(make_track(9))
        queue.play_now(make_track(8))

        assert queue.current_track.id == 8
        assert ids(queue.history) == [9]
        assert ids(queue.queue) == [1, 2]

    def test_play_from_queue_discards_earlier_entries(self, queue):
        queue.enqueue(make_tracks([1, 2, 3, 4]))

        assert queue.play_from_queue(2).id == 3
        assert ids(queue.queue) == [4]
        assert queue.history == []


class TestMutations:
    def test_enqueue_without_duplicate_check_keeps_everything(self, queue):
        queue.enqueue(make_tracks([1, 2]))
        queue.enqueue(make_tracks([2, 2]))

        assert ids(queue.queue) == [1, 2, 2, 2]

    def test_enqueue_with_duplicate_check(self, queue):
        queue.play_now(make_track(1))
        queue.enqueue(make_tracks([2]))

        added = queue.enqueue(make_tracks([1, 2, 3, 3, 4]), check_duplicates=True)

        assert ids(added) == [3, 4]
        assert ids(queue.queue) == [2, 3, 4]

    def test_enqueue_next_inserts_at_head(self, queue):
        queue.enqueue(make_tracks([1, 2]))
        queue.enqueue_next(make_tracks([8, 9]))

        assert ids(queue.queue) == [8, 9, 1, 2]

    def test_remove_and_clear(self, queue):
        queue.play_now(make_track(7))
        queue.enqueue(make_tracks([1, 2, 3]))

        assert queue.remove(1).id == 2
        assert ids(queue.queue) == [1, 3]

        queue.clear()
        assert queue.queue == []
        assert queue.current_track.id == 7

    def test_reorder(self, queue):
        queue.enqueue(make_tracks([1, 2, 3, 4]))
        queue.reorder(0, 2)

        assert ids(queue.queue) == [2, 3, 1, 4]

    @pytest.mark.parametrize("operation", [
        lambda q: q.remove(5),
        lambda q: q.remove(-1),
        lambda q: q.play_from_queue(3),
        lambda q: q.reorder(0, 3),
        lambda q: q.reorder(7, 0),
    ])
    def test_invalid_index_leaves_state_unchanged(self, queue, operation):
        from models.queue_state import QueueIndexError

        queue.enqueue(make_tracks([1, 2, 3]))
        before = queue.snapshot()

        with pytest.raises(QueueIndexError):
            operation(queue)

        assert queue.snapshot() == before

    def test_exclusion_ids_cover_current_and_queue(self, queue):
        queue.play_now(make_track(1))
        queue.enqueue(make_tracks([2, 3]))

        assert queue.exclusion_ids() == {1, 2, 3}


class TestShuffle:
    def test_shuffle_then_unshuffle_restores_order(self, queue):
        queue.enqueue(make_tracks(range(1, 11)))

        assert queue.toggle_shuffle() is True
        assert sorted(ids(queue.queue)) == list(range(1, 11))

        assert queue.toggle_shuffle() is False
        assert ids(queue.queue) == list(range(1, 11))

    def test_unshuffle_after_edits(self, queue):
        queue.enqueue(make_tracks([1, 2, 3, 4, 5]))
        queue.toggle_shuffle()

        position = ids(queue.queue).index(3)
        queue.remove(position)
        queue.enqueue(make_tracks([6, 7]))
        queue.toggle_shuffle()

        assert ids(queue.queue) == [1, 2, 4, 5, 6, 7]

    def test_unshuffle_after_reorder(self, queue):
        queue.enqueue(make_tracks([1, 2, 3, 4]))
        queue.toggle_shuffle()
        queue.reorder(0, 3)
        queue.toggle_shuffle()

        assert ids(queue.queue) == [1, 2, 3, 4]

    def test_unshuffle_matches_duplicate_ids_one_for_one(self, queue):
        queue.enqueue(make_tracks([1, 2, 1, 3]))
        queue.toggle_shuffle()
        queue.toggle_shuffle()

        assert ids(queue.queue) == [1, 2, 1, 3]

    def test_replace_queue_turns_shuffle_off(self, queue, event_bus):
        from core.event_bus import EventType

        states = []
        event_bus.subscribe(EventType.SHUFFLE_CHANGED, states.append)
        queue.enqueue(make_tracks([1, 2, 3]))
        queue.toggle_shuffle()

        queue.replace_queue(make_tracks([4, 5]))

        assert queue.is_shuffled is False
        assert ids(queue.queue) == [4, 5]
        assert states == [True, False]


class TestEvents:
    def test_queue_changed_carries_snapshot(self, queue, event_bus):
        from core.event_bus import EventType

        received = []
        event_bus.subscribe(EventType.QUEUE_CHANGED, received.append)

        queue.enqueue(make_tracks([1, 2]))

        assert len(received) == 1
        assert received[0].queue_length == 2
        assert ids(received[0].queue) == [1, 2]

    def test_advance_publishes_track_changed(self, queue, event_bus):
        from core.event_bus import EventType

        received = []
        event_bus.subscribe(EventType.TRACK_CHANGED, received.append)
        queue.enqueue(make_tracks([1]))

        queue.advance()

        assert [s.current_track.id for s in received] == [1]

    def test_subscriber_may_call_back_into_service(self, queue, event_bus):
        from core.event_bus import EventType

        lengths = []
        event_bus.subscribe(EventType.QUEUE_CHANGED, lambda snapshot: lengths.append(queue.queue_length))

        queue.enqueue(make_tracks([1, 2]))

        assert lengths == [2]

    def test_cycle_repeat_mode_publishes(self, queue, event_bus):
        from core.event_bus import EventType
        from models.queue_state import RepeatMode

        modes = []
        event_bus.subscribe(EventType.REPEAT_MODE_CHANGED, modes.append)

        queue.cycle_repeat_mode()
        queue.cycle_repeat_mode()
        queue.cycle_repeat_mode()

        assert modes == [RepeatMode.ALL, RepeatMode.ONE, RepeatMode.NONE]
