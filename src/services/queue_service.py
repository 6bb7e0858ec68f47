"""
Queue Service Module

Owns the playback queue, the current track, the play history and the
shuffle/repeat state. Playback itself (audio output) is not handled here;
this service only decides what plays next.
"""

from collections import Counter
from typing import Iterable, List, Optional, Set
import random
import logging
import threading

from core.event_bus import EventBus, EventType
from models.queue_state import QueueIndexError, QueueSnapshot, RepeatMode
from models.track import Track

logger = logging.getLogger(__name__)


class QueueService:
    """
    Queue Service

    The queue state machine. Every mutation is atomic under an RLock and
    publishes its events synchronously after the lock is released, so
    subscribers may call back into the service.

    Example:
        queue = QueueService(event_bus)

        queue.enqueue(tracks)
        queue.advance()          # first track becomes current
        queue.toggle_shuffle()   # permute the rest
        queue.toggle_shuffle()   # restore the original order
    """

    def __init__(self, event_bus: EventBus, rng: Optional[random.Random] = None):
        self._event_bus = event_bus
        self._rng = rng or random.Random()

        # Thread safety lock (protects every field below)
        self._lock = threading.RLock()

        self._current: Optional[Track] = None
        self._queue: List[Track] = []
        self._history: List[Track] = []

        self._shuffled: bool = False
        self._original_order: List[Track] = []
        self._repeat_mode: RepeatMode = RepeatMode.NONE

    # ===== Read-only state =====

    @property
    def current_track(self) -> Optional[Track]:
        with self._lock:
            return self._current

    @property
    def queue(self) -> List[Track]:
        """Get a copy of the playback queue"""
        with self._lock:
            return self._queue.copy()

    @property
    def history(self) -> List[Track]:
        with self._lock:
            return self._history.copy()

    @property
    def queue_length(self) -> int:
        with self._lock:
            return len(self._queue)

    @property
    def is_shuffled(self) -> bool:
        with self._lock:
            return self._shuffled

    @property
    def repeat_mode(self) -> RepeatMode:
        with self._lock:
            return self._repeat_mode

    def snapshot(self) -> QueueSnapshot:
        """Immutable view of the whole state"""
        with self._lock:
            return QueueSnapshot(
                current_track=self._current,
                queue=tuple(self._queue),
                history=tuple(self._history),
                is_shuffled=self._shuffled,
                repeat_mode=self._repeat_mode,
            )

    def exclusion_ids(self) -> Set[int]:
        """Ids of the current track and every queued track"""
        with self._lock:
            ids = {t.id for t in self._queue}
            if self._current is not None:
                ids.add(self._current.id)
            return ids

    # ===== Navigation =====

    def play_now(self, track: Track) -> None:
        """Make track current; the previous current goes to history. Queue untouched."""
        with self._lock:
            if self._current is not None:
                self._history.append(self._current)
            self._current = track
        self._publish_track_changed()

    def advance(self) -> Optional[Track]:
        """
        Move to the next track

        Returns:
            Track: The new current track, or None when playback has run out
        """
        with self._lock:
            if self._repeat_mode == RepeatMode.ONE and self._current is not None:
                return self._current

            if not self._queue and self._repeat_mode == RepeatMode.ALL:
                self._recycle_history()

            if not self._queue:
                if self._current is None:
                    return None
                self._history.append(self._current)
                self._current = None
                next_track = None
            else:
                next_track = self._queue.pop(0)
                if self._current is not None:
                    self._history.append(self._current)
                self._current = next_track

        self._publish_queue_changed()
        self._publish_track_changed()
        return next_track

    def _recycle_history(self) -> None:
        """Repeat-all refill: history (oldest first) becomes the queue."""
        if self._current is not None:
            self._history.append(self._current)
            self._current = None
        if not self._history:
            return
        logger.debug("Repeat all: recycling %d tracks from history", len(self._history))
        self._queue = self._history
        self._history = []

    def go_back(self) -> Optional[Track]:
        """
        Return to the previous track

        The current track is pushed back to the front of the queue.
        No-op when history is empty.
        """
        with self._lock:
            if not self._history:
                return None
            previous = self._history.pop()
            if self._current is not None:
                self._queue.insert(0, self._current)
            self._current = previous

        self._publish_queue_changed()
        self._publish_track_changed()
        return previous

    def play_from_queue(self, index: int) -> Track:
        """
        Jump to a queued track

        Entries before index are consumed (not stored in history).

        Raises:
            QueueIndexError: If index is outside the queue
        """
        with self._lock:
            self._check_index(index)
            track = self._queue[index]
            self._queue = self._queue[index + 1:]
            if self._current is not None:
                self._history.append(self._current)
            self._current = track

        self._publish_queue_changed()
        self._publish_track_changed()
        return track

    # ===== Queue mutations =====

    def enqueue(self, tracks: Iterable[Track], check_duplicates: bool = False) -> List[Track]:
        """
        Append tracks to the queue tail

        Args:
            tracks: Tracks to add
            check_duplicates: Drop tracks whose id is already current, queued
                or repeated earlier in the same batch

        Returns:
            List[Track]: The tracks actually added
        """
        with self._lock:
            if check_duplicates:
                seen = {t.id for t in self._queue}
                if self._current is not None:
                    seen.add(self._current.id)
                added = []
                for track in tracks:
                    if track.id in seen:
                        continue
                    seen.add(track.id)
                    added.append(track)
            else:
                added = list(tracks)

            if not added:
                return []
            self._queue.extend(added)

        self._publish_queue_changed()
        return added

    def enqueue_next(self, tracks: Iterable[Track]) -> List[Track]:
        """Insert tracks at the queue head (they play right after the current track)"""
        added = list(tracks)
        if not added:
            return []
        with self._lock:
            self._queue[0:0] = added
        self._publish_queue_changed()
        return added

    def remove(self, index: int) -> Track:
        """
        Remove a track from the queue

        Raises:
            QueueIndexError: If index is outside the queue
        """
        with self._lock:
            self._check_index(index)
            removed = self._queue.pop(index)
        self._publish_queue_changed()
        return removed

    def clear(self) -> None:
        """Empty the queue (current track and history are kept)"""
        with self._lock:
            self._queue.clear()
        self._publish_queue_changed()

    def reorder(self, old_index: int, new_index: int) -> None:
        """
        Move a queued track to a new position

        The shuffle snapshot is tracked by id, so reordering never breaks
        un-shuffling.

        Raises:
            QueueIndexError: If either index is outside the queue
        """
        with self._lock:
            self._check_index(old_index)
            self._check_index(new_index)
            if old_index == new_index:
                return
            track = self._queue.pop(old_index)
            self._queue.insert(new_index, track)
        self._publish_queue_changed()

    def replace_queue(self, tracks: Iterable[Track]) -> None:
        """Replace the whole queue; shuffle is switched off and its snapshot dropped"""
        with self._lock:
            self._queue = list(tracks)
            was_shuffled = self._shuffled
            self._shuffled = False
            self._original_order = []

        if was_shuffled:
            self._event_bus.publish_sync(EventType.SHUFFLE_CHANGED, False)
        self._publish_queue_changed()

    def restore(self, snapshot: QueueSnapshot) -> None:
        """
        Replace the whole state with a previously saved snapshot

        The pre-shuffle order is not part of a snapshot; a restored shuffled
        queue un-shuffles to its restored order.
        """
        with self._lock:
            self._current = snapshot.current_track
            self._queue = list(snapshot.queue)
            self._history = list(snapshot.history)
            self._shuffled = snapshot.is_shuffled
            self._original_order = list(snapshot.queue) if snapshot.is_shuffled else []
            self._repeat_mode = snapshot.repeat_mode

        self._publish_queue_changed()
        self._publish_track_changed()

    # ===== Modes =====

    def toggle_shuffle(self) -> bool:
        """
        Toggle shuffle

        Enabling snapshots the queue and permutes it (Fisher-Yates). Disabling
        restores the snapshot order for the tracks still queued; tracks added
        while shuffled keep their relative order at the end.

        Returns:
            bool: The new shuffle state
        """
        with self._lock:
            if self._shuffled:
                self._queue = self._restore_original_order()
                self._original_order = []
                self._shuffled = False
            else:
                self._original_order = list(self._queue)
                self._rng.shuffle(self._queue)
                self._shuffled = True
            shuffled = self._shuffled

        self._event_bus.publish_sync(EventType.SHUFFLE_CHANGED, shuffled)
        self._publish_queue_changed()
        return shuffled

    def _restore_original_order(self) -> List[Track]:
        # Multiset by id: duplicates of one id are matched one-for-one
        present = Counter(t.id for t in self._queue)
        restored: List[Track] = []
        for track in self._original_order:
            if present[track.id] > 0:
                present[track.id] -= 1
                restored.append(track)

        unmatched = Counter(t.id for t in restored)
        leftovers: List[Track] = []
        for track in self._queue:
            if unmatched[track.id] > 0:
                unmatched[track.id] -= 1
            else:
                leftovers.append(track)
        return restored + leftovers

    def cycle_repeat_mode(self) -> RepeatMode:
        """none -> all -> one -> none"""
        with self._lock:
            mode = self._repeat_mode.next()
        self.set_repeat_mode(mode)
        return mode

    def set_repeat_mode(self, mode: RepeatMode) -> None:
        with self._lock:
            if mode == self._repeat_mode:
                return
            self._repeat_mode = mode
        self._event_bus.publish_sync(EventType.REPEAT_MODE_CHANGED, mode)

    # ===== Internals =====

    def _check_index(self, index: int) -> None:
        # Negative indices are rejected rather than counted from the tail
        if not 0 <= index < len(self._queue):
            raise QueueIndexError(index, len(self._queue))

    def _publish_queue_changed(self) -> None:
        self._event_bus.publish_sync(EventType.QUEUE_CHANGED, self.snapshot())

    def _publish_track_changed(self) -> None:
        self._event_bus.publish_sync(EventType.TRACK_CHANGED, self.snapshot())
