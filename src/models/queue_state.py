"""
Data models related to the playback queue
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .track import Track


class QueueIndexError(IndexError):
    """Queue operation received an index outside the queue"""

    def __init__(self, index: int, length: int):
        super().__init__(f"Queue index {index} out of range (queue length {length})")
        self.index = index
        self.length = length


class RepeatMode(Enum):
    """Repeat mode"""
    NONE = "none"    # Stop when the queue runs out
    ALL = "all"      # Cycle history back into the queue
    ONE = "one"      # Replay the current track

    def next(self) -> "RepeatMode":
        """none -> all -> one -> none"""
        order = [RepeatMode.NONE, RepeatMode.ALL, RepeatMode.ONE]
        return order[(order.index(self) + 1) % len(order)]


@dataclass(frozen=True)
class QueueSnapshot:
    """Read-only view of the queue state handed to the presentation layer"""
    current_track: Optional[Track]
    queue: Tuple[Track, ...]
    history: Tuple[Track, ...]
    is_shuffled: bool = False
    repeat_mode: RepeatMode = RepeatMode.NONE

    @property
    def queue_length(self) -> int:
        return len(self.queue)
