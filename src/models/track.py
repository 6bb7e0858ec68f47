"""
Track data model
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set

from .album import Album
from .artist import Artist


class TrackParseError(ValueError):
    """Raised when a catalog payload cannot be turned into a Track"""
    pass


@dataclass(frozen=True, eq=False)
class Track:
    """
    Track data model

    Immutable catalog track. Identity is the numeric catalog id: equality,
    hashing and deduplication never look at title or artist strings.
    """

    id: int
    title: str = ""
    duration: int = 0  # seconds
    artist: Artist = field(default_factory=Artist)
    album: Album = field(default_factory=Album)

    # Optional catalog extras
    title_short: str = ""
    preview: Optional[str] = None
    link: Optional[str] = None
    rank: int = 0
    explicit_lyrics: bool = False

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Track):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    @property
    def duration_str(self) -> str:
        """Formatted duration string (mm:ss)"""
        minutes = self.duration // 60
        seconds = self.duration % 60
        return f"{minutes}:{seconds:02d}"

    @property
    def display_name(self) -> str:
        """Display name"""
        if self.artist.name:
            return f"{self.artist.name} - {self.title}"
        return self.title

    @property
    def search_text(self) -> str:
        """Free-text "artist title" query used by similarity services"""
        return " ".join(part for part in (self.artist.name, self.title) if part)

    def to_dict(self) -> dict:
        """Convert to dictionary"""
        return {
            'id': self.id,
            'title': self.title,
            'title_short': self.title_short,
            'duration': self.duration,
            'preview': self.preview,
            'link': self.link,
            'rank': self.rank,
            'explicit_lyrics': self.explicit_lyrics,
            'artist': self.artist.to_dict(),
            'album': self.album.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Track':
        """Create Track object from a catalog dictionary

        Raises:
            TrackParseError: If the payload has no usable numeric id
        """
        if not isinstance(data, dict):
            raise TrackParseError(f"Track payload must be a dict, got {type(data).__name__}")

        raw_id = data.get('id')
        if isinstance(raw_id, bool):
            raise TrackParseError("Track id must be numeric")
        try:
            track_id = int(raw_id)
        except (TypeError, ValueError):
            raise TrackParseError(f"Track id must be numeric: {raw_id!r}") from None

        try:
            duration = int(data.get('duration') or 0)
        except (TypeError, ValueError):
            duration = 0

        try:
            rank = int(data.get('rank') or 0)
        except (TypeError, ValueError):
            rank = 0

        return cls(
            id=track_id,
            title=str(data.get('title') or ''),
            title_short=str(data.get('title_short') or ''),
            duration=duration,
            preview=data.get('preview') or None,
            link=data.get('link') or None,
            rank=rank,
            explicit_lyrics=bool(data.get('explicit_lyrics', False)),
            artist=Artist.from_dict(data.get('artist')),
            album=Album.from_dict(data.get('album')),
        )


def parse_tracks(items: Iterable[Any]) -> List[Track]:
    """Parse a list of catalog payloads, skipping malformed records."""
    tracks: List[Track] = []
    for item in items or []:
        try:
            tracks.append(Track.from_dict(item))
        except TrackParseError:
            continue
    return tracks


def unique_by_id(tracks: Iterable[Track], exclude_ids: Optional[Iterable[int]] = None) -> List[Track]:
    """Deduplicate by id, preserving first occurrence, dropping excluded ids."""
    seen: Set[int] = set(exclude_ids or ())
    result: List[Track] = []
    for track in tracks:
        if track.id in seen:
            continue
        seen.add(track.id)
        result.append(track)
    return result
