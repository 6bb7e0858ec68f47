"""
Album data model
"""

from dataclasses import dataclass
from typing import Optional

from .artist import _to_int


COVER_SIZES = ("small", "medium", "big", "xl")


@dataclass(frozen=True)
class Album:
    """
    Album data model

    Cover variants are optional; catalog records frequently omit some of them.
    """

    id: int = 0
    title: str = ""
    cover: Optional[str] = None
    cover_small: Optional[str] = None
    cover_medium: Optional[str] = None
    cover_big: Optional[str] = None
    cover_xl: Optional[str] = None

    def best_cover(self, preferred: str = "medium") -> Optional[str]:
        """Return the preferred cover variant, falling back to any available one."""
        candidates = [getattr(self, f"cover_{preferred}", None)]
        candidates.extend(getattr(self, f"cover_{size}") for size in reversed(COVER_SIZES))
        candidates.append(self.cover)
        for url in candidates:
            if url:
                return url
        return None

    def to_dict(self) -> dict:
        """Convert to dictionary"""
        return {
            'id': self.id,
            'title': self.title,
            'cover': self.cover,
            'cover_small': self.cover_small,
            'cover_medium': self.cover_medium,
            'cover_big': self.cover_big,
            'cover_xl': self.cover_xl,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> 'Album':
        """Create Album object from dictionary (tolerates missing fields)"""
        if not isinstance(data, dict):
            return cls()

        def _url(key: str) -> Optional[str]:
            value = data.get(key)
            return value if isinstance(value, str) and value else None

        return cls(
            id=_to_int(data.get('id')),
            title=str(data.get('title') or ''),
            cover=_url('cover'),
            cover_small=_url('cover_small'),
            cover_medium=_url('cover_medium'),
            cover_big=_url('cover_big'),
            cover_xl=_url('cover_xl'),
        )
