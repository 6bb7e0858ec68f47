"""
Artist data model
"""

from dataclasses import dataclass
from typing import Any, Optional


def _to_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class Artist:
    """
    Artist data model

    Catalog artist reference embedded in a track.
    """

    id: int = 0
    name: str = ""
    picture: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary"""
        return {
            'id': self.id,
            'name': self.name,
            'picture': self.picture,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> 'Artist':
        """Create Artist object from dictionary (tolerates missing fields)"""
        if not isinstance(data, dict):
            return cls()

        return cls(
            id=_to_int(data.get('id')),
            name=str(data.get('name') or ''),
            picture=data.get('picture_medium') or data.get('picture') or None,
        )
