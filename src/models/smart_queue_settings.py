"""
Smart queue settings model
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Dict

from .recommendation import SimilarityPreference


MAX_AUTO_QUEUE_THRESHOLD = 10
MAX_AUTO_QUEUE_COUNT = 20


class SettingsValidationError(ValueError):
    """Smart queue settings value out of range"""
    pass


@dataclass(frozen=True)
class SmartQueueSettings:
    """Per-user smart queue configuration.

    Instances are immutable snapshots; every decision reads one snapshot so a
    settings change in the middle of a fetch cannot tear the values it uses.
    """
    auto_queue_enabled: bool = False
    auto_queue_threshold: int = 3
    auto_queue_count: int = 5
    similarity_preference: SimilarityPreference = SimilarityPreference.BALANCED
    smart_mix_enabled: bool = True

    def __post_init__(self) -> None:
        if not 0 <= int(self.auto_queue_threshold) <= MAX_AUTO_QUEUE_THRESHOLD:
            raise SettingsValidationError(
                f"auto_queue_threshold must be between 0 and {MAX_AUTO_QUEUE_THRESHOLD}: {self.auto_queue_threshold}"
            )
        if not 1 <= int(self.auto_queue_count) <= MAX_AUTO_QUEUE_COUNT:
            raise SettingsValidationError(
                f"auto_queue_count must be between 1 and {MAX_AUTO_QUEUE_COUNT}: {self.auto_queue_count}"
            )
        if not isinstance(self.similarity_preference, SimilarityPreference):
            try:
                pref = SimilarityPreference.parse(self.similarity_preference)
            except ValueError as e:
                raise SettingsValidationError(
                    f"Unknown similarity preference: {self.similarity_preference!r}"
                ) from e
            object.__setattr__(self, "similarity_preference", pref)

    def with_changes(self, **changes: Any) -> "SmartQueueSettings":
        """Return a new validated snapshot with the given fields replaced."""
        known = {f.name for f in fields(self)}
        unknown = set(changes) - known
        if unknown:
            raise SettingsValidationError(f"Unknown settings: {', '.join(sorted(unknown))}")
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'auto_queue_enabled': self.auto_queue_enabled,
            'auto_queue_threshold': self.auto_queue_threshold,
            'auto_queue_count': self.auto_queue_count,
            'similarity_preference': self.similarity_preference.value,
            'smart_mix_enabled': self.smart_mix_enabled,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], defaults: "SmartQueueSettings" = None) -> "SmartQueueSettings":
        base = defaults or cls()
        return cls(
            auto_queue_enabled=bool(data.get('auto_queue_enabled', base.auto_queue_enabled)),
            auto_queue_threshold=int(data.get('auto_queue_threshold', base.auto_queue_threshold)),
            auto_queue_count=int(data.get('auto_queue_count', base.auto_queue_count)),
            similarity_preference=SimilarityPreference.parse(
                data.get('similarity_preference', base.similarity_preference),
                default=base.similarity_preference,
            ),
            smart_mix_enabled=bool(data.get('smart_mix_enabled', base.smart_mix_enabled)),
        )
