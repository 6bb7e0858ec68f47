"""
Smart Queue Core Module
"""

from .event_bus import EventBus, EventType
from .database import DatabaseManager
from .provider import MusicProvider, ProviderSettings, ProviderError

__all__ = [
    'EventBus',
    'EventType',
    'DatabaseManager',
    'MusicProvider',
    'ProviderSettings',
    'ProviderError',
]
