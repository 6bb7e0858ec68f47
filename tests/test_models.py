"""
Data model tests
"""

import pytest


class TestTrack:
    """Track parsing and identity"""

    def test_from_dict_reads_catalog_payload(self):
        from models.track import Track

        track = Track.from_dict({
            "id": "3135556",
            "title": "Harder, Better, Faster, Stronger",
            "duration": "224",
            "rank": 956167,
            "artist": {"id": 27, "name": "Daft Punk", "picture_medium": "https://img/27.jpg"},
            "album": {"id": 302127, "title": "Discovery", "cover_big": "https://img/big.jpg"},
        })

        assert track.id == 3135556
        assert track.duration == 224
        assert track.artist.name == "Daft Punk"
        assert track.artist.picture == "https://img/27.jpg"
        assert track.album.best_cover() == "https://img/big.jpg"
        assert track.search_text == "Daft Punk Harder, Better, Faster, Stronger"
        assert track.duration_str == "3:44"

    def test_from_dict_tolerates_missing_optional_fields(self):
        from models.track import Track

        track = Track.from_dict({"id": 1, "duration": "n/a", "artist": None})

        assert track.title == ""
        assert track.duration == 0
        assert track.artist.id == 0
        assert track.album.cover is None
        assert track.display_name == ""

    @pytest.mark.parametrize("payload", [{"title": "no id"}, {"id": "abc"}, {"id": True}, "not a dict"])
    def test_from_dict_rejects_unusable_id(self, payload):
        from models.track import Track, TrackParseError

        with pytest.raises(TrackParseError):
            Track.from_dict(payload)

    def test_parse_tracks_skips_malformed_records(self):
        from models.track import parse_tracks

        tracks = parse_tracks([{"id": 1}, {"title": "broken"}, None, {"id": 2}])

        assert [t.id for t in tracks] == [1, 2]

    def test_identity_is_the_catalog_id(self):
        from models.track import Track

        a = Track(id=5, title="Original")
        b = Track(id=5, title="Remaster")

        assert a == b
        assert len({a, b}) == 1
        assert a != Track(id=6, title="Original")

    def test_unique_by_id_keeps_first_and_drops_excluded(self):
        from models.track import Track, unique_by_id

        tracks = [Track(id=1, title="first"), Track(id=2), Track(id=1, title="second"), Track(id=3)]

        result = unique_by_id(tracks, exclude_ids={3})

        assert [t.id for t in result] == [1, 2]
        assert result[0].title == "first"

    def test_to_dict_round_trip(self):
        from models.track import Track

        original = Track.from_dict({"id": 9, "title": "Song", "artist": {"id": 4, "name": "Band"}})

        assert Track.from_dict(original.to_dict()).to_dict() == original.to_dict()


class TestRepeatMode:
    def test_cycle_order(self):
        from models.queue_state import RepeatMode

        assert RepeatMode.NONE.next() == RepeatMode.ALL
        assert RepeatMode.ALL.next() == RepeatMode.ONE
        assert RepeatMode.ONE.next() == RepeatMode.NONE


class TestSmartQueueSettings:
    """Settings validation"""

    def test_defaults(self):
        from models.recommendation import SimilarityPreference
        from models.smart_queue_settings import SmartQueueSettings

        settings = SmartQueueSettings()

        assert settings.auto_queue_enabled is False
        assert settings.auto_queue_threshold == 3
        assert settings.auto_queue_count == 5
        assert settings.similarity_preference == SimilarityPreference.BALANCED
        assert settings.smart_mix_enabled is True

    @pytest.mark.parametrize("changes", [
        {"auto_queue_threshold": -1},
        {"auto_queue_threshold": 11},
        {"auto_queue_count": 0},
        {"auto_queue_count": 21},
        {"similarity_preference": "chaotic"},
        {"unknown_field": 1},
    ])
    def test_with_changes_rejects_invalid_values(self, changes):
        from models.smart_queue_settings import SettingsValidationError, SmartQueueSettings

        with pytest.raises(SettingsValidationError):
            SmartQueueSettings().with_changes(**changes)

    def test_bounds_are_inclusive(self):
        from models.smart_queue_settings import SmartQueueSettings

        low = SmartQueueSettings(auto_queue_threshold=0, auto_queue_count=1)
        high = SmartQueueSettings(auto_queue_threshold=10, auto_queue_count=20)

        assert low.auto_queue_threshold == 0
        assert high.auto_queue_count == 20

    def test_string_preference_is_normalized(self):
        from models.recommendation import SimilarityPreference
        from models.smart_queue_settings import SmartQueueSettings

        settings = SmartQueueSettings(similarity_preference="Diverse")

        assert settings.similarity_preference == SimilarityPreference.DIVERSE

    def test_from_dict_fills_missing_keys_from_defaults(self):
        from models.smart_queue_settings import SmartQueueSettings

        defaults = SmartQueueSettings(auto_queue_count=8)
        settings = SmartQueueSettings.from_dict({"auto_queue_enabled": True}, defaults)

        assert settings.auto_queue_enabled is True
        assert settings.auto_queue_count == 8
        assert SmartQueueSettings.from_dict(settings.to_dict()) == settings


class TestRecommendationModels:
    def test_similarity_preference_parse(self):
        from models.recommendation import SimilarityPreference

        assert SimilarityPreference.parse(" STRICT ") == SimilarityPreference.STRICT
        assert SimilarityPreference.parse("bogus", SimilarityPreference.BALANCED) == SimilarityPreference.BALANCED
        with pytest.raises(ValueError):
            SimilarityPreference.parse("bogus")

    def test_unresolved_candidate_query(self):
        from models.recommendation import UnresolvedCandidate

        assert UnresolvedCandidate(name="Around the World", artist="Daft Punk").query == "Daft Punk Around the World"
        assert UnresolvedCandidate(name="Untitled").query == "Untitled"

    def test_cache_entry_expires_at_boundary(self):
        from datetime import datetime, timedelta, timezone

        from models.recommendation import RecommendationCacheEntry, RecommendationSource

        created = datetime(2024, 1, 1, tzinfo=timezone.utc)
        entry = RecommendationCacheEntry(
            seed_track_id=1,
            tracks=(),
            source=RecommendationSource.RADIO,
            created_at=created,
            expires_at=created + timedelta(hours=24),
        )

        assert not entry.is_expired(created + timedelta(hours=23, minutes=59))
        assert entry.is_expired(created + timedelta(hours=24))
