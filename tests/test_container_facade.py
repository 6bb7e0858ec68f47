"""
Container assembly and facade integration tests

The whole graph is wired by AppContainerFactory.create_for_testing with fake
providers and a temporary database.
"""

import pytest

from fakes import FakeCatalog, FakeSimilarity, make_track, make_tracks


@pytest.fixture
def container_factory(config, tmp_path):
    from app.container_factory import AppContainerFactory

    created = []

    def build(catalog=None, secondary=None):
        container = AppContainerFactory.create_for_testing(
            catalog=catalog or FakeCatalog(),
            secondary=secondary,
            config=config,
            db_path=str(tmp_path / "container.db"),
        )
        created.append(container)
        return container

    yield build

    for container in created:
        container.event_bus.clear()
        container.db.close()


def ids(tracks):
    return [t.id for t in tracks]


def test_services_satisfy_protocols(container_factory):
    from app.protocols import (
        IConfigService,
        IEventBus,
        IQueueService,
        IRecommendationService,
        ISmartQueueSettingsService,
    )
    from core.ports import IDatabase

    container = container_factory()

    assert isinstance(container.config, IConfigService)
    assert isinstance(container.event_bus, IEventBus)
    assert isinstance(container.db, IDatabase)
    assert isinstance(container.queue, IQueueService)
    assert isinstance(container.recommendations, IRecommendationService)
    assert isinstance(container.settings, ISmartQueueSettingsService)


def test_repr_hides_service_references(container_factory):
    container = container_factory()

    assert "recommendations" not in repr(container)


def test_facade_queue_editing(container_factory):
    from models.queue_state import RepeatMode

    facade = container_factory().facade
    facade.add_to_queue(make_tracks([1, 2, 3]))
    facade.play_next(make_tracks([9]))

    assert facade.next_track().id == 9
    assert facade.remove_from_queue(0).id == 1
    facade.reorder_queue(0, 1)
    assert ids(facade.snapshot().queue) == [3, 2]
    assert facade.previous_track() is None
    assert facade.cycle_repeat_mode() == RepeatMode.ALL

    facade.clear_queue()
    assert facade.snapshot().queue_length == 0
    assert facade.current_track.id == 9


@pytest.mark.anyio
async def test_play_smart_mix_replaces_queue_and_starts_playback(container_factory):
    from core.event_bus import EventType

    secondary = FakeSimilarity({100: make_tracks([1, 2, 3]), 200: make_tracks([3, 4])})
    container = container_factory(secondary=secondary)
    applied = []
    container.facade.subscribe(EventType.SMART_MIX_APPLIED, applied.append)
    container.facade.add_to_queue(make_tracks([50, 51]))

    mix = await container.facade.play_smart_mix([make_track(100), make_track(200)], count=10)

    assert sorted(ids(mix)) == [1, 2, 3, 4]
    snapshot = container.facade.snapshot()
    assert snapshot.current_track.id == mix[0].id
    assert ids(snapshot.queue) == ids(mix[1:])
    assert len(applied) == 1
    await container.aclose()


@pytest.mark.anyio
async def test_play_smart_mix_respects_disabled_setting(container_factory):
    secondary = FakeSimilarity({100: make_tracks([1, 2])})
    container = container_factory(secondary=secondary)
    container.facade.update_settings(smart_mix_enabled=False)

    assert await container.facade.play_smart_mix([make_track(100)]) == []
    assert secondary.calls == []
    await container.aclose()


@pytest.mark.anyio
async def test_auto_queue_refills_through_the_container(container_factory):
    secondary = FakeSimilarity({7: make_tracks([1, 2, 3])})
    container = container_factory(secondary=secondary)
    facade = container.facade
    facade.update_settings(auto_queue_enabled=True, auto_queue_count=3)

    facade.play_now(make_track(7))
    await container.auto_queue.wait_idle()

    assert sorted(ids(facade.snapshot().queue)) == [1, 2, 3]
    assert facade.is_fetching is False

    rows = container.db.fetch_all("SELECT context, success FROM recommendation_logs")
    assert {"context": "auto-queue", "success": 1} in rows
    await container.aclose()


@pytest.mark.anyio
async def test_add_similar_tracks_uses_current_track(container_factory):
    secondary = FakeSimilarity({7: make_tracks([1, 7, 2])})
    container = container_factory(secondary=secondary)
    container.facade.play_now(make_track(7))

    added = await container.facade.add_similar_tracks(limit=5)

    assert ids(added) == [1, 2]
    await container.aclose()


@pytest.mark.anyio
async def test_add_similar_tracks_without_seed(container_factory):
    container = container_factory()

    assert await container.facade.add_similar_tracks() == []
    await container.aclose()


def test_purge_expired_recommendations(container_factory):
    container = container_factory()

    assert container.facade.purge_expired_recommendations() == 0


def test_queue_state_survives_restart(container_factory):
    first = container_factory().facade
    first.play_now(make_track(7))
    first.add_to_queue(make_tracks([8, 9]))
    first.toggle_shuffle()

    restored = container_factory().facade.snapshot()

    assert restored.current_track.id == 7
    assert sorted(ids(restored.queue)) == [8, 9]
    assert restored.is_shuffled is True
