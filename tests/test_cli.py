"""
Command line entry point tests
"""

import pytest

from fakes import FakeCatalog, FakeSimilarity, make_track, make_tracks


@pytest.fixture
def patched_factory(monkeypatch, config, tmp_path):
    """Route AppContainerFactory.create to a container wired with fakes."""
    from app.container_factory import AppContainerFactory

    state = {
        "catalog": FakeCatalog(tracks=[make_track(100, artist_name="Seed Band")]),
        "secondary": FakeSimilarity({100: make_tracks([1, 2, 3])}),
        "created": [],
    }

    def create(config_path=None, db_path=None):
        container = AppContainerFactory.create_for_testing(
            catalog=state["catalog"],
            secondary=state["secondary"],
            config=config,
            db_path=str(tmp_path / "cli.db"),
        )
        state["created"].append(container)
        return container

    monkeypatch.setattr(AppContainerFactory, "create", staticmethod(create))
    return state


def test_parser_rejects_unknown_preference():
    from main import build_parser

    with pytest.raises(SystemExit):
        build_parser().parse_args(["recommend", "1", "--preference", "chaotic"])


def test_format_track():
    from main import format_track

    assert format_track(make_track(5, artist_name="Air")) == "Air - Track 5 (5)"


def test_recommend_prints_tracks(patched_factory, capsys):
    from main import main

    assert main(["recommend", "100", "--count", "2"]) == 0

    lines = capsys.readouterr().out.strip().splitlines()
    assert len(lines) == 2
    assert all(line.endswith(("(1)", "(2)", "(3)")) for line in lines)


def test_mix_prints_tracks(patched_factory, capsys):
    from main import main

    assert main(["mix", "100", "--count", "5", "--preference", "diverse"]) == 0

    out = capsys.readouterr().out
    assert sorted(line.rsplit("(", 1)[1] for line in out.strip().splitlines()) == ["1)", "2)", "3)"]


def test_unknown_seed_exits_with_error(patched_factory, capsys):
    from main import main

    assert main(["recommend", "999"]) == 1
    assert "unknown track id 999" in capsys.readouterr().err


def test_empty_result_is_reported(patched_factory, capsys):
    from main import main

    patched_factory["secondary"].results = {}

    assert main(["recommend", "100"]) == 0
    assert "No recommendations found" in capsys.readouterr().err


def test_purge_cache(patched_factory, capsys):
    from main import main

    assert main(["purge-cache"]) == 0
    assert "Removed 0 expired cache entries" in capsys.readouterr().out
