"""
Tests for session archives and the pandas exports built on them.
"""

import gzip
import json

import pandas as pd
import pytest
from conftest import plain_definitions

from duel_sim.archive import SCHEMA_VERSION, build_archive, load_archive_file, save_archive
from duel_sim.engine import Engine
from duel_sim.errors import ArchiveFormatError
from duel_sim.export import HISTORY_COLUMNS, export_history_csv, history_frame, log_frame
from duel_sim.state import Zone


@pytest.fixture
def played(plain_engine):
    """Three recorded steps: two draws and a normal summon."""
    plain_engine.initialize_game(["X", "Y", "S"])
    plain_engine.draw_card()
    plain_engine.draw_card()
    plain_engine.move_card("inst_X_0", Zone.MONSTER_ZONE, 0)
    return plain_engine


def write_archive(path, payload):
    with gzip.open(path, "wt", encoding="utf-8") as handle:
        json.dump(payload, handle)
    return path


class TestArchive:
    def test_build_pushes_the_live_state(self, played):
        archive = build_archive(played, cover_image="cover.png")
        assert archive["schema_version"] == SCHEMA_VERSION
        assert len(archive["history"]) == 4
        assert archive["history"][-1]["log_count"] == 3
        assert archive["logs"] == played.state.logs
        assert archive["cover_image"] == "cover.png"

    def test_save_and_load_restores_the_session(self, played, settings, tmp_path):
        path = save_archive(played, tmp_path / "session.json.gz")
        assert path.exists()

        restored = Engine(definitions=plain_definitions(), settings=settings)
        restored.load_archive(load_archive_file(path))

        assert restored.state.to_dict() == played.state.to_dict()
        assert restored.state.logs == played.state.logs
        assert len(restored.history) == len(played.history)
        assert restored.interaction.open_request is None

    def test_loaded_history_supports_jump(self, played, settings, tmp_path):
        path = save_archive(played, tmp_path / "session.json.gz")
        restored = Engine(definitions=plain_definitions(), settings=settings)
        restored.load_archive(load_archive_file(path))

        assert restored.jump_to_log(0)
        assert len(restored.state.hand) == 1

    def test_not_gzip(self, tmp_path):
        path = tmp_path / "broken.json.gz"
        path.write_text("not an archive")
        with pytest.raises(ArchiveFormatError):
            load_archive_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ArchiveFormatError):
            load_archive_file(tmp_path / "missing.json.gz")

    def test_unsupported_schema(self, tmp_path):
        path = write_archive(tmp_path / "future.json.gz", {"schema_version": 99, "history": [], "logs": []})
        with pytest.raises(ArchiveFormatError, match="schema"):
            load_archive_file(path)

    def test_unknown_card_in_frame(self, plain_engine, tmp_path):
        frame = {"state": {"cards": {"inst_Q_0": {"card_id": "nope"}}}, "log_count": 0}
        path = write_archive(tmp_path / "bad.json.gz", {"history": [frame], "logs": []})
        with pytest.raises(ArchiveFormatError):
            plain_engine.load_archive(load_archive_file(path))

    def test_frames_without_state_are_skipped(self, plain_engine):
        archive = {"history": [{"log_count": 1}, {"state": {}, "log_count": 0}], "logs": ["one"]}
        plain_engine.load_archive(archive)
        assert len(plain_engine.history) == 1
        assert plain_engine.state.logs == ["one"]


class TestExport:
    def test_history_frame_from_engine(self, played):
        frame = history_frame(played)
        assert list(frame.columns) == HISTORY_COLUMNS
        assert list(frame["hand"]) == [0, 1, 2]
        assert list(frame["monster_zones"]) == [0, 0, 0]
        assert pd.isna(frame["last_log"].iloc[0])
        assert frame["last_log"].iloc[2] == "Drew a card."

    def test_history_frame_from_archive(self, played):
        archive = build_archive(played)
        frame = history_frame(archive, plain_definitions())
        assert len(frame) == 4
        assert frame["monster_zones"].iloc[-1] == 1
        assert frame["lp"].iloc[-1] == 8000

    def test_archive_needs_definitions(self, played):
        with pytest.raises(ValueError):
            history_frame(build_archive(played))

    def test_export_csv(self, played, tmp_path):
        path = export_history_csv(played, tmp_path / "history.csv")
        frame = pd.read_csv(path)
        assert list(frame.columns) == HISTORY_COLUMNS
        assert len(frame) == 3

    def test_log_frame_numbers_from_one(self):
        frame = log_frame(["a", "b"])
        assert list(frame["index"]) == [1, 2]
        assert list(frame["line"]) == ["a", "b"]
