"""
Tests for GameEngine: dispatch, best-effort persistence, restore and run log.
"""

import json
import logging

import pytest

from engine.actions import (
    AdvanceYearManually,
    MakeInvestment,
    PhaseOutField,
    RestartGame,
    SetViewMode,
)
from engine.config import EngineConfig, configure_logging
from engine.game import GameEngine
from engine.runlog import dumps_run_export
from persistence.storage import GameStorage
from persistence.stores.memory import InMemoryStore


class FailingStore(InMemoryStore):
    def set(self, key, value):
        raise OSError("disk full")


class TestDispatch:
    def test_dispatch_updates_state_and_saves(self, engine, memory_store):
        out = engine.dispatch(PhaseOutField("Troll"))
        assert engine.state is out
        assert out.field_by_name("Troll").status == "closed"
        saved = json.loads(memory_store.data["testGameState"])
        assert saved["shutdowns"] == {"Troll": 2026}

    def test_rejected_action_is_not_saved(self, engine, memory_store):
        before = engine.state
        assert engine.dispatch(PhaseOutField("Atlantis")) is before
        assert memory_store.data == {}

    def test_restart_clears_saved_game(self, engine, memory_store, fresh_state):
        engine.dispatch(PhaseOutField("Troll"))
        assert memory_store.data
        out = engine.dispatch(RestartGame())
        assert out == fresh_state
        assert memory_store.data == {}

    def test_storage_failure_never_aborts_transition(self, small_series, caplog):
        engine = GameEngine(storage=GameStorage(FailingStore(), series=small_series), series=small_series)
        with caplog.at_level(logging.ERROR):
            out = engine.dispatch(PhaseOutField("Troll"))
        assert out.field_by_name("Troll").status == "closed"
        assert "disk full" in caplog.text

    def test_engine_without_storage(self, small_series):
        engine = GameEngine(series=small_series)
        out = engine.dispatch(AdvanceYearManually())
        assert out.year == 2026


class TestRestore:
    def test_restore_resumes_saved_game(self, storage, small_series):
        first = GameEngine(storage=storage, series=small_series)
        first.dispatch(MakeInvestment("green_tech", 100.0))
        first.dispatch(PhaseOutField("Snorre"))
        first.dispatch(SetViewMode("stats"))

        second = GameEngine.restore(storage, series=small_series)
        assert second.state.field_by_name("Snorre").status == "closed"
        assert second.state.investments["green_tech"] == 100.0
        assert second.state.current_view == "stats"
        assert second.state.budget == pytest.approx(first.state.budget)

    def test_reload_after_corruption(self, engine, memory_store, fresh_state):
        engine.dispatch(PhaseOutField("Troll"))
        memory_store.data["testGameState"] = "garbage"
        assert engine.reload() == fresh_state


class TestRunLog:
    def test_history_records_each_dispatch(self, engine):
        engine.dispatch(PhaseOutField("Troll"))
        engine.dispatch(PhaseOutField("Troll"))
        assert [h["accepted"] for h in engine.history] == [True, False]
        assert engine.history[0]["action"] == {"type": "PHASE_OUT_FIELD", "field_name": "Troll"}
        assert engine.history[0]["after"]["phased_out"] == 1
        assert engine.history[0]["new_achievements"] == ["First Steps"]

    def test_history_keeps_most_recent_entries(self, small_series):
        engine = GameEngine(series=small_series, history_limit=3)
        for _ in range(5):
            engine.dispatch(AdvanceYearManually())
        assert [h["step"] for h in engine.history] == [3, 4, 5]
        export = json.loads(dumps_run_export(engine.export_run()))
        assert len(export["action_logs"]) == 3

    def test_export_is_json(self, engine):
        engine.dispatch(AdvanceYearManually())
        export = json.loads(dumps_run_export(engine.export_run({"storage_key": "x"})))
        assert export["version"] == 1
        assert export["config"] == {"storage_key": "x"}
        assert export["initial"]["year"] == 2025
        assert len(export["action_logs"]) == 1


class TestConfig:
    def test_defaults(self):
        cfg = EngineConfig.from_env({})
        assert cfg.storage_key == "phaseOutVillageGameState"
        assert cfg.dataset_path is None
        assert cfg.log_level == "INFO"

    def test_from_env(self):
        cfg = EngineConfig.from_env(
            {
                "PHASEOUT_STORAGE_KEY": "k",
                "PHASEOUT_STATE_PATH": "/tmp/s.json",
                "PHASEOUT_DATASET": "/data/x.json",
                "PHASEOUT_LOG_LEVEL": "debug",
            }
        )
        assert cfg == EngineConfig(storage_key="k", state_path="/tmp/s.json", dataset_path="/data/x.json", log_level="DEBUG")

    def test_configure_logging_accepts_unknown_level(self):
        configure_logging("not-a-level")
