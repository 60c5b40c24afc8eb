import pytest

from dataclasses import replace

from core.state import Field, GameState, create_fresh_game_state
from engine.game import GameEngine
from persistence.storage import GameStorage
from persistence.stores.memory import InMemoryStore


def _years(oil, gas, emission, intensity, start=2018):
    out = {}
    for i, values in enumerate(zip(oil, gas, emission, intensity)):
        record = {k: v for k, v in zip(("production_oil", "production_gas", "emission", "emission_intensity"), values) if v is not None}
        out[start + i] = record
    return out


@pytest.fixture
def small_series():
    """Five fields with known coordinates: two big, two small, one already shut in."""
    return {
        "Troll": _years([5.0] * 5, [38.0] * 5, [400.0] * 5, [2.9] * 5),
        "Ekofisk": _years([7.5] * 5, [2.2] * 5, [780.0] * 5, [12.0] * 5),
        "Snorre": _years([4.0] * 5, [0.5] * 5, [350.0] * 5, [9.0] * 5),
        "Yme": _years([0.8] * 5, [None] * 5, [60.0] * 5, [6.0] * 5),
        "Norne": _years([1.0, 0.8, 0.6], [0.2, 0.2, None], [90.0, 80.0, 70.0], [5.0, 5.0, None]),
    }


@pytest.fixture
def fresh_state(small_series) -> GameState:
    return create_fresh_game_state(small_series)


@pytest.fixture
def make_field():
    """Factory for hand-built fields with round numbers.

    Usage:
        f = make_field("Alpha", phase_out_cost=50, emission=2.0, lifetime=30)
    """

    def _make(
        name,
        *,
        phase_out_cost=50.0,
        emission=2.0,
        lifetime=30.0,
        yearly_revenue=0.0,
        production=3.0,
        intensity=5.0,
        status="active",
    ) -> Field:
        f = Field(
            name=name,
            lon=3.0,
            lat=60.0,
            emissions=[emission, emission, emission],
            intensity=intensity,
            status="active",
            production=production,
            workers=int(production * 50),
            phase_out_cost=float(phase_out_cost),
            yearly_revenue=float(yearly_revenue),
            total_lifetime_emissions=float(lifetime),
            transition_potential="research_hub",
        )
        if status == "closed":
            return f.closed()
        if status != "active":
            return replace(f, status=status)
        return f

    return _make


@pytest.fixture
def make_state(make_field):
    """Factory for a GameState over `n` hand-built fields named F0..F{n-1}.

    `closed` names (or a count) start closed, with shutdowns recorded.
    """

    def _make(n=5, *, closed=(), field_overrides=None, **overrides) -> GameState:
        if isinstance(closed, int):
            closed = [f"F{i}" for i in range(closed)]
        field_overrides = field_overrides or {}
        fields = []
        for i in range(n):
            name = f"F{i}"
            kwargs = dict(field_overrides.get(name, {}))
            if name in closed:
                kwargs["status"] = "closed"
            fields.append(make_field(name, **kwargs))
        year = overrides.get("year", 2025)
        shutdowns = {name: year for name in closed}
        shutdowns.update(overrides.pop("shutdowns", {}))
        return GameState(game_fields=fields, shutdowns=shutdowns, **overrides)

    return _make


@pytest.fixture
def memory_store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def storage(memory_store, small_series) -> GameStorage:
    return GameStorage(memory_store, key="testGameState", series=small_series)


@pytest.fixture
def engine(storage, small_series) -> GameEngine:
    return GameEngine(storage=storage, series=small_series)
