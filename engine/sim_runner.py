"""engine.sim_runner

Headless runner for quick sanity checks.

Plays a deterministic scripted game through GameEngine with an in-memory
store: one early tech investment, then each turn batches the highest-emitting
affordable fields up to capacity, advancing the year when nothing closes.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from core.effects import calculate_phase_out_capacity
from core.state import YearRecord
from persistence.storage import GameStorage
from persistence.stores.memory import InMemoryStore

from .actions import (
    AdvanceYearManually,
    MakeInvestment,
    PhaseOutSelectedFields,
    SelectFieldForMulti,
    ToggleMultiSelect,
)
from .game import GameEngine
from .selectors import compute_stats

MAX_TURNS = 200


def run_headless_sim(
    series: Optional[Mapping[str, Mapping[int, YearRecord]]] = None,
    invest: float = 200.0,
    max_turns: int = MAX_TURNS,
) -> Dict[str, Any]:
    """Run a deterministic game to the end and return a summary."""
    storage = GameStorage(InMemoryStore(), series=series)
    engine = GameEngine(storage=storage, series=series)

    if invest > 0:
        engine.dispatch(MakeInvestment(investment="green_tech", amount=invest))

    turns = 0
    while not engine.state.is_over and turns < max_turns:
        turns += 1
        state = engine.state
        picks = sorted(
            (f for f in state.active_fields if f.phase_out_cost <= state.budget),
            key=lambda f: (-f.total_lifetime_emissions, f.name),
        )[: calculate_phase_out_capacity(state)]

        budget_left = state.budget
        chosen: List[str] = []
        for f in picks:
            if f.phase_out_cost <= budget_left:
                chosen.append(f.name)
                budget_left -= f.phase_out_cost

        if not chosen:
            engine.dispatch(AdvanceYearManually())
            continue

        engine.dispatch(ToggleMultiSelect())
        for name in chosen:
            engine.dispatch(SelectFieldForMulti(field_name=name))
        after = engine.dispatch(PhaseOutSelectedFields())
        if after.year == state.year:
            # a single close does not move the clock
            engine.dispatch(AdvanceYearManually())

    return {
        "turns": turns,
        "final": engine.state,
        "stats": compute_stats(engine.state),
        "logs": list(engine.history),
        "reloaded": storage.load(),
    }
