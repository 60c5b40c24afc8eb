"""
core.selfcheck
Minimal "it runs" proof for the game core.

Plays a scripted game on the bundled dataset (phase out the largest emitters,
stall a few years, invest) and asserts the core invariants after every step.

Run:
  python -m core.selfcheck
"""

from __future__ import annotations

import logging
from dataclasses import replace

from .achievements import evaluate_achievements
from .effects import (
    apply_terminal_check,
    apply_yearly_consequences,
    calculate_phase_out_capacity,
    cooled_temperature,
    warmed_temperature,
)
from .investments import tech_rank
from .state import END_YEAR, TEMPERATURE_CAP, TEMPERATURE_FLOOR, GameState, create_fresh_game_state, metrics_to_dict

logger = logging.getLogger(__name__)


def _check(prev: GameState, state: GameState) -> None:
    assert state.budget >= 0.0
    assert TEMPERATURE_FLOOR <= state.global_temperature <= TEMPERATURE_CAP
    assert 3 <= calculate_phase_out_capacity(state) <= 8
    assert len(set(state.achievements)) == len(state.achievements)
    assert set(prev.achievements) <= set(state.achievements)
    closed_before = {f.name for f in prev.game_fields if f.status == "closed"}
    closed_now = {f.name for f in state.game_fields if f.status == "closed"}
    assert closed_before <= closed_now
    assert closed_now == set(state.shutdowns)
    for f in state.game_fields:
        if f.status == "closed":
            assert f.production == 0.0 and f.emissions[0] == 0.0


def _merge(state: GameState) -> GameState:
    new = evaluate_achievements(state)
    return replace(state, achievements=[*state.achievements, *new]) if new else state


def _close_one(state: GameState) -> GameState:
    """Close the biggest active emitter the budget allows (no reducer, core rules only)."""
    candidates = sorted(
        (f for f in state.active_fields if f.phase_out_cost <= state.budget),
        key=lambda f: -f.total_lifetime_emissions,
    )
    if not candidates:
        return state
    f = candidates[0]
    state = replace(
        state,
        budget=state.budget - f.phase_out_cost,
        global_temperature=cooled_temperature(state.global_temperature, f.emissions[0]),
        game_fields=[x.closed() if x.name == f.name else x for x in state.game_fields],
        shutdowns={**state.shutdowns, f.name: state.year + 1},
    )
    return apply_terminal_check(_merge(apply_yearly_consequences(state)))


def _stall(state: GameState) -> GameState:
    state = apply_yearly_consequences(state)
    state = replace(state, year=state.year + 1, global_temperature=warmed_temperature(state.global_temperature))
    return apply_terminal_check(_merge(state))


def run_smoke() -> GameState:
    state = create_fresh_game_state()
    assert state.budget == 15000.0 and state.year == 2025
    assert all(f.is_active for f in state.game_fields)

    investments = {**state.investments, "green_tech": 250.0}
    prev, state = state, replace(state, budget=state.budget - 250.0, investments=investments, norway_tech_rank=tech_rank(investments))
    _check(prev, state)

    while state.year < END_YEAR:
        for _ in range(calculate_phase_out_capacity(state)):
            prev, state = state, _close_one(state)
            _check(prev, state)
        prev, state = state, _stall(state)
        _check(prev, state)

    assert state.game_phase in ("victory", "partial_success", "defeat")
    logger.info("Final metrics: %s", metrics_to_dict(state))
    logger.info("Achievements: %s", state.achievements)
    return state


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(name)s - %(message)s")
    final = run_smoke()
    print("OK: core smoke test passed.")
    print("Final phase:", final.game_phase)
