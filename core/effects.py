"""
core.effects
Economy / climate rules:
- yearly consequences (oil revenue credit, climate-cost debit)
- phase-out capacity
- temperature drift
- terminal-phase detection
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace

from .investments import total_good
from .state import (
    BASE_PHASE_OUT_CAPACITY,
    END_YEAR,
    TEMPERATURE_CAP,
    TEMPERATURE_FLOOR,
    TEMPERATURE_START,
    TEMPERATURE_YEARLY_STEP,
    GameState,
    clamp,
)

MAX_PHASE_OUT_CAPACITY = 8
TECH_RANK_PER_CAPACITY = 20
GOOD_INVESTMENT_PER_CAPACITY = 100

CLIMATE_COST_FACTOR = 500.0
URGENCY_WINDOW_YEARS = 15

TEMPERATURE_PER_MT = 0.001

VICTORY_SHARE = 0.8
PARTIAL_SUCCESS_SHARE = 0.5


@dataclass(frozen=True)
class YearlyConsequences:
    yearly_oil_revenue: float
    climate_cost_increase: float
    urgency_multiplier: float
    time_left: int


def urgency_multiplier(year: int) -> float:
    # at least 3 from the horizon year on, and still growing past it
    time_left = END_YEAR - int(year)
    return max(1.0, (URGENCY_WINDOW_YEARS - time_left) / 5.0)


def calculate_yearly_consequences(state: GameState) -> YearlyConsequences:
    """Revenue from every active field, and the climate bill for the current temperature."""
    revenue = float(sum(f.yearly_revenue for f in state.active_fields))
    urgency = urgency_multiplier(state.year)
    climate_cost = (state.global_temperature - TEMPERATURE_START) ** 2 * CLIMATE_COST_FACTOR * urgency
    return YearlyConsequences(
        yearly_oil_revenue=revenue if math.isfinite(revenue) else 0.0,
        climate_cost_increase=climate_cost if math.isfinite(climate_cost) else 0.0,
        urgency_multiplier=urgency,
        time_left=END_YEAR - int(state.year),
    )


def calculate_phase_out_capacity(state: GameState) -> int:
    """Base 3, +1 per 20 tech-rank points, +1 per 100bn of good investment, capped at 8."""
    extra_rank = math.floor(state.norway_tech_rank / TECH_RANK_PER_CAPACITY)
    extra_invest = math.floor(total_good(state.investments) / GOOD_INVESTMENT_PER_CAPACITY)
    return int(min(MAX_PHASE_OUT_CAPACITY, BASE_PHASE_OUT_CAPACITY + extra_rank + extra_invest))


def cooled_temperature(temperature: float, emission_mt: float) -> float:
    return max(TEMPERATURE_FLOOR, temperature - emission_mt * TEMPERATURE_PER_MT)


def warmed_temperature(temperature: float) -> float:
    return min(TEMPERATURE_CAP, temperature + TEMPERATURE_YEARLY_STEP)


# -------------------------
# Engine helpers
# -------------------------


def apply_yearly_consequences(state: GameState) -> GameState:
    """Credit revenue, debit climate cost (budget clamped at 0), accumulate damage. Pure."""
    c = calculate_yearly_consequences(state)
    budget = clamp(state.budget + c.yearly_oil_revenue - c.climate_cost_increase, 0.0, math.inf)
    return replace(
        state,
        budget=float(budget),
        climate_damage=float(state.climate_damage + c.climate_cost_increase),
    )


def terminal_phase(state: GameState) -> str:
    """Outcome once the horizon is reached; current phase otherwise."""
    if state.year < END_YEAR:
        return state.game_phase
    total = len(state.game_fields)
    success_rate = state.phased_out_count / total if total else 0.0
    if success_rate >= VICTORY_SHARE:
        return "victory"
    if success_rate >= PARTIAL_SUCCESS_SHARE:
        return "partial_success"
    return "defeat"


def apply_terminal_check(state: GameState) -> GameState:
    if state.year < END_YEAR:
        return state
    return replace(state, game_phase=terminal_phase(state), show_game_over_modal=True)
