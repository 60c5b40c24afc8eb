"""
core.state
Core domain data models (UI/storage independent).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Dict, List, Mapping, Optional

# Historical + projected facts: field name -> year -> {fact: value}
YearRecord = Dict[str, float]
HistoricalSeries = Dict[str, Dict[int, YearRecord]]
ShutdownMap = Dict[str, int]

INITIAL_BUDGET = 15000.0  # NOK billions
INITIAL_SCORE = 0
INITIAL_YEAR = 2025
END_YEAR = 2040

TEMPERATURE_START = 1.1
TEMPERATURE_FLOOR = 1.1
TEMPERATURE_CAP = 3.0
TEMPERATURE_YEARLY_STEP = 0.02

BASE_PHASE_OUT_CAPACITY = 3

FIELD_STATUSES = ("active", "closed", "transitioning")
TRANSITION_TYPES = ("wind", "solar", "data_center", "research_hub")
GAME_PHASES = ("learning", "action", "crisis", "victory", "defeat", "partial_success")
TERMINAL_PHASES = ("victory", "defeat", "partial_success")
VIEW_MODES = ("map", "emissions", "production", "economics", "stats", "investments")
DATA_LAYERS = ("basic", "intermediate", "advanced", "expert")


def clamp(x: float, lo: float, hi: float) -> float:
    if not math.isfinite(x):
        return lo
    return max(lo, min(hi, x))


@dataclass(frozen=True)
class Field:
    """One oil/gas production asset.

    Derived values (cost, revenue, lifetime emissions) come from core.fields;
    only `status`, `production` and `emissions[0]` change during a game.
    """

    name: str
    lon: float
    lat: float
    emissions: List[float]   # Mt CO2e, most recent first, len <= 5
    intensity: float         # kg CO2e / boe
    status: str              # active | closed | transitioning
    production: float
    workers: int
    phase_out_cost: float    # NOK billions
    yearly_revenue: float
    total_lifetime_emissions: float
    transition_potential: str
    production_oil: Optional[float] = None
    production_gas: Optional[float] = None
    real_emission: Optional[float] = None
    real_emission_intensity: Optional[float] = None

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def closed(self) -> "Field":
        """Return the closed copy of this field (production and latest emission zeroed)."""
        emissions = [0.0, *self.emissions[1:]] if self.emissions else [0.0]
        return replace(self, status="closed", production=0.0, emissions=emissions)


def empty_investments() -> Dict[str, float]:
    from .investments import INVESTMENT_TYPES

    return {k: 0.0 for k in INVESTMENT_TYPES}


@dataclass(frozen=True)
class GameState:
    """Aggregate root. Every transition produces a new instance (see engine.pipeline)."""

    game_fields: List[Field]
    budget: float = INITIAL_BUDGET
    score: int = INITIAL_SCORE
    year: int = INITIAL_YEAR
    global_temperature: float = TEMPERATURE_START
    shutdowns: ShutdownMap = field(default_factory=dict)
    investments: Dict[str, float] = field(default_factory=empty_investments)
    norway_tech_rank: float = 0.0
    achievements: List[str] = field(default_factory=list)
    selected_fields: List[str] = field(default_factory=list)
    multi_phase_out_mode: bool = False
    yearly_phase_out_capacity: int = BASE_PHASE_OUT_CAPACITY

    total_emissions: float = 0.0
    total_production: float = 0.0
    foreign_dependency: float = 0.0
    climate_damage: float = 0.0
    sustainability_score: float = 0.0
    player_choices: List[str] = field(default_factory=list)
    data_layer_unlocked: str = "basic"
    saturation_level: float = 100.0
    game_phase: str = "learning"
    tutorial_step: int = 0
    shown_facts: List[str] = field(default_factory=list)
    bad_choice_count: int = 0
    good_choice_streak: int = 0
    next_phase_out_discount: Optional[float] = None

    # transient UI flags
    current_view: str = "map"
    selected_field: Optional[str] = None
    show_field_modal: bool = False
    show_event_modal: bool = False
    show_achievement_modal: bool = False
    show_game_over_modal: bool = False
    new_achievements: List[str] = field(default_factory=list)
    show_budget_warning: bool = False
    budget_warning_message: str = ""

    def field_by_name(self, name: str) -> Optional[Field]:
        for f in self.game_fields:
            if f.name == name:
                return f
        return None

    @property
    def active_fields(self) -> List[Field]:
        return [f for f in self.game_fields if f.is_active]

    @property
    def phased_out_count(self) -> int:
        return len(self.shutdowns)

    @property
    def is_over(self) -> bool:
        return self.game_phase in TERMINAL_PHASES


def active_totals(fields: List[Field]) -> Dict[str, float]:
    """Summed latest emissions and production of the active fields."""
    active = [f for f in fields if f.is_active]
    return {
        "total_emissions": float(sum(f.emissions[0] for f in active if f.emissions)),
        "total_production": float(sum(f.production for f in active)),
    }


def metrics_to_dict(s: GameState) -> Dict[str, float]:
    """Scalar snapshot used by run logs and the UI."""
    return {
        "year": int(s.year),
        "budget": float(s.budget),
        "score": int(s.score),
        "global_temperature": float(s.global_temperature),
        "norway_tech_rank": float(s.norway_tech_rank),
        "climate_damage": float(s.climate_damage),
        "phased_out": int(s.phased_out_count),
        "active": len(s.active_fields),
    }


def create_fresh_game_state(series: Optional[Mapping[str, Mapping[int, YearRecord]]] = None) -> GameState:
    """Brand-new game: every field derived from the dataset, all scalars at baseline.

    Keep it in core so headless tests, the engine and the loader share the same baseline.
    """
    from .dataset import load_historical_series
    from .fields import create_fields
    from .projections import project_series

    if series is None:
        series = load_historical_series()
    fields = create_fields(project_series(series))
    return GameState(game_fields=fields, **active_totals(fields))
