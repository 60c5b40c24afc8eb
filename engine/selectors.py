"""engine.selectors

Read-only views over GameState for the UI. Nothing here changes state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

from core.effects import calculate_phase_out_capacity
from core.fields import intensity_color
from core.state import GameState

CARBON_PRICE_NOK_PER_TONNE = 800.0
TONNES_PER_MT = 1_000_000.0


@dataclass(frozen=True)
class GameStats:
    fields_phased: int
    fields_remaining: int
    total_fields: int
    completion_percentage: float
    average_intensity: float
    total_budget_spent: float
    emissions_avoided_mt: float
    projected_savings: float  # NOK, avoided tonnes at the reference carbon price
    selected_fields_count: int
    phase_out_capacity: int


def compute_stats(state: GameState) -> GameStats:
    active = state.active_fields
    closed = [f for f in state.game_fields if f.status == "closed"]
    total = len(state.game_fields)

    avoided_mt = sum(f.total_lifetime_emissions for f in closed) / 1000.0
    avg_intensity = sum(f.intensity for f in active) / len(active) if active else 0.0

    return GameStats(
        fields_phased=len(closed),
        fields_remaining=len(active),
        total_fields=total,
        completion_percentage=(len(closed) / total * 100.0) if total else 0.0,
        average_intensity=avg_intensity,
        total_budget_spent=float(sum(f.phase_out_cost for f in closed)),
        emissions_avoided_mt=avoided_mt,
        projected_savings=avoided_mt * TONNES_PER_MT * CARBON_PRICE_NOK_PER_TONNE,
        selected_fields_count=len(state.selected_fields),
        phase_out_capacity=calculate_phase_out_capacity(state),
    )


def map_markers(state: GameState) -> List[Dict[str, Any]]:
    """One marker per field: coordinates are passed through, colour by status/intensity."""
    return [
        {
            "name": f.name,
            "lon": f.lon,
            "lat": f.lat,
            "status": f.status,
            "color": intensity_color(f.intensity, f.status),
            "selected": f.name in state.selected_fields,
        }
        for f in state.game_fields
    ]
