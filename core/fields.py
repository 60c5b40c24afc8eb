"""
core.fields
Field factory: derive a gameplay Field from a field's historical + projected series.

All coefficients are fixed reference values; user-adjustable prices never
reach this module.
"""

from __future__ import annotations

import logging
import math
from typing import List, Mapping, Optional, Tuple

from .dataset import DEFAULT_COORDINATES, FIELD_COORDINATES
from .projections import finite_or_zero
from .state import Field, HistoricalSeries, YearRecord

logger = logging.getLogger(__name__)

EMISSION_HISTORY_YEARS = 5
KT_PER_MT = 1000.0
REMAINING_OPERATING_YEARS = 15

MIN_PHASE_OUT_COST = 5            # NOK billions
PHASE_OUT_COST_PER_UNIT = 15      # NOK billions per unit of production

REFERENCE_OIL_PRICE_USD = 80.0
BARRELS_PER_BOE = 6.3
NOK_PER_USD = 10.0
REVENUE_PER_UNIT = REFERENCE_OIL_PRICE_USD * BARRELS_PER_BOE * NOK_PER_USD

WORKERS_PER_UNIT = 50


def field_coordinates(name: str) -> Tuple[float, float]:
    """(lon, lat) for a field; unknown fields land on the shelf centre."""
    coords = FIELD_COORDINATES.get(name)
    if coords is None:
        logger.warning("No coordinates for field %r; using default %s", name, DEFAULT_COORDINATES)
        return DEFAULT_COORDINATES
    return coords


def transition_potential_for(lat: float, production: float) -> str:
    if lat > 70:
        return "wind"
    if lat < 58:
        return "solar"
    if production > 5:
        return "data_center"
    return "research_hub"


def _value(record: Optional[Mapping[str, float]], key: str) -> float:
    if not record:
        return 0.0
    return finite_or_zero(record.get(key))


def _optional(record: Optional[Mapping[str, float]], key: str) -> Optional[float]:
    if not record or record.get(key) is None:
        return None
    return finite_or_zero(record.get(key))


def create_field(name: str, series: Mapping[str, Mapping[int, YearRecord]], coordinates: Optional[Tuple[float, float]] = None) -> Field:
    """Build the Field for `name` from an (already projected) series. Pure and deterministic."""
    yearly = series.get(name) or {}
    years = sorted(yearly, reverse=True)
    latest: Optional[Mapping[str, float]] = yearly[years[0]] if years else None

    lon, lat = coordinates if coordinates is not None else field_coordinates(name)

    emissions = [_value(yearly[y], "emission") / KT_PER_MT for y in years[:EMISSION_HISTORY_YEARS]]
    production = finite_or_zero(_value(latest, "production_oil") + _value(latest, "production_gas"))

    yearly_emission_mt = _value(latest, "emission") / KT_PER_MT
    total_lifetime_emissions = finite_or_zero(yearly_emission_mt * REMAINING_OPERATING_YEARS)

    phase_out_cost = max(MIN_PHASE_OUT_COST, math.floor(production * PHASE_OUT_COST_PER_UNIT))
    yearly_revenue = math.floor(production * REVENUE_PER_UNIT)

    return Field(
        name=name,
        lon=float(lon),
        lat=float(lat),
        emissions=emissions or [0.0],
        intensity=_value(latest, "emission_intensity"),
        status="active",
        production=production,
        workers=int(math.floor(production * WORKERS_PER_UNIT)),
        phase_out_cost=float(phase_out_cost),
        yearly_revenue=float(yearly_revenue),
        total_lifetime_emissions=total_lifetime_emissions,
        transition_potential=transition_potential_for(float(lat), production),
        production_oil=_optional(latest, "production_oil"),
        production_gas=_optional(latest, "production_gas"),
        real_emission=_optional(latest, "emission"),
        real_emission_intensity=_optional(latest, "emission_intensity"),
    )


def create_fields(series: HistoricalSeries) -> List[Field]:
    """One Field per series key, in dataset order."""
    return [create_field(name, series) for name in series]


def intensity_color(intensity: float, status: str) -> str:
    """Map colour for a field: lifecycle first, then emission intensity band."""
    if status == "closed":
        return "#10B981"
    if status == "transitioning":
        return "#F59E0B"
    if intensity > 15:
        return "#EF4444"
    if intensity > 8:
        return "#F97316"
    if intensity > 3:
        return "#EAB308"
    return "#22C55E"
