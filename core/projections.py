"""
core.projections
Production / emission projection engine.

- project the incomplete historical series forward to a fixed horizon
  (recent average anchor, constant yearly decline, snap to zero)
- yearly aggregates (income, emission, oil, gas) under a shutdown schedule

Absent data is excluded from averages and sums, never inferred.
"""

from __future__ import annotations

import copy
import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional

from .state import HistoricalSeries, ShutdownMap, YearRecord

PROJECTION_START = 2023
PROJECTION_END = 2040
ANNUAL_DECLINE_RATE = 0.10
ZERO_SNAP = 0.01
AVERAGE_WINDOW = 5

DEFAULT_SHUTDOWN_YEAR = 2040

# Years at/before the cutoff are valued at fixed reference prices.
REFERENCE_PRICE_CUTOFF = 2022
REFERENCE_OIL_PRICE = 80.0  # USD
REFERENCE_GAS_PRICE = 50.0  # USD

# https://www.norskpetroleum.no/en/calculator/about-energy-calculator/
OIL_SM3_TO_BARREL = 6_289_800  # million Sm3 -> barrels
# https://ngc.equinor.com/
GAS_GSM3_TO_SM3 = 1_000_000_000
GAS_SM3_TO_MMBTU = 0.037913

BOE_PER_SM3 = 6.29
GAS_BOE_FACTOR = 1.1

FACT_KEYS = ("production_oil", "production_gas", "emission", "emission_intensity")


def finite_or_zero(x: Any) -> float:
    try:
        v = float(x)
    except (TypeError, ValueError):
        return 0.0
    return v if math.isfinite(v) else 0.0


def round2(x: Any) -> float:
    return round(finite_or_zero(x), 2)


def _fact(record: Optional[Mapping[str, Any]], key: str) -> Optional[float]:
    """Recorded value or None. Non-finite values count as not recorded."""
    if not record:
        return None
    v = record.get(key)
    if v is None or isinstance(v, bool):
        return None
    try:
        f = float(v)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None


def latest_year(yearly: Mapping[int, Any]) -> Optional[int]:
    return max(yearly) if yearly else None


def is_still_producing(yearly: Mapping[int, YearRecord], key: str) -> bool:
    """True when the most recent recorded year has a value for `key`."""
    last = latest_year(yearly)
    if last is None:
        return False
    return _fact(yearly[last], key) is not None


def recent_average(yearly: Mapping[int, YearRecord], key: str, window: int = AVERAGE_WINDOW) -> Optional[float]:
    """Average of `key` over the most recent `window` years that recorded it."""
    years = sorted((y for y in yearly if _fact(yearly[y], key) is not None), reverse=True)[:window]
    if not years:
        return None
    values = [_fact(yearly[y], key) for y in years]
    return sum(values) / len(values)  # type: ignore[arg-type]


def _decline(value: Optional[float]) -> Optional[float]:
    if value is None:
        return None
    value *= 1.0 - ANNUAL_DECLINE_RATE
    return 0.0 if value < ZERO_SNAP else value


def _projected_intensity(oil: Optional[float], gas: Optional[float], emission: Optional[float]) -> Optional[float]:
    if emission is None or (oil is None and gas is None):
        return None
    oil_boe = oil * 1_000_000 * BOE_PER_SM3 if oil else 0.0
    gas_boe = gas * 1_000_000 * GAS_BOE_FACTOR * BOE_PER_SM3 if gas else 0.0
    total = oil_boe + gas_boe
    if total <= 0:
        return None
    return finite_or_zero(emission * 1000 / total)


def project_field(yearly: Mapping[int, YearRecord]) -> Dict[int, YearRecord]:
    """Projected records PROJECTION_START..PROJECTION_END for one field.

    Resources no longer produced in the latest recorded year get no projection.
    Every year is still emitted, so a shut-in field ends in empty records and
    reads as zero production from 2023 on.
    """
    oil_active = is_still_producing(yearly, "production_oil")
    gas_active = is_still_producing(yearly, "production_gas")

    oil = recent_average(yearly, "production_oil") if oil_active else None
    gas = recent_average(yearly, "production_gas") if gas_active else None
    emission = recent_average(yearly, "emission") if (oil_active or gas_active) else None

    out: Dict[int, YearRecord] = {}
    for year in range(PROJECTION_START, PROJECTION_END + 1):
        record: YearRecord = {}
        if oil is not None:
            record["production_oil"] = round2(oil)
        if gas is not None:
            record["production_gas"] = round2(gas)
        if emission is not None:
            record["emission"] = round2(emission)
        intensity = _projected_intensity(oil, gas, emission)
        if intensity is not None:
            record["emission_intensity"] = round2(intensity)
        out[year] = record

        oil = _decline(oil)
        gas = _decline(gas)
    return out


def project_series(series: Mapping[str, Mapping[int, YearRecord]]) -> HistoricalSeries:
    """Deep copy of `series` with projected years merged in.

    Projected years never overwrite years that already hold recorded data.
    """
    combined: HistoricalSeries = copy.deepcopy({name: dict(yearly) for name, yearly in series.items()})
    for name, yearly in series.items():
        for year, record in project_field(yearly).items():
            if year in combined[name]:
                continue
            combined[name][year] = record
    return combined


# -------------------------
# Yearly aggregates
# -------------------------


@dataclass(frozen=True)
class YearlyTotal:
    year: int
    value: float


@dataclass(frozen=True)
class YearlyAggregate:
    year: int
    income: float
    emission: float
    oil: float
    gas: float


@dataclass(frozen=True)
class EmissionIntensityPoint:
    field_name: str
    year: int
    total_production: float
    emission_intensity: float


def shutdown_year(name: str, shutdowns: Optional[Mapping[str, int]]) -> int:
    return int((shutdowns or {}).get(name, DEFAULT_SHUTDOWN_YEAR))


def _sum_by_year(
    series: Mapping[str, Mapping[int, YearRecord]],
    shutdowns: Optional[ShutdownMap],
    value_of: Callable[[int, YearRecord], float],
) -> List[YearlyTotal]:
    totals: Dict[int, float] = {}
    for name, yearly in series.items():
        last = shutdown_year(name, shutdowns)
        for year, record in yearly.items():
            if int(year) > last:
                continue
            totals[int(year)] = totals.get(int(year), 0.0) + finite_or_zero(value_of(int(year), record))
    return [YearlyTotal(year=y, value=round2(totals[y])) for y in sorted(totals)]


def record_income(year: int, record: Mapping[str, Any], oil_price: float, gas_price: float) -> float:
    """USD income for one field-year. Historical years use reference prices."""
    live = year > REFERENCE_PRICE_CUTOFF
    oil = _fact(record, "production_oil") or 0.0
    gas = _fact(record, "production_gas") or 0.0
    oil_income = oil * OIL_SM3_TO_BARREL * (oil_price if live else REFERENCE_OIL_PRICE)
    gas_income = gas * GAS_GSM3_TO_SM3 * GAS_SM3_TO_MMBTU * (gas_price if live else REFERENCE_GAS_PRICE)
    return finite_or_zero(oil_income + gas_income)


def yearly_income(
    series: Mapping[str, Mapping[int, YearRecord]],
    oil_price: float,
    gas_price: float,
    shutdowns: Optional[ShutdownMap] = None,
) -> List[YearlyTotal]:
    return _sum_by_year(series, shutdowns, lambda y, r: record_income(y, r, oil_price, gas_price))


def yearly_emission(series: Mapping[str, Mapping[int, YearRecord]], shutdowns: Optional[ShutdownMap] = None) -> List[YearlyTotal]:
    return _sum_by_year(series, shutdowns, lambda y, r: _fact(r, "emission") or 0.0)


def yearly_oil_production(series: Mapping[str, Mapping[int, YearRecord]], shutdowns: Optional[ShutdownMap] = None) -> List[YearlyTotal]:
    return _sum_by_year(series, shutdowns, lambda y, r: _fact(r, "production_oil") or 0.0)


def yearly_gas_production(series: Mapping[str, Mapping[int, YearRecord]], shutdowns: Optional[ShutdownMap] = None) -> List[YearlyTotal]:
    return _sum_by_year(series, shutdowns, lambda y, r: _fact(r, "production_gas") or 0.0)


def aggregate_yearly(
    series: Mapping[str, Mapping[int, YearRecord]],
    oil_price: float,
    gas_price: float,
    shutdowns: Optional[ShutdownMap] = None,
) -> List[YearlyAggregate]:
    """All four yearly aggregates joined on year."""
    income = {t.year: t.value for t in yearly_income(series, oil_price, gas_price, shutdowns)}
    emission = {t.year: t.value for t in yearly_emission(series, shutdowns)}
    oil = {t.year: t.value for t in yearly_oil_production(series, shutdowns)}
    gas = {t.year: t.value for t in yearly_gas_production(series, shutdowns)}
    return [
        YearlyAggregate(
            year=y,
            income=income.get(y, 0.0),
            emission=emission.get(y, 0.0),
            oil=oil.get(y, 0.0),
            gas=gas.get(y, 0.0),
        )
        for y in sorted(income)
    ]


def extract_emission_intensities(series: Mapping[str, Mapping[int, YearRecord]]) -> List[EmissionIntensityPoint]:
    out: List[EmissionIntensityPoint] = []
    for name, yearly in series.items():
        for year in sorted(yearly):
            record = yearly[year]
            intensity = _fact(record, "emission_intensity")
            if intensity is None:
                continue
            total = (_fact(record, "production_oil") or 0.0) + (_fact(record, "production_gas") or 0.0)
            out.append(
                EmissionIntensityPoint(
                    field_name=name,
                    year=int(year),
                    total_production=round2(total),
                    emission_intensity=round(intensity, 4),
                )
            )
    return out
