"""
core.dataset
Historical dataset: per-field yearly production/emission facts.

The bundled file is the compact form produced by `compact_rows()` from the
raw spreadsheet export. Years are sparse; a missing fact means "not recorded".
"""

from __future__ import annotations

import copy
import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from .state import HistoricalSeries, YearRecord

DEFAULT_DATASET_PATH = Path(__file__).resolve().parent / "data" / "historical.json"

# Column order of a raw data row after the two header rows.
ROW_COLUMNS = (
    "field",
    "year",
    "gwh",
    "production_oil",
    "production_gas",
    "_unused_1",
    "emission",
    "_unused_2",
    "emission_intensity",
)
ROW_FACTS = ("production_oil", "production_gas", "emission", "emission_intensity")

DEFAULT_COORDINATES: Tuple[float, float] = (5.0, 62.0)  # (lon, lat), centre of the shelf

# Approximate Norwegian Continental Shelf positions: name -> (lon, lat)
FIELD_COORDINATES: Dict[str, Tuple[float, float]] = {
    "Aasta Hansteen": (6.8, 65.1),
    "Alvheim": (2.1, 56.5),
    "Balder": (2.8, 56.3),
    "Brage": (2.4, 60.5),
    "Draugen": (7.8, 64.3),
    "Edvard Grieg": (2.1, 56.1),
    "Ekofisk": (3.2, 56.5),
    "Eldfisk": (3.3, 56.3),
    "Gjøa": (3.9, 61.0),
    "Goliat": (22.2, 71.1),
    "Grane": (2.8, 59.1),
    "Gullfaks": (2.5, 61.2),
    "Heidrun": (7.3, 65.3),
    "Johan Castberg": (19.0, 71.6),
    "Johan Sverdrup": (2.8, 56.1),
    "Kristin": (6.6, 65.0),
    "Kvitebjørn": (2.5, 61.1),
    "Martin Linge": (3.3, 60.8),
    "Njord": (6.6, 64.8),
    "Norne": (8.1, 66.0),
    "Ormen Lange": (6.3, 63.4),
    "Oseberg": (2.8, 60.8),
    "Skarv": (7.5, 65.5),
    "Sleipner": (2.9, 58.4),
    "Snorre": (2.2, 61.4),
    "Snøhvit": (21.3, 71.6),
    "Statfjord": (1.8, 61.8),
    "Troll": (3.7, 60.6),
    "Ula": (2.8, 57.1),
    "Valhall": (3.4, 56.3),
    "Visund": (2.4, 61.4),
    "Yme": (2.2, 58.1),
    "Åsgard": (7.0, 65.2),
}


def _as_number(x: Any) -> Optional[float]:
    if x is None or isinstance(x, bool):
        return None
    try:
        return float(x)
    except (TypeError, ValueError):
        return None


def parse_series(obj: Mapping[str, Any]) -> HistoricalSeries:
    """Normalize a decoded JSON mapping into a HistoricalSeries (int years, float facts)."""
    out: HistoricalSeries = {}
    for name, yearly in dict(obj).items():
        if not isinstance(yearly, Mapping):
            continue
        years: Dict[int, YearRecord] = {}
        for year, record in yearly.items():
            try:
                y = int(year)
            except (TypeError, ValueError):
                continue
            facts: YearRecord = {}
            for k in ROW_FACTS:
                v = _as_number((record or {}).get(k)) if isinstance(record, Mapping) else None
                if v is not None:
                    facts[k] = v
            years[y] = facts
        out[str(name)] = years
    return out


@lru_cache(maxsize=8)
def _load_cached(path: str) -> HistoricalSeries:
    with open(path, "r", encoding="utf-8") as fh:
        return parse_series(json.load(fh))


def load_historical_series(path: Optional[str | Path] = None) -> HistoricalSeries:
    """Load the compact dataset. Returns a private copy; the cache stays untouched."""
    p = Path(path) if path is not None else DEFAULT_DATASET_PATH
    return copy.deepcopy(_load_cached(str(p.resolve())))


def compact_rows(rows: Sequence[Sequence[Any]], header_rows: int = 2) -> HistoricalSeries:
    """Group raw table rows by field then year.

    Falsy facts (missing, 0, empty string) are dropped per row.
    """
    result: HistoricalSeries = {}
    for row in list(rows)[header_rows:]:
        cells = dict(zip(ROW_COLUMNS, row))
        name = cells.get("field")
        year = cells.get("year")
        if not name:
            continue
        try:
            y = int(year)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            continue
        facts: YearRecord = {}
        for k in ROW_FACTS:
            v = cells.get(k)
            if not v:
                continue
            num = _as_number(v)
            if num:
                facts[k] = num
        result.setdefault(str(name), {})[y] = facts
    return result
