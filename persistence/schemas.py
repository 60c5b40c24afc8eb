"""persistence.schemas

Contracts for the persisted game blob.

Everything read back from storage is untrusted. Each persisted scalar has a
rule (type + range, enum or length limit); a value failing its rule is
discarded and the fresh-state default is used instead. Collections are
filtered item by item so one bad entry never costs the whole list.

Booleans are never accepted where a number is expected (JSON `true` is not 1).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from core.investments import INVESTMENT_TYPES
from core.state import DATA_LAYERS, FIELD_STATUSES, GAME_PHASES, VIEW_MODES

MAX_ACHIEVEMENT_LEN = 100
MAX_CHOICE_LEN = 200
MAX_FIELD_NAME_LEN = 50

# the clock keeps running after the 2040 horizon
YEAR_RANGE = (2020, 2200)
BUDGET_RANGE = (0.0, 1e9)
# one category can absorb a whole budget
INVESTMENT_RANGE = BUDGET_RANGE

_MISSING = object()


def is_number(x: Any) -> bool:
    return isinstance(x, (int, float)) and not isinstance(x, bool) and math.isfinite(x)


def is_int_like(x: Any) -> bool:
    return is_number(x) and float(x).is_integer()


def is_short_str(x: Any, max_len: int) -> bool:
    return isinstance(x, str) and 0 < len(x) <= max_len


@dataclass(frozen=True)
class ScalarRule:
    """Accept-or-discard rule for one persisted scalar."""

    kind: str  # number | int | bool | enum
    lo: float = -math.inf
    hi: float = math.inf
    choices: Tuple[str, ...] = ()

    def check(self, value: Any) -> bool:
        if self.kind == "bool":
            return isinstance(value, bool)
        if self.kind == "enum":
            return isinstance(value, str) and value in self.choices
        if self.kind == "int":
            return is_int_like(value) and self.lo <= value <= self.hi
        return is_number(value) and self.lo <= value <= self.hi

    def coerce(self, value: Any) -> Any:
        if self.kind == "int":
            return int(value)
        if self.kind == "number":
            return float(value)
        return value


SCALAR_RULES: Dict[str, ScalarRule] = {
    "budget": ScalarRule("number", *BUDGET_RANGE),
    "score": ScalarRule("int", 0, 1_000_000),
    "year": ScalarRule("int", *YEAR_RANGE),
    "global_temperature": ScalarRule("number", 1.0, 5.0),
    "norway_tech_rank": ScalarRule("number", 0, 100),
    "foreign_dependency": ScalarRule("number", 0, 100),
    "climate_damage": ScalarRule("number", 0, 1e9),
    "sustainability_score": ScalarRule("number", 0, 100),
    "saturation_level": ScalarRule("number", 0, 100),
    "tutorial_step": ScalarRule("int", 0, 100),
    "bad_choice_count": ScalarRule("int", 0, 10_000),
    "good_choice_streak": ScalarRule("int", 0, 10_000),
    "yearly_phase_out_capacity": ScalarRule("int", 0, 8),
    "multi_phase_out_mode": ScalarRule("bool"),
    "data_layer_unlocked": ScalarRule("enum", choices=DATA_LAYERS),
    "game_phase": ScalarRule("enum", choices=GAME_PHASES),
    "current_view": ScalarRule("enum", choices=VIEW_MODES),
}

STRING_LIST_LIMITS: Dict[str, int] = {
    "achievements": MAX_ACHIEVEMENT_LEN,
    "player_choices": MAX_CHOICE_LEN,
    "shown_facts": MAX_CHOICE_LEN,
}


def validate_scalars(payload: Mapping[str, Any]) -> Tuple[Dict[str, Any], List[str]]:
    """Return (accepted, rejected_keys). Missing keys are neither."""
    accepted: Dict[str, Any] = {}
    rejected: List[str] = []
    for key, rule in SCALAR_RULES.items():
        value = payload.get(key, _MISSING)
        if value is _MISSING:
            continue
        if rule.check(value):
            accepted[key] = rule.coerce(value)
        else:
            rejected.append(key)
    return accepted, rejected


def normalize_string_list(x: Any, max_len: int, *, unique: bool = False) -> Optional[List[str]]:
    """None when `x` is not a list; otherwise the valid strings in order."""
    if not isinstance(x, list):
        return None
    out: List[str] = []
    for item in x:
        if not is_short_str(item, max_len):
            continue
        if unique and item in out:
            continue
        out.append(item)
    return out


def normalize_shutdowns(x: Any, known_names: Sequence[str]) -> Dict[str, int]:
    if not isinstance(x, Mapping):
        return {}
    known = set(known_names)
    # a shutdown lands the year after the closing year
    lo, hi = YEAR_RANGE[0], YEAR_RANGE[1] + 1
    out: Dict[str, int] = {}
    for name, year in x.items():
        if not is_short_str(name, MAX_FIELD_NAME_LEN) or name not in known:
            continue
        if not is_int_like(year) or not lo <= year <= hi:
            continue
        out[name] = int(year)
    return out


def normalize_investments(x: Any) -> Optional[Dict[str, float]]:
    if not isinstance(x, Mapping):
        return None
    lo, hi = INVESTMENT_RANGE
    out: Dict[str, float] = {k: 0.0 for k in INVESTMENT_TYPES}
    for key, value in x.items():
        if key in out and is_number(value) and lo <= value <= hi:
            out[key] = float(value)
    return out


def normalize_field_statuses(x: Any) -> Dict[str, str]:
    """name -> status from persisted field entries; malformed entries are skipped."""
    if not isinstance(x, list):
        return {}
    out: Dict[str, str] = {}
    for entry in x:
        if not isinstance(entry, Mapping):
            continue
        name = entry.get("name")
        status = entry.get("status")
        if is_short_str(name, MAX_FIELD_NAME_LEN) and status in FIELD_STATUSES:
            out[name] = status
    return out


def normalize_selected_names(x: Any) -> List[str]:
    """Names from persisted [{name, status}] pairs (bare strings tolerated)."""
    if not isinstance(x, list):
        return []
    out: List[str] = []
    for entry in x:
        name = entry.get("name") if isinstance(entry, Mapping) else entry
        if is_short_str(name, MAX_FIELD_NAME_LEN) and name not in out:
            out.append(name)
    return out
