"""persistence.codec

save: GameState -> reduced, JSON-ready payload (statuses + scalars only).
load: payload -> GameState, re-deriving every field from the dataset and
overlaying only the persisted statuses.

Production and emission series are never persisted; the dataset is the
ground truth for them.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from core.state import (
    Field,
    GameState,
    YearRecord,
    active_totals,
    create_fresh_game_state,
)

from .schemas import (
    STRING_LIST_LIMITS,
    normalize_field_statuses,
    normalize_investments,
    normalize_selected_names,
    normalize_shutdowns,
    normalize_string_list,
    validate_scalars,
)

logger = logging.getLogger(__name__)

PAYLOAD_VERSION = 1

SAVED_SCALARS = (
    "budget",
    "score",
    "year",
    "global_temperature",
    "norway_tech_rank",
    "foreign_dependency",
    "climate_damage",
    "sustainability_score",
    "data_layer_unlocked",
    "saturation_level",
    "game_phase",
    "tutorial_step",
    "bad_choice_count",
    "good_choice_streak",
    "current_view",
    "multi_phase_out_mode",
    "yearly_phase_out_capacity",
)


def save_payload(state: GameState, *, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Full storable subset of `state`."""
    payload: Dict[str, Any] = {
        "version": PAYLOAD_VERSION,
        "game_fields": [
            {
                "name": f.name,
                "status": f.status,
                "phase_out_cost": float(f.phase_out_cost),
                "production": float(f.production),
            }
            for f in state.game_fields
        ],
    }
    for key in SAVED_SCALARS:
        payload[key] = getattr(state, key)
    payload["achievements"] = list(state.achievements)
    payload["shutdowns"] = dict(state.shutdowns)
    payload["investments"] = dict(state.investments)
    payload["player_choices"] = list(state.player_choices)
    payload["shown_facts"] = list(state.shown_facts)

    selected: List[Dict[str, str]] = []
    for name in state.selected_fields:
        f = state.field_by_name(name)
        if f is not None:
            selected.append({"name": f.name, "status": f.status})
    payload["selected_fields"] = selected
    payload["last_saved"] = (now or datetime.now(timezone.utc)).isoformat()
    return payload


def fallback_payload(state: GameState) -> Dict[str, Any]:
    """Minimal payload written when the full save fails."""
    return {
        "version": PAYLOAD_VERSION,
        "game_fields": [{"name": f.name, "status": f.status} for f in state.game_fields],
        "shutdowns": dict(state.shutdowns),
        "budget": state.budget,
        "score": state.score,
        "year": state.year,
        "achievements": list(state.achievements),
    }


def _overlay_status(f: Field, status: Optional[str]) -> Field:
    if status == "closed":
        return f.closed()
    if status == "transitioning":
        return replace(f, status="transitioning")
    return f


def load_state(
    payload: Mapping[str, Any],
    series: Optional[Mapping[str, Mapping[int, YearRecord]]] = None,
) -> GameState:
    """Rebuild a GameState from an untrusted payload. Never raises on bad content.

    Fields come fresh from the dataset; persisted statuses are overlaid, and any
    name present in `shutdowns` is closed even if its status entry is missing.
    Every scalar is validated; rejected values keep the fresh default.
    """
    fresh = create_fresh_game_state(series)
    if not isinstance(payload, Mapping):
        logger.warning("Persisted payload is not an object; starting fresh")
        return fresh

    names = [f.name for f in fresh.game_fields]
    statuses = normalize_field_statuses(payload.get("game_fields"))
    shutdowns = normalize_shutdowns(payload.get("shutdowns"), names)
    for name in shutdowns:
        statuses[name] = "closed"
    fields = [_overlay_status(f, statuses.get(f.name)) for f in fresh.game_fields]

    scalars, rejected = validate_scalars(payload)
    for key in rejected:
        logger.debug("Discarding invalid persisted value for %r", key)

    lists: Dict[str, List[str]] = {}
    for key, max_len in STRING_LIST_LIMITS.items():
        values = normalize_string_list(payload.get(key), max_len, unique=(key == "achievements"))
        if values is None:
            if key in payload:
                logger.debug("Discarding invalid persisted value for %r", key)
            continue
        lists[key] = values

    investments = normalize_investments(payload.get("investments"))
    if investments is None:
        investments = dict(fresh.investments)

    active = {f.name for f in fields if f.is_active}
    selected = [n for n in normalize_selected_names(payload.get("selected_fields")) if n in active]

    return replace(
        fresh,
        game_fields=fields,
        shutdowns=shutdowns,
        investments=investments,
        selected_fields=selected,
        **scalars,
        **lists,
        **active_totals(fields),
    )
