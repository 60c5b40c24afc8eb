"""engine.actions

The closed set of player/UI actions accepted by the reducer.

Each variant carries only its own payload. `action_from_mapping` is the input
boundary for dict-shaped actions (replay scripts, UI callbacks) and is the
only place that raises on bad input.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Mapping, Optional, Type, Union


@dataclass(frozen=True)
class PhaseOutField:
    field_name: str


@dataclass(frozen=True)
class PhaseOutSelectedFields:
    pass


@dataclass(frozen=True)
class ToggleMultiSelect:
    pass


@dataclass(frozen=True)
class SelectFieldForMulti:
    field_name: str


@dataclass(frozen=True)
class DeselectFieldFromMulti:
    field_name: str


@dataclass(frozen=True)
class ClearSelectedFields:
    pass


@dataclass(frozen=True)
class AdvanceYearManually:
    pass


@dataclass(frozen=True)
class MakeInvestment:
    investment: str
    amount: float


@dataclass(frozen=True)
class RestartGame:
    pass


@dataclass(frozen=True)
class SetSelectedField:
    field_name: Optional[str] = None


@dataclass(frozen=True)
class ToggleFieldModal:
    show: bool


@dataclass(frozen=True)
class UpdateEmissionsProduction:
    pass


@dataclass(frozen=True)
class SetViewMode:
    view: str


@dataclass(frozen=True)
class AdvanceTutorial:
    pass


@dataclass(frozen=True)
class SkipTutorial:
    pass


@dataclass(frozen=True)
class ResetTutorial:
    pass


@dataclass(frozen=True)
class CloseAchievementModal:
    pass


@dataclass(frozen=True)
class CloseEventModal:
    pass


@dataclass(frozen=True)
class CloseGameOverModal:
    pass


GameAction = Union[
    PhaseOutField,
    PhaseOutSelectedFields,
    ToggleMultiSelect,
    SelectFieldForMulti,
    DeselectFieldFromMulti,
    ClearSelectedFields,
    AdvanceYearManually,
    MakeInvestment,
    RestartGame,
    SetSelectedField,
    ToggleFieldModal,
    UpdateEmissionsProduction,
    SetViewMode,
    AdvanceTutorial,
    SkipTutorial,
    ResetTutorial,
    CloseAchievementModal,
    CloseEventModal,
    CloseGameOverModal,
]

ACTION_TYPES: Dict[str, Type[Any]] = {
    "PHASE_OUT_FIELD": PhaseOutField,
    "PHASE_OUT_SELECTED_FIELDS": PhaseOutSelectedFields,
    "TOGGLE_MULTI_SELECT": ToggleMultiSelect,
    "SELECT_FIELD_FOR_MULTI": SelectFieldForMulti,
    "DESELECT_FIELD_FROM_MULTI": DeselectFieldFromMulti,
    "CLEAR_SELECTED_FIELDS": ClearSelectedFields,
    "ADVANCE_YEAR_MANUALLY": AdvanceYearManually,
    "MAKE_INVESTMENT": MakeInvestment,
    "RESTART_GAME": RestartGame,
    "SET_SELECTED_FIELD": SetSelectedField,
    "TOGGLE_FIELD_MODAL": ToggleFieldModal,
    "UPDATE_EMISSIONS_PRODUCTION": UpdateEmissionsProduction,
    "SET_VIEW_MODE": SetViewMode,
    "ADVANCE_TUTORIAL": AdvanceTutorial,
    "SKIP_TUTORIAL": SkipTutorial,
    "RESET_TUTORIAL": ResetTutorial,
    "CLOSE_ACHIEVEMENT_MODAL": CloseAchievementModal,
    "CLOSE_EVENT_MODAL": CloseEventModal,
    "CLOSE_GAME_OVER_MODAL": CloseGameOverModal,
}

_TYPE_NAMES: Dict[Type[Any], str] = {v: k for k, v in ACTION_TYPES.items()}


def action_type_name(action: Any) -> str:
    return _TYPE_NAMES.get(type(action), type(action).__name__)


def action_to_dict(action: Any) -> Dict[str, Any]:
    return {"type": action_type_name(action), **asdict(action)}


def action_from_mapping(d: Mapping[str, Any]) -> GameAction:
    """Build an action from {"type": "...", <payload keys>}.

    Raises ValueError for unknown types or missing payload keys.
    """
    name = str(d.get("type") or "").strip().upper()
    cls = ACTION_TYPES.get(name)
    if cls is None:
        raise ValueError(f"Unknown action type: {name!r}")

    kwargs: Dict[str, Any] = {}
    for f in fields(cls):
        if f.name in d:
            kwargs[f.name] = d[f.name]
    try:
        action = cls(**kwargs)
    except TypeError as e:
        raise ValueError(f"Bad payload for {name}: {e}") from e

    if isinstance(action, MakeInvestment):
        try:
            action = MakeInvestment(investment=str(action.investment), amount=float(action.amount))
        except (TypeError, ValueError) as e:
            raise ValueError(f"Bad amount for MAKE_INVESTMENT: {action.amount!r}") from e
    return action
