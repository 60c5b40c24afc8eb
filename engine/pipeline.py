"""engine.pipeline

The game reducer (headless).

Responsibilities:
- validate an action against the current state (invalid -> same state back)
- apply phase-outs, investments and year advancement
- yearly consequences, achievements and terminal detection after the effect

This layer is UI-agnostic and never touches storage; engine.game does that.
"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import Any, Callable, Dict, List, Mapping, Optional, Type

from core.achievements import evaluate_achievements
from core.effects import (
    apply_terminal_check,
    apply_yearly_consequences,
    calculate_phase_out_capacity,
    calculate_yearly_consequences,
    cooled_temperature,
    warmed_temperature,
)
from core.investments import INVESTMENT_TYPES, tech_rank
from core.state import (
    VIEW_MODES,
    Field,
    GameState,
    YearRecord,
    active_totals,
    create_fresh_game_state,
)

from .actions import (
    AdvanceTutorial,
    AdvanceYearManually,
    ClearSelectedFields,
    CloseAchievementModal,
    CloseEventModal,
    CloseGameOverModal,
    DeselectFieldFromMulti,
    MakeInvestment,
    PhaseOutField,
    PhaseOutSelectedFields,
    ResetTutorial,
    RestartGame,
    SelectFieldForMulti,
    SetSelectedField,
    SetViewMode,
    SkipTutorial,
    ToggleFieldModal,
    ToggleMultiSelect,
    UpdateEmissionsProduction,
)

TUTORIAL_DONE_STEP = 10


def _discounted_cost(state: GameState, f: Field) -> float:
    if state.next_phase_out_discount:
        return float(f.phase_out_cost) * (1.0 - float(state.next_phase_out_discount))
    return float(f.phase_out_cost)


def _close(fields: List[Field], names: set) -> List[Field]:
    return [f.closed() if f.name in names else f for f in fields]


def _merge_achievements(state: GameState) -> GameState:
    new = evaluate_achievements(state)
    if not new:
        return state
    held = list(state.achievements)
    for name in new:
        if name not in held:
            held.append(name)
    return replace(state, achievements=held, new_achievements=list(new), show_achievement_modal=True)


def _refresh_derived(state: GameState) -> GameState:
    return replace(
        state,
        yearly_phase_out_capacity=calculate_phase_out_capacity(state),
        **active_totals(state.game_fields),
    )


def _after_closure(state: GameState) -> GameState:
    """Yearly consequences on the post-phase-out state, then achievements, then terminal check."""
    state = apply_yearly_consequences(state)
    state = _merge_achievements(state)
    state = apply_terminal_check(state)
    return _refresh_derived(state)


# -------------------------
# Handlers
# -------------------------


def phase_out_field(state: GameState, action: PhaseOutField) -> GameState:
    f = state.field_by_name(action.field_name)
    if f is None or f.status == "closed" or state.budget < f.phase_out_cost:
        return state

    cost = _discounted_cost(state, f)
    avoided_mt = f.total_lifetime_emissions / 1000.0
    new_state = replace(
        state,
        budget=max(0.0, state.budget - cost),
        score=int(state.score + math.floor(avoided_mt)),
        global_temperature=cooled_temperature(state.global_temperature, f.emissions[0] if f.emissions else 0.0),
        game_fields=_close(state.game_fields, {f.name}),
        player_choices=[*state.player_choices, f"Phased out {f.name} - avoided {avoided_mt:.0f} Mt CO2"],
        good_choice_streak=state.good_choice_streak + 1,
        bad_choice_count=max(0, state.bad_choice_count - 1),
        shutdowns={**state.shutdowns, f.name: int(state.year) + 1},
        selected_fields=[n for n in state.selected_fields if n != f.name],
        show_field_modal=False,
        selected_field=None,
        next_phase_out_discount=None,
    )
    return _after_closure(new_state)


def phase_out_selected_fields(state: GameState, action: PhaseOutSelectedFields) -> GameState:
    """All-or-nothing batch, capped to the capacity of the pre-transition state."""
    candidates: List[Field] = []
    for name in state.selected_fields:
        f = state.field_by_name(name)
        if f is not None and f.is_active and state.budget >= f.phase_out_cost:
            candidates.append(f)
    chosen = candidates[: calculate_phase_out_capacity(state)]
    total_cost = sum(_discounted_cost(state, f) for f in chosen)

    if not chosen or total_cost > state.budget:
        if chosen:
            msg = f"Missing {round(total_cost - state.budget)} bn NOK to phase out {len(chosen)} fields."
        else:
            msg = "None of the selected fields can be phased out with the current budget."
        return replace(
            state,
            show_budget_warning=True,
            budget_warning_message=msg,
            selected_fields=[],
            multi_phase_out_mode=False,
        )

    names = {f.name for f in chosen}
    avoided_mt = sum(f.total_lifetime_emissions for f in chosen) / 1000.0
    reduction = sum(f.emissions[0] for f in chosen if f.emissions)
    advance = 1 if len(chosen) > 1 else 0

    new_state = replace(
        state,
        budget=max(0.0, state.budget - total_cost),
        score=int(state.score + math.floor(avoided_mt)),
        global_temperature=cooled_temperature(state.global_temperature, reduction),
        game_fields=_close(state.game_fields, names),
        player_choices=[
            *state.player_choices,
            f"Year {state.year + 1}: phased out {len(chosen)} fields - avoided {round(avoided_mt)} Mt CO2",
        ],
        year=int(state.year) + advance,
        good_choice_streak=state.good_choice_streak + len(chosen),
        bad_choice_count=max(0, state.bad_choice_count - len(chosen) // 2),
        shutdowns={**state.shutdowns, **{f.name: int(state.year) + 1 for f in chosen}},
        selected_fields=[],
        multi_phase_out_mode=False,
        next_phase_out_discount=None,
        show_budget_warning=False,
        budget_warning_message="",
    )
    return _after_closure(new_state)


def toggle_multi_select(state: GameState, action: ToggleMultiSelect) -> GameState:
    return replace(
        state,
        multi_phase_out_mode=not state.multi_phase_out_mode,
        selected_fields=[],
        selected_field=None,
        show_field_modal=False,
    )


def select_field_for_multi(state: GameState, action: SelectFieldForMulti) -> GameState:
    f = state.field_by_name(action.field_name)
    if f is None or not f.is_active or f.name in state.selected_fields:
        return state
    return replace(state, selected_fields=[*state.selected_fields, f.name])


def deselect_field_from_multi(state: GameState, action: DeselectFieldFromMulti) -> GameState:
    if action.field_name not in state.selected_fields:
        return state
    return replace(state, selected_fields=[n for n in state.selected_fields if n != action.field_name])


def clear_selected_fields(state: GameState, action: ClearSelectedFields) -> GameState:
    return replace(state, selected_fields=[], multi_phase_out_mode=False)


def advance_year_manually(state: GameState, action: AdvanceYearManually) -> GameState:
    """Stalling: the year passes with revenue in and climate bill out; temperature drifts up."""
    c = calculate_yearly_consequences(state)
    new_state = replace(
        state,
        year=int(state.year) + 1,
        budget=max(0.0, state.budget + c.yearly_oil_revenue - c.climate_cost_increase),
        climate_damage=state.climate_damage + c.climate_cost_increase,
        global_temperature=warmed_temperature(state.global_temperature),
        bad_choice_count=state.bad_choice_count + 1,
        good_choice_streak=0,
    )
    new_state = _merge_achievements(new_state)
    new_state = apply_terminal_check(new_state)
    return _refresh_derived(new_state)


def make_investment(state: GameState, action: MakeInvestment) -> GameState:
    try:
        amount = float(action.amount)
    except (TypeError, ValueError):
        return state
    if action.investment not in INVESTMENT_TYPES or not math.isfinite(amount) or amount <= 0:
        return state
    if state.budget < amount:
        return state

    investments = dict(state.investments)
    investments[action.investment] = float(investments.get(action.investment, 0.0)) + amount
    new_state = replace(
        state,
        budget=state.budget - amount,
        investments=investments,
        norway_tech_rank=tech_rank(investments),
    )
    new_state = _merge_achievements(new_state)
    return _refresh_derived(new_state)


def set_selected_field(state: GameState, action: SetSelectedField) -> GameState:
    if action.field_name is not None and state.field_by_name(action.field_name) is None:
        return state
    return replace(state, selected_field=action.field_name)


def toggle_field_modal(state: GameState, action: ToggleFieldModal) -> GameState:
    return replace(state, show_field_modal=bool(action.show))


def update_emissions_production(state: GameState, action: UpdateEmissionsProduction) -> GameState:
    return replace(state, **active_totals(state.game_fields))


def set_view_mode(state: GameState, action: SetViewMode) -> GameState:
    if action.view not in VIEW_MODES:
        return state
    return replace(state, current_view=action.view)


def advance_tutorial(state: GameState, action: AdvanceTutorial) -> GameState:
    return replace(state, tutorial_step=min(TUTORIAL_DONE_STEP, state.tutorial_step + 1))


def skip_tutorial(state: GameState, action: SkipTutorial) -> GameState:
    return replace(state, tutorial_step=TUTORIAL_DONE_STEP)


def reset_tutorial(state: GameState, action: ResetTutorial) -> GameState:
    return replace(state, tutorial_step=0)


def close_achievement_modal(state: GameState, action: CloseAchievementModal) -> GameState:
    return replace(state, show_achievement_modal=False)


def close_event_modal(state: GameState, action: CloseEventModal) -> GameState:
    return replace(state, show_event_modal=False)


def close_game_over_modal(state: GameState, action: CloseGameOverModal) -> GameState:
    return replace(state, show_game_over_modal=False)


HANDLERS: Dict[Type[Any], Callable[[GameState, Any], GameState]] = {
    PhaseOutField: phase_out_field,
    PhaseOutSelectedFields: phase_out_selected_fields,
    ToggleMultiSelect: toggle_multi_select,
    SelectFieldForMulti: select_field_for_multi,
    DeselectFieldFromMulti: deselect_field_from_multi,
    ClearSelectedFields: clear_selected_fields,
    AdvanceYearManually: advance_year_manually,
    MakeInvestment: make_investment,
    SetSelectedField: set_selected_field,
    ToggleFieldModal: toggle_field_modal,
    UpdateEmissionsProduction: update_emissions_production,
    SetViewMode: set_view_mode,
    AdvanceTutorial: advance_tutorial,
    SkipTutorial: skip_tutorial,
    ResetTutorial: reset_tutorial,
    CloseAchievementModal: close_achievement_modal,
    CloseEventModal: close_event_modal,
    CloseGameOverModal: close_game_over_modal,
}


def reduce(
    state: GameState,
    action: Any,
    series: Optional[Mapping[str, Mapping[int, YearRecord]]] = None,
) -> GameState:
    """Apply one action. Invalid or unknown actions return `state` itself.

    RestartGame bypasses everything and returns a fresh game built from `series`
    (bundled dataset when None).
    """
    if isinstance(action, RestartGame):
        return create_fresh_game_state(series)
    handler = HANDLERS.get(type(action))
    if handler is None:
        return state
    return handler(state, action)
