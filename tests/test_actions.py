"""
Tests for the action union and its dict boundary.
"""

import pytest

from engine.actions import (
    ACTION_TYPES,
    AdvanceYearManually,
    MakeInvestment,
    PhaseOutField,
    SetSelectedField,
    action_from_mapping,
    action_to_dict,
    action_type_name,
)


class TestActionFromMapping:
    def test_payload_action(self):
        assert action_from_mapping({"type": "PHASE_OUT_FIELD", "field_name": "Troll"}) == PhaseOutField("Troll")

    def test_type_is_case_insensitive(self):
        assert action_from_mapping({"type": "advance_year_manually"}) == AdvanceYearManually()

    def test_investment_amount_coerced(self):
        action = action_from_mapping({"type": "MAKE_INVESTMENT", "investment": "green_tech", "amount": "150"})
        assert action == MakeInvestment("green_tech", 150.0)

    def test_optional_payload(self):
        assert action_from_mapping({"type": "SET_SELECTED_FIELD"}) == SetSelectedField(None)

    @pytest.mark.parametrize(
        "payload",
        [
            {"type": "HANDLE_EVENT"},
            {"type": "LOAD_GAME_STATE", "payload": {}},
            {},
            {"type": "PHASE_OUT_FIELD"},
            {"type": "MAKE_INVESTMENT", "investment": "green_tech", "amount": "lots"},
        ],
    )
    def test_bad_input_raises_value_error(self, payload):
        with pytest.raises(ValueError):
            action_from_mapping(payload)


class TestActionToDict:
    def test_every_registered_type_is_constructible(self):
        samples = {
            "PHASE_OUT_FIELD": {"field_name": "Troll"},
            "SELECT_FIELD_FOR_MULTI": {"field_name": "Troll"},
            "DESELECT_FIELD_FROM_MULTI": {"field_name": "Troll"},
            "MAKE_INVESTMENT": {"investment": "green_tech", "amount": 10.0},
            "TOGGLE_FIELD_MODAL": {"show": True},
            "SET_VIEW_MODE": {"view": "stats"},
        }
        for name in ACTION_TYPES:
            action = action_from_mapping({"type": name, **samples.get(name, {})})
            assert action_type_name(action) == name

    def test_shape(self):
        assert action_to_dict(PhaseOutField("Troll")) == {"type": "PHASE_OUT_FIELD", "field_name": "Troll"}
