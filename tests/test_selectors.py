"""
Tests for read-only selectors.
"""

import pytest
from dataclasses import replace

from engine.selectors import compute_stats, map_markers


class TestComputeStats:
    def test_fresh_state(self, make_state):
        stats = compute_stats(make_state(4))
        assert stats.fields_phased == 0
        assert stats.fields_remaining == 4
        assert stats.completion_percentage == 0.0
        assert stats.average_intensity == pytest.approx(5.0)
        assert stats.total_budget_spent == 0.0
        assert stats.phase_out_capacity == 3

    def test_after_closures(self, make_state):
        s = make_state(4, closed=["F0", "F1"], field_overrides={"F2": {"intensity": 9.0}, "F0": {"lifetime": 2000.0}})
        s = replace(s, selected_fields=["F3"])
        stats = compute_stats(s)
        assert stats.fields_phased == 2
        assert stats.fields_remaining == 2
        assert stats.completion_percentage == 50.0
        assert stats.average_intensity == pytest.approx(7.0)
        assert stats.total_budget_spent == 100.0
        assert stats.emissions_avoided_mt == pytest.approx(2.03)
        assert stats.projected_savings == pytest.approx(2.03 * 1e6 * 800)
        assert stats.selected_fields_count == 1

    def test_no_fields(self, make_state):
        stats = compute_stats(make_state(0))
        assert stats.completion_percentage == 0.0
        assert stats.average_intensity == 0.0


class TestMapMarkers:
    def test_markers_carry_coordinates_and_colour(self, make_state):
        s = replace(make_state(2, closed=["F0"]), selected_fields=["F1"])
        markers = {m["name"]: m for m in map_markers(s)}
        assert markers["F0"]["color"] == "#10B981"
        assert markers["F1"]["color"] == "#EAB308"
        assert markers["F1"]["selected"]
        assert (markers["F1"]["lon"], markers["F1"]["lat"]) == (3.0, 60.0)
