"""
Tests for the field factory.
"""

import logging
import math

import pytest

from core.fields import (
    create_field,
    create_fields,
    field_coordinates,
    intensity_color,
    transition_potential_for,
)
from core.projections import project_series


class TestCreateField:
    def test_derivation_from_latest_year(self):
        series = {
            "Troll": {
                2020: {"emission": 1000.0},
                2021: {"emission": 2000.0},
                2022: {"production_oil": 2.0, "production_gas": 1.5, "emission": 3000.0, "emission_intensity": 2.5},
            }
        }
        f = create_field("Troll", series)
        assert f.status == "active"
        assert f.emissions == [3.0, 2.0, 1.0]
        assert f.production == 3.5
        assert f.total_lifetime_emissions == pytest.approx(45.0)
        assert f.phase_out_cost == 52.0  # floor(3.5 * 15)
        assert f.yearly_revenue == math.floor(3.5 * 80 * 6.3 * 10)
        assert f.workers == 175
        assert f.intensity == 2.5
        assert (f.lon, f.lat) == field_coordinates("Troll")

    def test_emission_history_capped_at_five_years(self):
        series = {"Troll": {2015 + i: {"emission": float(i)} for i in range(8)}}
        f = create_field("Troll", series)
        assert len(f.emissions) == 5
        assert f.emissions[0] == pytest.approx(0.007)

    def test_cost_has_a_floor(self):
        f = create_field("Yme", {"Yme": {2022: {"production_oil": 0.1}}})
        assert f.phase_out_cost == 5.0

    def test_missing_series_gives_zeroed_field(self):
        f = create_field("Yme", {})
        assert f.production == 0.0
        assert f.emissions == [0.0]
        assert f.total_lifetime_emissions == 0.0
        assert f.phase_out_cost == 5.0

    def test_non_finite_inputs_are_neutralized(self):
        f = create_field("Yme", {"Yme": {2022: {"production_oil": float("nan"), "emission": float("inf")}}})
        assert f.production == 0.0
        assert f.total_lifetime_emissions == 0.0
        assert all(math.isfinite(e) for e in f.emissions)

    def test_unknown_field_falls_back_to_default_coordinates(self, caplog):
        with caplog.at_level(logging.WARNING, logger="core.fields"):
            f = create_field("Nowhere", {"Nowhere": {2022: {"production_oil": 1.0}}})
        assert (f.lon, f.lat) == (5.0, 62.0)
        assert "Nowhere" in caplog.text

    def test_uses_projected_horizon_as_latest_year(self, small_series):
        projected = project_series(small_series)
        f = create_field("Troll", projected)
        # latest record is the 2040 projection, not the last recorded year
        assert f.production < 43.0
        assert f.production == pytest.approx(round(5.0 * 0.9**17, 2) + round(38.0 * 0.9**17, 2))

    def test_shut_in_field_reads_as_zero_at_horizon(self):
        # latest recorded year carries an emission but no production
        projected = project_series({"Norne": {2019: {"production_oil": 0.5, "emission": 60.0}, 2020: {"emission": 51.2}}})
        f = create_field("Norne", projected)
        assert f.production == 0.0
        assert f.emissions == [0.0] * 5
        assert f.total_lifetime_emissions == 0.0
        assert f.phase_out_cost == 5.0

    def test_create_fields_keeps_dataset_order(self, small_series):
        names = [f.name for f in create_fields(small_series)]
        assert names == list(small_series)


class TestTransitionPotential:
    @pytest.mark.parametrize(
        "lat, production, expected",
        [
            (71.0, 1.0, "wind"),
            (56.5, 1.0, "solar"),
            (61.0, 6.0, "data_center"),
            (61.0, 5.0, "research_hub"),
        ],
    )
    def test_rules(self, lat, production, expected):
        assert transition_potential_for(lat, production) == expected


class TestIntensityColor:
    def test_status_wins_over_intensity(self):
        assert intensity_color(99.0, "closed") == "#10B981"
        assert intensity_color(99.0, "transitioning") == "#F59E0B"

    @pytest.mark.parametrize(
        "intensity, expected",
        [(16.0, "#EF4444"), (9.0, "#F97316"), (4.0, "#EAB308"), (3.0, "#22C55E")],
    )
    def test_bands(self, intensity, expected):
        assert intensity_color(intensity, "active") == expected
