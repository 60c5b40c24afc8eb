"""
Tests for the bundled historical dataset and row compaction.
"""

import json

from core.dataset import (
    DEFAULT_DATASET_PATH,
    FIELD_COORDINATES,
    compact_rows,
    load_historical_series,
    parse_series,
)

HEADER = [["Field", "Year", "GWh", "Oil", "Gas", "", "Emission", "", "Intensity"], ["", "", "", "mill Sm3", "bn Sm3", "", "kt", "", "kg/boe"]]


class TestCompactRows:
    def test_groups_by_field_then_year(self):
        rows = HEADER + [
            ["Troll", 2021, 0, 4.4, 39.9, "", 410.7, "", 2.8],
            ["Troll", 2022, 0, 4.0, 42.3, "", 421.9, "", 2.7],
            ["Yme", 2022, 0, 0.8, 0, "", 55.0, "", 7.0],
        ]
        series = compact_rows(rows)
        assert set(series) == {"Troll", "Yme"}
        assert series["Troll"][2022] == {
            "production_oil": 4.0,
            "production_gas": 42.3,
            "emission": 421.9,
            "emission_intensity": 2.7,
        }

    def test_falsy_facts_are_dropped(self):
        rows = HEADER + [["Yme", 2022, 0, 0.8, 0, "", None, "", ""]]
        assert compact_rows(rows)["Yme"][2022] == {"production_oil": 0.8}

    def test_empty_record_still_creates_year(self):
        rows = HEADER + [["Yme", 2018, 0, 0, 0, "", 0, "", 0]]
        assert compact_rows(rows) == {"Yme": {2018: {}}}

    def test_header_rows_skipped_and_bad_rows_ignored(self):
        rows = HEADER + [["", 2020, 0, 1.0], ["Troll", "n/a", 0, 1.0]]
        assert compact_rows(rows) == {}


class TestBundledDataset:
    def test_loads_with_int_years_and_float_facts(self):
        series = load_historical_series()
        assert len(series) >= 10
        for yearly in series.values():
            for year, record in yearly.items():
                assert isinstance(year, int)
                assert all(isinstance(v, float) for v in record.values())

    def test_every_bundled_field_has_coordinates(self):
        for name in load_historical_series():
            assert name in FIELD_COORDINATES

    def test_returns_private_copy(self):
        a = load_historical_series()
        name = next(iter(a))
        a[name].clear()
        assert load_historical_series()[name]

    def test_parse_series_from_custom_file(self, tmp_path):
        p = tmp_path / "series.json"
        p.write_text(json.dumps({"Troll": {"2020": {"production_oil": "4.7", "bogus": 1, "emission": True}}}), encoding="utf-8")
        assert load_historical_series(p) == {"Troll": {2020: {"production_oil": 4.7}}}

    def test_parse_series_skips_bad_years(self):
        assert parse_series({"A": {"x": {}, "2020": {"emission": 1}}}) == {"A": {2020: {"emission": 1.0}}}

    def test_default_path_exists(self):
        assert DEFAULT_DATASET_PATH.exists()
