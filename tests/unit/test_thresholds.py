import math
from pathlib import Path
from typing import Any

import pytest

from ecoreceipt.impact.exceptions import ThresholdTableError
from ecoreceipt.impact.models import ImpactLevel
from ecoreceipt.impact.thresholds import ThresholdTable


def _table_data() -> dict[str, Any]:
    return {
        "tottus": {
            "Frutas y Verduras": {
                "unit": "kg CO2e/kg",
                "thresholds": {"low": 0.6, "medium": 1.5, "high": None},
            },
            "Carnes": {
                "unit": "kg CO2e/kg",
                "thresholds": {"low": 10, "medium": 30, "high": 60},
            },
        }
    }


class TestBundledTable:
    def test_loads_every_store(self) -> None:
        table = ThresholdTable.from_file()
        assert set(table.stores) == {
            "tottus",
            "metro",
            "wong",
            "plazavea",
            "flora_y_fauna",
            "vivanda",
        }

    def test_known_rule(self) -> None:
        rule = ThresholdTable.from_file().get_thresholds("tottus", "Congelados")
        assert rule is not None
        assert rule.unit == "kg CO2e/USD"
        assert (rule.low, rule.medium) == (0.5, 1.5)
        assert rule.high == math.inf


class TestLookup:
    def test_unknown_pair_returns_none(self) -> None:
        table = ThresholdTable.from_dict(_table_data())
        assert table.get_thresholds("tottus", "Electrodomésticos") is None
        assert table.get_thresholds("makro", "Carnes") is None

    def test_spanish_alias(self) -> None:
        table = ThresholdTable.from_dict(_table_data())
        assert table.obtener_umbrales("tottus", "Carnes") == table.get_thresholds("tottus", "Carnes")
        assert table.obtener_umbrales("makro", "Carnes") is None

    def test_categories_per_store(self) -> None:
        table = ThresholdTable.from_dict(_table_data())
        assert table.categories("tottus") == ["Frutas y Verduras", "Carnes"]
        assert table.categories("makro") == []

    def test_table_is_read_only(self) -> None:
        table = ThresholdTable.from_dict(_table_data())
        with pytest.raises(TypeError):
            table._rules["tottus"]["Carnes"] = None  # type: ignore[index]


class TestClassify:
    @pytest.mark.parametrize(
        ("co2", "expected"),
        [
            (0.0, ImpactLevel.LOW),
            (0.6, ImpactLevel.LOW),
            (0.61, ImpactLevel.MEDIUM),
            (1.5, ImpactLevel.MEDIUM),
            (1.51, ImpactLevel.HIGH),
            (99.0, ImpactLevel.HIGH),
        ],
    )
    def test_inclusive_limits(self, co2: float, expected: ImpactLevel) -> None:
        table = ThresholdTable.from_dict(_table_data())
        assert table.classify("tottus", "Frutas y Verduras", co2) is expected

    @pytest.mark.parametrize(
        ("co2", "expected"),
        [(2.0, ImpactLevel.LOW), (5.0, ImpactLevel.MEDIUM), (5.01, ImpactLevel.HIGH)],
    )
    def test_missing_entry_uses_default_thresholds(
        self,
        co2: float,
        expected: ImpactLevel,
    ) -> None:
        table = ThresholdTable.from_dict(_table_data())
        assert table.classify("tottus", "Sin categoría", co2) is expected


class TestValidation:
    @pytest.mark.parametrize(
        "data",
        [
            [],
            {"tottus": []},
            {"tottus": {"Carnes": "cheap"}},
            {"tottus": {"Carnes": {"unit": "kg", "thresholds": None}}},
            {"tottus": {"Carnes": {"unit": 3, "thresholds": {"low": 1, "medium": 2}}}},
            {"tottus": {"Carnes": {"unit": "kg", "thresholds": {"low": "1", "medium": 2}}}},
            {"tottus": {"Carnes": {"unit": "kg", "thresholds": {"low": 5, "medium": 2}}}},
            {"tottus": {"Carnes": {"unit": "kg", "thresholds": {"low": -1, "medium": 2}}}},
            {"tottus": {"Carnes": {"unit": "kg", "thresholds": {"low": True, "medium": 2}}}},
        ],
    )
    def test_malformed_data_raises(self, data: Any) -> None:
        with pytest.raises(ThresholdTableError):
            ThresholdTable.from_dict(data)

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ThresholdTableError, match="Failed to load"):
            ThresholdTable.from_file(tmp_path / "missing.json")

    def test_invalid_json_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "thresholds.json"
        path.write_text("{not json")
        with pytest.raises(ThresholdTableError, match="Invalid threshold table JSON"):
            ThresholdTable.from_file(path)
