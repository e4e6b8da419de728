"""Per-store category CO2 threshold table.

The table is read-only configuration injected into the aggregator, so tests
and deployments can supply their own thresholds.
"""

import json
import math
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

from ecoreceipt.impact.exceptions import ThresholdTableError
from ecoreceipt.impact.models import ImpactLevel, ThresholdRule
from ecoreceipt.logging.logger import Log

DEFAULT_THRESHOLDS_PATH = Path(__file__).parent / "data" / "thresholds.json"

# Applied when a (store, category) pair has no entry.
DEFAULT_RULE = ThresholdRule(unit="kg CO2e/kg", low=2.0, medium=5.0)


class ThresholdTable:
    """Immutable store -> category -> ThresholdRule lookup."""

    def __init__(self, rules: Mapping[str, Mapping[str, ThresholdRule]]) -> None:
        self._rules: Mapping[str, Mapping[str, ThresholdRule]] = MappingProxyType(
            {store: MappingProxyType(dict(categories)) for store, categories in rules.items()}
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ThresholdTable":
        """Build a table from the JSON layout
        ``{store: {category: {unit, thresholds: {low, medium, high}}}}``.

        Raises:
            ThresholdTableError: on any structural problem.
        """
        if not isinstance(data, Mapping):
            raise ThresholdTableError("Threshold table must be an object keyed by store")
        rules: dict[str, dict[str, ThresholdRule]] = {}
        for store, categories in data.items():
            if not isinstance(categories, Mapping):
                raise ThresholdTableError(f"Store '{store}' must map categories to rules")
            rules[store] = {
                category: _build_rule(store, category, raw)
                for category, raw in categories.items()
            }
        return cls(rules)

    @classmethod
    def from_file(cls, path: Path | None = None) -> "ThresholdTable":
        """Load a table from JSON. Defaults to the bundled table."""
        if path is None:
            path = DEFAULT_THRESHOLDS_PATH
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise ThresholdTableError(f"Failed to load threshold table: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise ThresholdTableError(f"Invalid threshold table JSON: {exc}") from exc
        return cls.from_dict(data)

    @property
    def stores(self) -> list[str]:
        return list(self._rules)

    def categories(self, store: str) -> list[str]:
        """Category names configured for ``store``; empty for an unknown store."""
        return list(self._rules.get(store, {}))

    def get_thresholds(self, store: str, category: str) -> ThresholdRule | None:
        """Return the rule for ``(store, category)`` or None if either is unknown."""
        categories = self._rules.get(store)
        if categories is None:
            return None
        return categories.get(category)

    obtener_umbrales = get_thresholds

    def classify(self, store: str, category: str, co2_factor: float) -> ImpactLevel:
        """Classify a CO2 factor against the category's limits (inclusive)."""
        rule = self.get_thresholds(store, category)
        if rule is None:
            Log.warning(
                "No threshold entry, using default thresholds",
                store=store,
                category=category,
            )
            rule = DEFAULT_RULE

        if co2_factor <= rule.low:
            return ImpactLevel.LOW
        if co2_factor <= rule.medium:
            return ImpactLevel.MEDIUM
        return ImpactLevel.HIGH


def _build_rule(store: str, category: str, raw: Any) -> ThresholdRule:
    where = f"'{store}' / '{category}'"
    if not isinstance(raw, Mapping):
        raise ThresholdTableError(f"Rule for {where} must be an object")
    unit = raw.get("unit", "")
    if not isinstance(unit, str):
        raise ThresholdTableError(f"Rule for {where}: 'unit' must be a string")
    thresholds = raw.get("thresholds")
    if not isinstance(thresholds, Mapping):
        raise ThresholdTableError(f"Rule for {where}: 'thresholds' must be an object")

    low = _number(thresholds.get("low"), where, "low")
    medium = _number(thresholds.get("medium"), where, "medium")
    high_raw = thresholds.get("high")
    high = math.inf if high_raw is None else _number(high_raw, where, "high")
    if not 0 <= low <= medium <= high:
        raise ThresholdTableError(f"Rule for {where}: expected 0 <= low <= medium <= high")
    return ThresholdRule(unit=unit, low=low, medium=medium, high=high)


def _number(value: Any, where: str, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ThresholdTableError(f"Rule for {where}: '{name}' must be a number")
    return float(value)
