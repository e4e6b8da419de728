import math
from dataclasses import dataclass
from enum import Enum


class ImpactLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class EnvironmentalTier(str, Enum):
    GREEN = "GREEN"
    YELLOW = "YELLOW"
    RED = "RED"


@dataclass(frozen=True)
class ThresholdRule:
    """CO2 limits for one store category. ``high`` is unbounded by default."""

    unit: str
    low: float
    medium: float
    high: float = math.inf


@dataclass(frozen=True)
class ReceiptAnalysis:
    """Receipt-level environmental summary."""

    total_products: int
    green_products: int
    green_percentage: int
    co2_total: float
    co2_average: float
    environmental_tier: EnvironmentalTier
    is_green_receipt: bool
