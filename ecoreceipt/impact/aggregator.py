import math

from ecoreceipt.classification.models import ClassifiedProduct
from ecoreceipt.impact.models import EnvironmentalTier, ImpactLevel, ReceiptAnalysis
from ecoreceipt.impact.thresholds import ThresholdTable
from ecoreceipt.logging.logger import Log
from ecoreceipt.parsing.exceptions import EmptyReceiptError

GREEN_MIN_PERCENTAGE = 60.0
GREEN_MAX_CO2_AVERAGE = 4.0
YELLOW_MIN_PERCENTAGE = 30.0
YELLOW_MAX_CO2_AVERAGE = 7.0


class ImpactAggregator:
    """Combines classified products into a receipt-level environmental score."""

    def __init__(self, thresholds: ThresholdTable) -> None:
        self._thresholds = thresholds

    def impact_level(self, product: ClassifiedProduct, store: str) -> ImpactLevel:
        return self._thresholds.classify(store, product.category, product.co2_factor)

    def is_green(self, product: ClassifiedProduct, store: str) -> bool:
        """Low impact, local origin or eco packaging: any one is enough."""
        level = self.impact_level(product, store)
        Log.debug(
            "Product impact assessed",
            product=product.name,
            category=product.category,
            co2=product.co2_factor,
            level=level.value,
        )
        return level is ImpactLevel.LOW or product.is_local or product.has_eco_packaging

    def analyze(self, products: list[ClassifiedProduct], store: str) -> ReceiptAnalysis:
        """Score a receipt.

        Raises:
            EmptyReceiptError: if ``products`` is empty.
        """
        total = len(products)
        if total == 0:
            raise EmptyReceiptError("Cannot analyze a receipt without products")

        green = sum(1 for product in products if self.is_green(product, store))
        percentage = green / total * 100
        co2_total = sum(product.co2_total for product in products)
        co2_average = co2_total / total

        tier = self._tier(percentage, co2_average)
        # Kept as its own predicate rather than derived from the tier.
        is_green_receipt = (
            percentage >= GREEN_MIN_PERCENTAGE and co2_average < GREEN_MAX_CO2_AVERAGE
        )

        analysis = ReceiptAnalysis(
            total_products=total,
            green_products=green,
            green_percentage=_round_half_up(percentage),
            co2_total=round(co2_total, 2),
            co2_average=round(co2_average, 2),
            environmental_tier=tier,
            is_green_receipt=is_green_receipt,
        )
        Log.info(
            "Receipt analysis completed",
            store=store,
            total=analysis.total_products,
            green=analysis.green_products,
            green_percentage=analysis.green_percentage,
            co2_total=analysis.co2_total,
            tier=analysis.environmental_tier.value,
        )
        return analysis

    @staticmethod
    def _tier(percentage: float, co2_average: float) -> EnvironmentalTier:
        if percentage >= GREEN_MIN_PERCENTAGE and co2_average < GREEN_MAX_CO2_AVERAGE:
            return EnvironmentalTier.GREEN
        if percentage >= YELLOW_MIN_PERCENTAGE and co2_average < YELLOW_MAX_CO2_AVERAGE:
            return EnvironmentalTier.YELLOW
        return EnvironmentalTier.RED


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
