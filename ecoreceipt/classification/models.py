from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class ClassifiedProduct:
    """Parsed product annotated with its environmental attributes.

    Price and quantity always come from the receipt, never from the catalogue.
    """

    name: str
    price: Decimal
    quantity: Decimal
    parse_confidence: float
    category: str
    co2_factor: float
    is_local: bool = False
    has_eco_packaging: bool = False
    barcode: str = ""
    unit: str | None = None
    subcategory: str | None = None
    matched_name: str | None = None
    match_score: float | None = None

    @property
    def co2_total(self) -> float:
        return self.co2_factor * float(self.quantity)
