from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class ParsedProduct:
    """One product line reconstructed from OCR text."""

    name: str
    price: Decimal
    quantity: Decimal = Decimal("1")
    parse_confidence: float = 0.7
    barcode: str = ""
    unit: str | None = None
