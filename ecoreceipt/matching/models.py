from dataclasses import dataclass


@dataclass(frozen=True)
class ProductMatch:
    """Best catalogue candidate for an OCR product name."""

    name: str
    category: str
    co2_factor: float
    score: float
    subcategory: str | None = None
    is_local: bool = False
    has_eco_packaging: bool = False


@dataclass(frozen=True)
class CategoryInference:
    """Category a language model assigned to a product name, before search."""

    category: str
    confidence: float
    reasoning: str = ""
