from dataclasses import dataclass

from ecoreceipt.classification.models import ClassifiedProduct
from ecoreceipt.imaging.models import ImageQualityReport
from ecoreceipt.impact.models import ReceiptAnalysis
from ecoreceipt.ocr.models import SegmentationMode


@dataclass(frozen=True)
class ReceiptResult:
    """Everything a caller gets back for one successfully processed receipt."""

    receipt_id: str
    collection: str
    analysis: ReceiptAnalysis
    products: tuple[ClassifiedProduct, ...]
    ocr_confidence: float
    segmentation_mode: SegmentationMode
    corrected: bool
    image_quality: ImageQualityReport
