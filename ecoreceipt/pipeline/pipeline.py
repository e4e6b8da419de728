from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from ecoreceipt.classification.models import ClassifiedProduct
from ecoreceipt.imaging.models import PreprocessedImage
from ecoreceipt.impact.models import ReceiptAnalysis
from ecoreceipt.ocr.models import SelectedOcrResult
from ecoreceipt.parsing.models import ParsedProduct


@dataclass(slots=True)
class PipelineContext:
    receipt_id: str
    raw_bytes: bytes
    preprocessed: PreprocessedImage | None = None
    ocr_result: SelectedOcrResult | None = None
    corrected_text: str = ""
    collection: str = ""
    parsed_products: list[ParsedProduct] = field(default_factory=list)
    classified_products: list[ClassifiedProduct] = field(default_factory=list)
    analysis: ReceiptAnalysis | None = None
    error_message: str = ""


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
