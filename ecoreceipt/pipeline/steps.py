from ecoreceipt.classification.classifier import ProductClassifier
from ecoreceipt.correction.base import BaseCorrector
from ecoreceipt.imaging.base import BasePreprocessor
from ecoreceipt.impact.aggregator import ImpactAggregator
from ecoreceipt.logging.logger import Log
from ecoreceipt.ocr.orchestrator import MultiPassOcr
from ecoreceipt.parsing.exceptions import EmptyReceiptError
from ecoreceipt.parsing.parser import ProductParser
from ecoreceipt.pipeline.pipeline import PipelineContext, PipelineStep
from ecoreceipt.stores.detector import StoreDetector


class LogFailureStep(PipelineStep):
    def run(self, context: PipelineContext) -> PipelineContext:
        Log.error(f"Receipt {context.receipt_id} failed: {context.error_message}")
        return context


class PreprocessStep(PipelineStep):
    def __init__(self, preprocessor: BasePreprocessor) -> None:
        self._preprocessor = preprocessor

    def run(self, context: PipelineContext) -> PipelineContext:
        context.preprocessed = self._preprocessor.preprocess(context.raw_bytes)
        Log.info(
            f"Preprocessed receipt {context.receipt_id}",
            width=context.preprocessed.width,
            height=context.preprocessed.height,
            brightness=round(context.preprocessed.quality.average_brightness, 1),
        )
        return context


class RecognizeStep(PipelineStep):
    def __init__(self, ocr: MultiPassOcr) -> None:
        self._ocr = ocr

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.preprocessed is None:
            raise ValueError("PipelineContext.preprocessed must be set before OCR")
        context.ocr_result = self._ocr.recognize(context.preprocessed.image_bytes)
        Log.info(
            f"Recognized {len(context.ocr_result.text)} chars for receipt {context.receipt_id}",
            confidence=round(context.ocr_result.confidence, 2),
        )
        return context


class CorrectStep(PipelineStep):
    def __init__(self, corrector: BaseCorrector) -> None:
        self._corrector = corrector

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.ocr_result is None:
            raise ValueError("PipelineContext.ocr_result must be set before correction")
        context.corrected_text = self._corrector.correct_if_needed(context.ocr_result)
        return context


class DetectStoreStep(PipelineStep):
    def __init__(self, detector: StoreDetector) -> None:
        self._detector = detector

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.ocr_result is None:
            raise ValueError("PipelineContext.ocr_result must be set before store detection")
        # Store headers are checked on the raw text; correction may drop them.
        context.collection = self._detector.detect(
            f"{context.ocr_result.text}\n{context.corrected_text}"
        )
        return context


class ParseStep(PipelineStep):
    def __init__(self, parser: ProductParser) -> None:
        self._parser = parser

    def run(self, context: PipelineContext) -> PipelineContext:
        context.parsed_products = self._parser.parse(context.corrected_text)
        if not context.parsed_products:
            raise EmptyReceiptError(f"No products detected on receipt {context.receipt_id}")
        return context


class ClassifyStep(PipelineStep):
    def __init__(self, classifier: ProductClassifier) -> None:
        self._classifier = classifier

    def run(self, context: PipelineContext) -> PipelineContext:
        context.classified_products = self._classifier.classify_all(
            context.parsed_products,
            context.collection,
        )
        return context


class AggregateStep(PipelineStep):
    def __init__(self, aggregator: ImpactAggregator) -> None:
        self._aggregator = aggregator

    def run(self, context: PipelineContext) -> PipelineContext:
        context.analysis = self._aggregator.analyze(
            context.classified_products,
            context.collection,
        )
        return context
