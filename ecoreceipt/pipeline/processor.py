import uuid

from ecoreceipt.classification.categories import CategoryNormalizer
from ecoreceipt.classification.classifier import ProductClassifier
from ecoreceipt.config.settings import Settings
from ecoreceipt.correction.factory import CorrectorFactory
from ecoreceipt.imaging.factory import PreprocessorFactory
from ecoreceipt.impact.aggregator import ImpactAggregator
from ecoreceipt.impact.thresholds import ThresholdTable
from ecoreceipt.logging.logger import Log
from ecoreceipt.matching.factory import MatcherFactory
from ecoreceipt.ocr.factory import OcrEngineFactory
from ecoreceipt.parsing.parser import ProductParser
from ecoreceipt.pipeline.models import ReceiptResult
from ecoreceipt.pipeline.pipeline import PipelineContext, PipelineStep
from ecoreceipt.pipeline.steps import (
    AggregateStep,
    ClassifyStep,
    CorrectStep,
    DetectStoreStep,
    LogFailureStep,
    ParseStep,
    PreprocessStep,
    RecognizeStep,
)
from ecoreceipt.stores.detector import StoreDetector


class ReceiptProcessor:
    """Runs one receipt through the pipeline steps, all or nothing.

    Pipeline: preprocess -> recognize -> correct -> detect store -> parse
    -> classify -> aggregate. Any exception runs ``failed_step`` and is
    re-raised unchanged.
    """

    def __init__(self, steps: list[PipelineStep], failed_step: PipelineStep) -> None:
        self._steps = steps
        self._failed_step = failed_step

    def process(self, image_bytes: bytes, receipt_id: str | None = None) -> ReceiptResult:
        context = PipelineContext(
            receipt_id=receipt_id or uuid.uuid4().hex,
            raw_bytes=image_bytes,
        )
        Log.info(f"Processing receipt {context.receipt_id} ({len(image_bytes)} bytes)")

        try:
            for step in self._steps:
                context = step.run(context)
        except Exception as exc:
            context.error_message = str(exc) or type(exc).__name__
            self._failed_step.run(context)
            raise

        return self._to_result(context)

    @staticmethod
    def _to_result(context: PipelineContext) -> ReceiptResult:
        if context.analysis is None or context.ocr_result is None or context.preprocessed is None:
            raise ValueError("Pipeline finished without producing an analysis")
        return ReceiptResult(
            receipt_id=context.receipt_id,
            collection=context.collection,
            analysis=context.analysis,
            products=tuple(context.classified_products),
            ocr_confidence=context.ocr_result.confidence,
            segmentation_mode=context.ocr_result.segmentation_mode,
            corrected=context.corrected_text != context.ocr_result.text,
            image_quality=context.preprocessed.quality,
        )


def build_processor(settings: Settings) -> ReceiptProcessor:
    """Build a ReceiptProcessor with all required adapters."""
    preprocessor = PreprocessorFactory.create(settings)
    ocr = OcrEngineFactory.create(settings)
    corrector = CorrectorFactory.create(settings)
    detector = StoreDetector(default_collection=settings.default_collection)
    thresholds = ThresholdTable.from_file(settings.thresholds_path)
    classifier = ProductClassifier(
        MatcherFactory.create(settings, thresholds),
        category_normalizer=CategoryNormalizer.from_thresholds(thresholds),
    )
    aggregator = ImpactAggregator(thresholds)

    steps: list[PipelineStep] = [
        PreprocessStep(preprocessor),
        RecognizeStep(ocr),
        CorrectStep(corrector),
        DetectStoreStep(detector),
        ParseStep(ProductParser()),
        ClassifyStep(classifier),
        AggregateStep(aggregator),
    ]
    return ReceiptProcessor(steps=steps, failed_step=LogFailureStep())
