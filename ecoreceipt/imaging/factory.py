from ecoreceipt.config.settings import Settings
from ecoreceipt.imaging.base import BasePreprocessor
from ecoreceipt.imaging.preprocessor import AdaptivePreprocessor


class PreprocessorFactory:
    """Creates the configured image preprocessor."""

    @classmethod
    def create(cls, settings: Settings) -> BasePreprocessor:
        if settings.preprocess_target_width <= 0:
            raise ValueError("preprocess_target_width must be a positive pixel count")
        return AdaptivePreprocessor(target_width=settings.preprocess_target_width)
