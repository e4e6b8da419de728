"""Confidence-gated OCR correction through an external language model."""

from pathlib import Path

from ecoreceipt.correction.base import BaseCorrector
from ecoreceipt.correction.client_base import BaseCorrectionClient
from ecoreceipt.correction.exceptions import CorrectionError
from ecoreceipt.correction.prompt_loader import load_prompt_template
from ecoreceipt.logging.logger import Log
from ecoreceipt.ocr.models import OcrPassResult, SelectedOcrResult

DEFAULT_CONFIDENCE_THRESHOLD = 70.0
DEFAULT_TEMPERATURE = 0.1
MAX_TEMPERATURE = 0.2
DEFAULT_SYSTEM_PROMPT = (
    "Corriges errores de OCR en boletas de supermercado sin agregar información."
)


class ConfidenceGatedCorrector(BaseCorrector):
    """Sends low-confidence OCR text to a language model for cleanup.

    Confident results pass through untouched and never reach the client.
    Any client failure falls back to the uncorrected text.
    """

    def __init__(
        self,
        *,
        client: BaseCorrectionClient,
        model: str,
        threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
        temperature: float = DEFAULT_TEMPERATURE,
        prompt_template_path: Path | None = None,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
    ) -> None:
        self._client = client
        self._model = model
        self._threshold = threshold
        self._temperature = max(0.0, min(MAX_TEMPERATURE, temperature))
        if self._temperature != temperature:
            Log.warning(
                "Correction temperature out of range, clamped",
                requested=temperature,
                applied=self._temperature,
            )
        self._system_prompt = system_prompt
        self._prompt_template = load_prompt_template(prompt_template_path)

    @property
    def threshold(self) -> float:
        return self._threshold

    def correct_if_needed(self, result: SelectedOcrResult | OcrPassResult) -> str:
        if result.confidence >= self._threshold:
            Log.info(
                "OCR confidence above threshold, skipping correction",
                confidence=round(result.confidence, 2),
                threshold=self._threshold,
            )
            return result.text

        Log.info(
            "OCR confidence below threshold, requesting correction",
            confidence=round(result.confidence, 2),
            threshold=self._threshold,
        )
        prompt = self._build_prompt(result.text)
        Log.debug(f"Correction prompt:\n{prompt}")

        try:
            raw_response = self._client.complete(
                model=self._model,
                temperature=self._temperature,
                system_prompt=self._system_prompt,
                user_prompt=prompt,
            )
        except CorrectionError as exc:
            Log.warning(f"Correction service failed, using uncorrected text: {exc}")
            return result.text

        corrected = self._strip_code_fences(raw_response)
        if not corrected.strip():
            Log.warning("Correction service returned blank text, using uncorrected text")
            return result.text

        Log.debug(f"Corrected text:\n{corrected}")
        Log.info(f"Correction applied: {len(result.text)} -> {len(corrected)} chars")
        return corrected

    def _build_prompt(self, text: str) -> str:
        return self._prompt_template.format(ocr_text=text)

    @staticmethod
    def _strip_code_fences(raw: str) -> str:
        cleaned = raw.strip()
        if cleaned.startswith("```"):
            lines = cleaned.splitlines()
            if lines and lines[0].startswith("```"):
                lines = lines[1:]
            if lines and lines[-1].strip() == "```":
                lines = lines[:-1]
            cleaned = "\n".join(lines)
        return cleaned
