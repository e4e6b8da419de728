"""Offline correction client.

Returns the OCR text embedded in the prompt unchanged. Useful for local
development without an API key and for pipeline tests.
"""

from typing import ClassVar

from ecoreceipt.correction.client_base import BaseCorrectionClient
from ecoreceipt.correction.exceptions import CorrectionError


class EchoClientAdapter(BaseCorrectionClient):
    """Echoes back the text between the prompt's triple-quote delimiters."""

    DELIMITER: ClassVar[str] = '"""'

    def complete(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
    ) -> str:
        _ = model, temperature, system_prompt
        start = user_prompt.find(self.DELIMITER)
        end = user_prompt.rfind(self.DELIMITER)
        if start == -1 or end <= start:
            raise CorrectionError("Prompt has no delimited OCR text to echo")
        return user_prompt[start + len(self.DELIMITER):end].strip("\n")
