from pathlib import Path

from ecoreceipt.correction.exceptions import CorrectionError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"


def load_prompt_template(path: Path | None = None) -> str:
    """Load the correction prompt template from a file.

    Args:
        path: Path to the prompt template file.
              Defaults to the bundled correction_prompt.txt.

    Returns:
        The raw template string with an ``{ocr_text}`` placeholder.

    Raises:
        CorrectionError: if the file cannot be read or lacks the placeholder.
    """
    if path is None:
        path = _DEFAULT_PROMPT_DIR / "correction_prompt.txt"
    try:
        template = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CorrectionError(f"Failed to load prompt template: {exc}") from exc
    if "{ocr_text}" not in template:
        raise CorrectionError(f"Prompt template {path} has no {{ocr_text}} placeholder")
    return template
