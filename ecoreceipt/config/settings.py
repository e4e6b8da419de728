from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_DEFAULT_THRESHOLDS_PATH = (
    Path(__file__).resolve().parent.parent / "impact" / "data" / "thresholds.json"
)


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    ocr_engine: str = "tesseract"
    ocr_language: str = "spa"
    tesseract_cmd: str = ""
    ocr_confidence_threshold: float = 70.0
    ocr_parallel_passes: bool = False

    preprocess_target_width: int = 2000

    correction_provider: str = "deepseek"
    correction_temperature: float = 0.1

    correction_openai_api_key: str = ""
    correction_openai_model_name: str = "gpt-4o-mini"
    correction_openai_timeout_seconds: int = 30

    correction_openai_compatible_api_key: str = ""
    correction_openai_compatible_model_name: str = ""
    correction_openai_compatible_timeout_seconds: int = 30
    correction_openai_compatible_base_url: str | None = None

    correction_deepseek_api_key: str = ""
    correction_deepseek_model_name: str = "deepseek-chat"
    correction_deepseek_timeout_seconds: int = 30

    correction_openrouter_api_key: str = ""
    correction_openrouter_model_name: str = ""
    correction_openrouter_timeout_seconds: int = 30

    correction_groq_api_key: str = ""
    correction_groq_model_name: str = ""
    correction_groq_timeout_seconds: int = 30

    correction_together_api_key: str = ""
    correction_together_model_name: str = ""
    correction_together_timeout_seconds: int = 30

    correction_ollama_api_key: str = "ollama"
    correction_ollama_model_name: str = ""
    correction_ollama_timeout_seconds: int = 60

    matcher_provider: str = "qdrant"
    qdrant_url: str = "http://localhost:6333"
    qdrant_api_key: str = ""
    qdrant_timeout_seconds: int = 10

    embeddings_api_key: str = ""
    embeddings_model_name: str = "text-embedding-3-small"
    embeddings_dimensions: int = 1536
    embeddings_timeout_seconds: int = 30

    matcher_similarity_threshold: float = 0.6
    matcher_score_threshold: float = 0.5
    matcher_search_limit: int = 5
    matcher_category_filter: bool = False
    matcher_category_filter_min_confidence: float = 0.6

    default_collection: str = "tottus"
    thresholds_path: Path = _DEFAULT_THRESHOLDS_PATH
