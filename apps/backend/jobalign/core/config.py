import logging
import sys
from typing import List, Literal, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "JobAlign"

    # Completion provider. "gemini" and "ollama" are built in, anything else
    # is treated as a fully-qualified llama_index LLM class path.
    LLM_PROVIDER: str = "gemini"
    LL_MODEL: str = "gemini-1.5-flash"
    LLM_API_KEY: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("LLM_API_KEY", "GEMINI_API_KEY"),
    )
    LLM_BASE_URL: Optional[str] = None
    LLM_TEMPERATURE: float = 0.4
    LLM_MAX_TOKENS: int = 2048
    LLM_TIMEOUT_SECONDS: float = 45.0
    LLM_MAX_RETRIES: int = 2

    # Input guards
    MIN_RESUME_CHARS: int = 50
    MIN_JOB_DESCRIPTION_CHARS: int = 20
    PROMPT_MAX_CHARS: int = 3000
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024

    SHARE_STORE: Literal["memory", "file"] = "memory"
    SHARE_STORE_PATH: str = "data/shared_analyses.json"

    ALLOWED_ORIGINS: List[str] = ["*"]
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()


def setup_logging() -> None:
    """
    Configure root logging for the service.

    Console only, so the output ends up wherever the host collects stdout.
    """
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    # httpx logs every request line at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
