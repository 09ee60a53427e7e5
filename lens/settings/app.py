"""Application settings powered by Pydantic BaseSettings."""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


CRITERIA_FILE_NAME = "ranking-criteria.json"


class AppSettings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, env_file=".env", env_file_encoding="utf-8"
    )

    data_dir: Path = Field(
        default=Path.home() / ".lens", validation_alias="LENS_DATA_DIR"
    )
    criteria_path_override: Path | None = Field(
        default=None, validation_alias="LENS_CRITERIA_PATH"
    )
    criteria_strict: bool = Field(default=False, validation_alias="LENS_CRITERIA_STRICT")
    ollama_base_url: str = Field(
        default="http://localhost:11434", validation_alias="OLLAMA_BASE_URL"
    )
    llm_model: str = Field(default="llama3.2", validation_alias="LLM_MODEL")
    llm_timeout: float = Field(default=60.0, gt=0, validation_alias="LLM_TIMEOUT")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_format: Literal["json", "console"] = Field(default="json", validation_alias="LOG_FORMAT")

    @property
    def criteria_path(self) -> Path:
        """Well-known location of the ranking criteria document."""
        if self.criteria_path_override is not None:
            return self.criteria_path_override
        return self.data_dir / "config" / CRITERIA_FILE_NAME


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
