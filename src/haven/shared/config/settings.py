"""
Centralized configuration management for Haven.

All environment variables and settings are managed here so every service
reads the same values.
"""

from functools import lru_cache
from typing import Optional, Dict, Any
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Centralized settings for Haven.

    All configuration is loaded from environment variables with sensible defaults.
    Uses Pydantic for validation and type safety.
    """

    # === Application Settings ===
    app_name: str = Field(default="Haven Canvas", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: Optional[str] = Field(default=None, description="Optional log file path")

    # === AI Service Settings ===
    gemini_api_key: Optional[str] = Field(default=None, description="Google Gemini API key", validation_alias="GEMINI_API_KEY")
    default_llm_model: str = Field(default="gemini-2.5-flash", description="Default LLM model")
    generation_temperature: float = Field(default=0.4, ge=0.0, le=2.0, description="Generation temperature")
    generation_max_tokens: int = Field(default=8192, description="Maximum response tokens")

    # === Graph Settings ===
    context_max_depth: int = Field(default=2, ge=0, description="Default hop limit for context aggregation")

    # === Batch Settings ===
    batch_inter_call_delay_seconds: float = Field(default=0.5, ge=0.0, description="Delay between sequential generation calls")

    # === File Storage Settings ===
    data_dir: Path = Field(default=Path("data"), description="Data directory")
    preferences_file: str = Field(default="preferences.json", description="Key-value store file name inside data_dir")

    @property
    def logging_config(self) -> Dict[str, Any]:
        """Get logging configuration."""
        return {
            'level': self.log_level,
            'file': self.log_file,
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        }

    @property
    def ai_config(self) -> Dict[str, Any]:
        """Get AI service configuration as dictionary."""
        return {
            'gemini_api_key': self.gemini_api_key,
            'default_model': self.default_llm_model,
            'temperature': self.generation_temperature,
            'max_tokens': self.generation_max_tokens,
        }

    @property
    def preferences_path(self) -> Path:
        """Location of the JSON key-value store."""
        return self.data_dir / self.preferences_file

    @field_validator('data_dir', mode='before')
    @classmethod
    def validate_paths(cls, v):
        return Path(v) if isinstance(v, str) else v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "HAVEN_",
        "case_sensitive": False,
        "extra": "ignore",
    }


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are only loaded once per application lifecycle.
    """
    return Settings()
