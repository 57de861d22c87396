# anonymization/service/config.py

"""Application configuration using Pydantic Settings.

Manages environment variables, defaults, and validation rules.
"""

from typing import List, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from anonymization.core.definitions import AnonymizationMode, PIIType
from anonymization.core.domain import DetectorConfig
from anonymization.engine.recognizer import DEFAULT_MODEL


class Settings(BaseSettings):
    """Global application settings.

    Loads values from environment variables (prefix 'PII_') or .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="PII_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        protected_namespaces=(),
    )

    # Backend
    model_name: str = Field(
        default=DEFAULT_MODEL,
        description="Hugging Face token-classification model to load.",
    )

    load_model: bool = Field(
        default=True,
        description="Load the model at startup; when false only regex fallback runs.",
    )

    model_accuracy: float = Field(
        default=0.9827, ge=0.0, le=1.0, description="Reported accuracy of the model."
    )

    fallback_accuracy: float = Field(
        default=0.85, ge=0.0, le=1.0, description="Reported accuracy of the fallback."
    )

    # Detection defaults
    confidence_threshold: float = Field(
        default=0.8,
        ge=0.0,
        le=1.0,
        description="Minimum confidence score (0.0-1.0) for detection retention.",
    )

    enabled_types: List[str] = Field(
        default_factory=lambda: [
            PIIType.EMAIL,
            PIIType.PHONE,
            PIIType.NAME,
            PIIType.CREDIT_CARD,
            PIIType.SSN,
            PIIType.ADDRESS,
            PIIType.IP_ADDRESS,
        ],
        description="PII types detected by default.",
    )

    mode: str = Field(
        default=AnonymizationMode.MASK, description="Default anonymization mode."
    )

    # Service
    history_limit: int = Field(
        default=50, ge=0, description="Number of recent results kept in history."
    )

    log_level: str = Field(default="INFO", description="Root logging level.")

    @field_validator("model_name")
    @classmethod
    def validate_model_name(cls, v: str) -> str:
        """Ensure model name is not empty."""
        if not v.strip():
            raise ValueError("Model name cannot be empty")
        return v

    @field_validator("enabled_types")
    @classmethod
    def validate_types(cls, v: List[str]) -> List[str]:
        unknown = sorted(set(v) - PIIType.ALL)
        if unknown:
            raise ValueError(f"Unknown PII types: {unknown}")
        return v

    @field_validator("mode")
    @classmethod
    def validate_mode(cls, v: str) -> str:
        if v not in AnonymizationMode.ALL:
            raise ValueError(f"Unknown anonymization mode: {v!r}")
        return v


def default_config(settings: Optional[Settings] = None) -> DetectorConfig:
    """Builds the detector configuration described by settings."""
    settings = settings or Settings()
    return DetectorConfig(
        types=frozenset(settings.enabled_types),
        confidence_threshold=settings.confidence_threshold,
        mode=settings.mode,
    )
