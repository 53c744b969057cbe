"""
backend/config.py

Application configuration via Pydantic Settings.
All values can be overridden with environment variables or a .env file.

Quick start: create a .env file in your project root:
    RISK_THRESHOLD=0.6
    MIN_TRAINING_ROWS=10
    FEATURE_EXTRACTOR=content
    ALLOWED_ORIGINS=http://localhost:5173,http://localhost:8080
"""

from __future__ import annotations

import json
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _split_list(v):
    if isinstance(v, str):
        v = v.strip()
        if v.startswith("["):
            try:
                return json.loads(v)
            except ValueError:
                pass
        return [item.strip() for item in v.split(",") if item.strip()]
    return v


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Detection / model
    RISK_THRESHOLD: float = 0.6          # score must be strictly greater
    MIN_TRAINING_ROWS: int = 10          # train only when rows > this
    TRAIN_SPLIT_RATIO: float = 0.8
    WEIGHT_FLOOR: float = 0.5
    WEIGHT_SCALE: float = 1.5
    GROUND_TRUTH_CUTOFF: int = 2

    # Feature extraction: "content" | "seeded_random"
    FEATURE_EXTRACTOR: str = "content"
    RANDOM_SEED: int = 1337

    # Placeholder dashboard ratios: cosmetic, not derived from severity analysis
    CRITICAL_RISK_RATIO: float = 0.3
    MEDIUM_RISK_RATIO: float = 0.5
    MITIGATED_RATIO: float = 0.4
    ACTIVE_USER_RATIO: float = 0.8
    NEW_USER_RATIO: float = 0.15

    # Inject sample threats when nothing was detected
    FALLBACK_SAMPLE_ENABLED: bool = True

    # Report
    REPORT_LIST_LIMIT: int = 10

    # Upload
    ALLOWED_EXTENSIONS: Annotated[list[str], NoDecode] = [".csv"]
    MAX_UPLOAD_BYTES: int = 10_000_000

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    ALLOWED_ORIGINS: Annotated[list[str], NoDecode] = [
        "http://localhost:5173",
        "http://localhost:8080",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:8080",
    ]

    # Logging
    LOG_LEVEL: str = "INFO"

    @field_validator("ALLOWED_EXTENSIONS", "ALLOWED_ORIGINS", mode="before")
    @classmethod
    def parse_list(cls, v):
        return _split_list(v)

    @field_validator("FEATURE_EXTRACTOR")
    @classmethod
    def check_extractor(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in {"content", "seeded_random"}:
            raise ValueError("FEATURE_EXTRACTOR must be 'content' or 'seeded_random'")
        return v


settings = Settings()
