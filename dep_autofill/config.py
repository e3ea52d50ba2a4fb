"""
Application configuration using Pydantic Settings.
All environment-specific values are centralized here.
"""

from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ── App ──────────────────────────────────────────────
    app_name: str = "DEP Autofill"
    debug: bool = True  # Enables cache counters + per-call debug logging

    # ── Section classifier cache ─────────────────────────
    section_cache_max_size: int = 10000
    eviction_threshold: int = 100  # evictions per window before flagging
    eviction_window_ms: int = 60000
    hit_ratio_floor: float = 0.2
    hit_ratio_min_lookups: int = 1000
    invalid_ratio_ceiling: float = 0.1
    invalid_ratio_min_lookups: int = 100
    health_check_interval_seconds: float = 300.0

    # ── Relation table ───────────────────────────────────
    validate_relations_on_startup: bool = False

    # ── Anchor collection ────────────────────────────────
    prompt_timeout_seconds: Optional[float] = 30.0  # None waits indefinitely
    max_anchor_questions: int = 8

    # ── Default fill ─────────────────────────────────────
    fallback_answer: str = "Not Applicable"

    # ── Logging ──────────────────────────────────────────
    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings (singleton)."""
    return Settings()
