"""Application configuration."""

import os
from datetime import timedelta
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from coach_planner.services.matching import MatchTolerance

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    text_provider: Literal["openai", "gemini"] = "openai"
    openai_api_key: str | None = None
    openai_model: str = "gpt-5.2"
    openai_reasoning_effort: str | None = None
    gemini_api_key: str | None = None
    gemini_model: str = "gemini-1.5-flash"
    insight_cache_ttl_hours: float = 12
    match_limit: int = 5
    match_calories_tolerance_percent: float = 15.0
    match_protein_tolerance_percent: float = 10.0
    match_carbs_tolerance_percent: float = 15.0
    match_fat_tolerance_percent: float = 15.0
    generation_retry_attempts: int = 1
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def insight_cache_ttl(self) -> timedelta:
        return timedelta(hours=self.insight_cache_ttl_hours)

    @property
    def match_tolerance(self) -> MatchTolerance:
        return MatchTolerance(
            calories_percent=self.match_calories_tolerance_percent,
            protein_percent=self.match_protein_tolerance_percent,
            carbs_percent=self.match_carbs_tolerance_percent,
            fat_percent=self.match_fat_tolerance_percent,
        )
