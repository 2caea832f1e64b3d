from pydantic import BaseModel, Field
from typing import List

from geoduel import load_secrets


class DuelSettings(BaseModel):
    ai_match_rounds: int = Field(5, ge=1)
    ai_match_expiry_minutes: int = Field(60, ge=1)
    openrouter_api_key: str = ""
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    openrouter_model: str = "mistralai/mistral-small-3.2-24b-instruct:free"
    openrouter_timeout_seconds: float = Field(20.0, gt=0)
    openrouter_app_title: str = "GeoFinder AI Duel"
    openrouter_referer: str = ""
    app_check_enabled: bool = True
    app_check_tokens: List[str] = []
    ai_testing_key: str = ""
    image_catalogue_path: str = ""
    image_prefetch_size: int = 15

    @classmethod
    def from_env(cls) -> "DuelSettings":
        """Build settings from the environment (and .env) loaded by load_secrets."""
        return cls(
            ai_match_rounds=load_secrets.ai_match_rounds,
            ai_match_expiry_minutes=load_secrets.ai_match_expiry_minutes,
            openrouter_api_key=load_secrets.openrouter_api_key,
            openrouter_base_url=load_secrets.openrouter_base_url,
            openrouter_model=load_secrets.openrouter_model,
            openrouter_timeout_seconds=load_secrets.openrouter_timeout_seconds,
            openrouter_app_title=load_secrets.openrouter_app_title,
            openrouter_referer=load_secrets.openrouter_referer,
            app_check_enabled=load_secrets.app_check_enabled,
            app_check_tokens=load_secrets.app_check_tokens,
            ai_testing_key=load_secrets.ai_testing_key,
            image_catalogue_path=load_secrets.image_catalogue_path,
            image_prefetch_size=load_secrets.image_prefetch_size,
        )
