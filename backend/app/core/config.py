from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"

    steps_temperature: float = 0.5
    nutrition_temperature: float = 0.2
    suggest_temperature: float = 0.4
    max_suggestions: int = 5

    cors_origins: List[str] = ["*"]
    static_dir: str = "frontend/static"
    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_prefix": "",
        "extra": "ignore",
    }

    @property
    def openai_configured(self) -> bool:
        return bool(self.openai_api_key) and self.openai_api_key != "your_openai_api_key_here"

@lru_cache()
def get_settings() -> Settings:
    """Return cached Settings instance."""
    return Settings()
