"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables (.env file).
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Project Info
    PROJECT_NAME: str = "Training Plan Decision Engine"
    VERSION: str = "0.1.0"

    DEBUG: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None
    LOG_JSON: bool = False

    # Reproducibility: when set, the default random source is seeded.
    RANDOM_SEED: Optional[int] = None

    # Evolutionary scheduler
    SCHEDULER_POPULATION_SIZE: int = 50
    SCHEDULER_MAX_GENERATIONS: int = 80
    SCHEDULER_CROSSOVER_RATE: float = 0.9
    SCHEDULER_MUTATION_RATE: float = 0.15
    SCHEDULER_MUTATION_SCALE: float = 0.1

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")


# Global settings instance
settings = Settings()
