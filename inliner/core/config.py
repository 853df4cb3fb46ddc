from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class InlinerSettings(BaseSettings):
    APP_NAME: str = "inliner-client"
    ENV: str = "local"
    LOG_LEVEL: str = "INFO"

    # Credentials & endpoints
    API_KEY: str = Field(default="")
    API_URL: str = "https://api.inliner.ai"
    IMAGE_URL: str = "https://img.inliner.ai"

    # Timeouts
    REQUEST_TIMEOUT: float = 60.0  # seconds, per HTTP round trip
    POLL_TIMEOUT: int = 180  # seconds, whole generate/edit wait

    model_config = SettingsConfigDict(env_prefix="INLINER_", env_file=".env", extra="ignore")


@lru_cache()
def get_settings() -> InlinerSettings:
    """
    Settings Factory: reads INLINER_* env vars (and .env) once per process.
    """
    return InlinerSettings()
