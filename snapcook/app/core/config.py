import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    port: int = Field(3000, alias="PORT")
    cors_allow_origins: str = Field("*", alias="CORS_ALLOW_ORIGINS")
    upload_dir: Path = Field(Path("uploads"), alias="UPLOAD_DIR")
    azure_vision_endpoint: str = Field(
        "https://imageextractsnapcook.cognitiveservices.azure.com/",
        alias="AZURE_VISION_ENDPOINT",
    )
    azure_vision_key: str | None = Field(None, alias="AZURE_VISION_KEY")
    ocr_timeout_seconds: float = Field(30.0, alias="OCR_TIMEOUT_SECONDS")
    gemini_api_key: str | None = Field(None, alias="GEMINI_API_KEY")
    gemini_model: str = Field("gemini-1.5-flash", alias="GEMINI_MODEL")
    structuring_max_retries: int = Field(0, alias="STRUCTURING_MAX_RETRIES")
    structuring_retry_backoff_seconds: float = Field(1.0, alias="STRUCTURING_RETRY_BACKOFF_SECONDS")
    # 0 disables the navigation bound entirely
    browser_nav_timeout_seconds: float = Field(30.0, alias="BROWSER_NAV_TIMEOUT_SECONDS")
    browser_headless: bool = Field(True, alias="BROWSER_HEADLESS")

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_allow_origins.split(",") if origin.strip()]


logger = logging.getLogger(__name__)


@lru_cache
def get_settings() -> Settings:
    try:
        settings = Settings()
    except PermissionError:
        logger.warning("Unable to read .env; continuing with environment variables only")
        settings = Settings(_env_file=None)
    settings.upload_dir.mkdir(parents=True, exist_ok=True)
    return settings


def log_credential_status(settings: Settings) -> None:
    """Report which upstream credentials are configured; missing ones never block startup."""
    logger.info("AZURE_VISION_KEY: %s", "SET" if settings.azure_vision_key else "NOT SET")
    logger.info("GEMINI_API_KEY: %s", "SET" if settings.gemini_api_key else "NOT SET")
    if not settings.azure_vision_key:
        logger.error("Missing AZURE_VISION_KEY; /ocr requests will fail until it is configured")
    if not settings.gemini_api_key:
        logger.error("Missing GEMINI_API_KEY; recipe structuring will fail until it is configured")
