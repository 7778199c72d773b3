import logging
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Supplier Catalog Extractor"
    debug: bool = False
    log_level: str = "INFO"

    database_url: str = "sqlite:///./catalog_extractor.db"

    gemini_api_key: Optional[str] = None
    gemini_api_base: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_model_standard: str = "gemini-2.5-flash"
    gemini_model_high: str = "gemini-2.5-pro"
    gemini_model_detection: str = "gemini-2.5-flash"
    gemini_model_chat: str = "gemini-2.5-pro"
    llm_timeout_seconds: float = 300.0

    pdf_text_limit: int = 30000
    show_partial_results: bool = False

    encryption_secret_key: Optional[str] = None

    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_reload: bool = False

    @property
    def api_base_url(self) -> str:
        return f"http://localhost:{self.api_port}/api/v1"


settings = Settings()


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
