"""
fileproc/core/config.py

Centralised configuration loaded from environment variables.
Use a .env file locally; the container runtime injects these in production.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # ── Application ────────────────────────────────────────────────────────────
    app_name: str = "File Upload & Processing API"
    app_version: str = "1.0.0"
    debug: bool = False             # forces DEBUG logging
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    # ── Processing scheduler ───────────────────────────────────────────────────
    max_concurrent_jobs: int = 3    # analyzers allowed to run at the same time

    # ── Storage ────────────────────────────────────────────────────────────────
    upload_dir: str = "./uploads"   # thumbnails live in <upload_dir>/thumbnails
    max_upload_bytes: int = 20 * 1024 * 1024

    # ── Security ───────────────────────────────────────────────────────────────
    virus_scan_enabled: bool = True

    # ── Listing ────────────────────────────────────────────────────────────────
    default_page_size: int = 20
    max_page_size: int = 50

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


# Single shared instance; import this everywhere.
settings = Settings()
