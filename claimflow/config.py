from decimal import Decimal
from functools import lru_cache
from typing import Optional, Set

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite:///./claimflow.db"

    # Attachments are written here and exposed under upload_url_prefix
    upload_dir: str = "./uploads"
    upload_url_prefix: str = "/uploads"

    allowed_attachment_extensions: Set[str] = {"pdf", "docx", "xlsx"}
    max_attachment_bytes: int = 5 * 1024 * 1024

    hours_review_threshold: Decimal = Decimal("100")
    hourly_rate_threshold: Decimal = Decimal("300")
    currency_symbol: str = "R"

    log_level: str = "INFO"

    # Comma-separated list of extra allowed origins
    cors_allowed_origins: Optional[str] = None

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    def get_cors_origins(self) -> list[str]:
        """Get list of CORS allowed origins, combining defaults with env var.

        - Strips whitespace
        - Removes trailing slashes
        - Deduplicates
        """
        all_origins = [
            "http://localhost:5173",
            "http://localhost:3000",
        ]

        if self.cors_allowed_origins:
            for origin in self.cors_allowed_origins.split(","):
                cleaned = origin.strip().rstrip("/")
                if cleaned and cleaned not in all_origins:
                    all_origins.append(cleaned)

        return all_origins


@lru_cache()
def get_settings() -> Settings:
    return Settings()
