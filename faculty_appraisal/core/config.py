import os
import logging
from pydantic import BaseModel, Field
from typing import List
from dotenv import load_dotenv

load_dotenv()

DEFAULT_DATABASE_URL = "sqlite:///./appraisal.db"


class AppraisalSettings(BaseModel):
    # Criterion id whose reviewer score is auto-suggested from attendance
    attendance_criterion_id: str = "attendance"

    # Seed cycle written on the first read of an empty cycle collection
    seed_year: int = Field(default=int(os.getenv("APPRAISAL_SEED_YEAR", "2025")))
    seed_month: int = Field(default=int(os.getenv("APPRAISAL_SEED_MONTH", "1")))
    seed_active: bool = Field(default=os.getenv("APPRAISAL_SEED_ACTIVE", "true").lower() == "true")


class Config(BaseModel):
    app_name: str = "Faculty Appraisal Engine"
    environment: str = os.getenv("APP_ENV", "development")
    api_prefix: str = "/api"
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Database
    database_url: str = os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)

    version: str = "1.0.0"
    request_id_header: str = "X-Request-ID"

    # CORS: comma-separated origins loaded from env.
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            o.strip()
            for o in os.getenv(
                "CORS_ORIGINS",
                "http://localhost:3000,http://127.0.0.1:3000",
            ).split(",")
            if o.strip()
        ]
    )

    appraisal: AppraisalSettings = AppraisalSettings()


settings = Config()

# --- Startup Validation ---
_logger = logging.getLogger(__name__)
if settings.environment not in ("development", "testing") and settings.database_url == DEFAULT_DATABASE_URL:
    _logger.warning("Using the local SQLite database outside development; set DATABASE_URL.")
