from __future__ import annotations

import logging
import json
from typing import List

from pydantic import BaseSettings, Field, validator


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    app_title: str = Field(default="Syllabus Calendar API", description="FastAPI application title")
    app_description: str = Field(
        default="Extracts assignments, exams and other dated events from course syllabi",
        description="Description shown in the OpenAPI document",
    )
    allowed_origins: List[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed by CORS",
    )
    log_level: str = Field(
        default="INFO",
        description="Application log level (DEBUG/INFO/WARNING/ERROR/CRITICAL)",
    )
    enable_request_logging: bool = Field(
        default=True,
        description="Log one line per completed request",
    )
    max_upload_bytes: int = Field(
        default=10 * 1024 * 1024,
        description="Largest accepted PDF upload in bytes",
        ge=1024,
        le=100 * 1024 * 1024,
    )
    max_input_characters: int = Field(
        default=200_000,
        description="Longest text scanned for events; longer input is truncated or rejected",
        ge=10_000,
        le=1_000_000,
    )
    two_digit_year_pivot: int = Field(
        default=50,
        description="Two-digit years below this map to 20xx, the rest to 19xx",
        ge=1,
        le=99,
    )
    ics_product_id: str = Field(
        default="-//Syllabus Calendar//EN",
        description="PRODID written into exported calendars",
    )
    ics_filename: str = Field(
        default="events.ics",
        description="Download filename for exported calendars",
    )

    class Config:
        env_prefix = "SYLLABUS_CALENDAR_"
        case_sensitive = False
        env_file = ".env"
        env_file_encoding = "utf-8"

        @classmethod
        def parse_env_var(cls, field_name, raw_value):  # type: ignore[override]
            """
            Convert an environment value into a Python value.
            pydantic v1 reads complex fields as JSON; allowed_origins also
            accepts a bare "*" or a comma-separated list.
            """
            try:
                return json.loads(raw_value)
            except Exception:
                if field_name == "allowed_origins":
                    raw = str(raw_value).strip()
                    if raw == "*":
                        return ["*"]
                    return [v.strip() for v in raw.split(",") if v and v.strip()]
                return raw_value

    @validator("allowed_origins", pre=True)
    def _split_origins(cls, value):  # type: ignore[override]
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @validator("log_level")
    def _normalise_log_level(cls, value: str) -> str:  # type: ignore[override]
        candidate = value.upper()
        if candidate not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            logging.getLogger("syllabus_calendar.settings").warning(
                "Unknown log level '%s', falling back to INFO.", value
            )
            return "INFO"
        return candidate


settings = Settings()
