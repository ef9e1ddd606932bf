from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from imgconv.core.constants import (
    DEFAULT_AVIF_SPEED,
    DEFAULT_BATCH_WORKERS,
    DEFAULT_PNG_COMPRESS_LEVEL,
    DEFAULT_QUALITY,
    DEFAULT_WEBP_METHOD,
    MAX_BATCH_WORKERS,
)
from imgconv.models.conversion import clamp_quality


class Settings(BaseSettings):
    # Encoding
    default_quality: int = Field(
        default=DEFAULT_QUALITY,
        description="Quality hint for lossy formats (0-100, clamped)",
    )
    png_compress_level: int = Field(
        default=DEFAULT_PNG_COMPRESS_LEVEL, ge=0, le=9, description="PNG zlib level"
    )
    webp_method: int = Field(
        default=DEFAULT_WEBP_METHOD, ge=0, le=6, description="WebP encoder effort"
    )
    avif_speed: int = Field(
        default=DEFAULT_AVIF_SPEED, ge=0, le=10, description="AVIF encoder speed"
    )

    # Output
    atomic_writes: bool = Field(
        default=True,
        description="Write to a temporary file and rename it over the output",
    )

    # Batch Processing
    batch_workers: int = Field(
        default=DEFAULT_BATCH_WORKERS,
        ge=1,
        le=MAX_BATCH_WORKERS,
        description="Files converted in parallel during a batch run",
    )
    report_skipped: bool = Field(
        default=False,
        description="Emit a notification for files skipped for their extension",
    )

    # Logging Configuration
    log_level: str = Field(default="WARNING", description="Logging level")
    json_logs: bool = Field(default=False, description="Render logs as JSON")
    logging_enabled: bool = Field(
        default=False, description="Enable file logging in addition to stderr"
    )
    log_dir: str = Field(default="./logs", description="Directory for log files")
    max_log_size_mb: int = Field(
        default=10, description="Maximum size of each log file in MB"
    )
    log_backup_count: int = Field(
        default=3, description="Number of backup log files to keep"
    )

    @field_validator("default_quality", mode="before")
    @classmethod
    def validate_quality(cls, v):
        return clamp_quality(v)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"log_level must be one of {allowed}")
        return v.upper()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="IMGCONV_",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
