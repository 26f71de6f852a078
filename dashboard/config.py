#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Heatmap Tracker - Dashboard Configuration
Settings for the web dashboard, the CLI and the topic store

Every field can be set from the environment with the ``HEATMAP_`` prefix
(``HEATMAP_STORAGE_BACKEND=file``) or from a ``.env`` file.

Version: 1.0.0
"""

from functools import lru_cache
from pathlib import Path
from typing import Annotated, List, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from core.heatmap import LAYOUTS
from core.storage import BACKENDS
from utils.datetime_utils import is_valid_timezone


class DashboardSettings(BaseSettings):
    """Heatmap Tracker settings"""

    model_config = SettingsConfigDict(
        env_prefix="HEATMAP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # ===== BASICS =====

    APP_NAME: str = Field(
        default="Heatmap Tracker",
        description="Application name"
    )

    VERSION: str = Field(
        default="1.0.0",
        description="Application version"
    )

    ENVIRONMENT: str = Field(
        default="development",
        description="Runtime environment (development/production/testing)"
    )

    DEBUG: bool = Field(
        default=False,
        description="Debug mode; enables the API docs"
    )

    # ===== NETWORK =====

    HOST: str = Field(
        default="127.0.0.1",
        description="Host the dashboard binds to"
    )

    PORT: int = Field(
        default=8000,
        description="Port the dashboard listens on"
    )

    ALLOWED_ORIGINS: Annotated[List[str], NoDecode] = Field(
        default=["*"],
        description="Allowed CORS origins"
    )

    # ===== STORAGE =====

    STORAGE_BACKEND: str = Field(
        default="file",
        description="Topic store backend (memory/file)"
    )

    DATA_FILE: Path = Field(
        default=Path("data/topics.json"),
        description="JSON file used by the file backend"
    )

    BACKUP_DIR: Path = Field(
        default=Path("data/backups"),
        description="Where backups are written before an import or a clear"
    )

    MAX_BACKUPS: int = Field(
        default=10,
        ge=1,
        description="Number of backups kept"
    )

    COMPRESS_BACKUPS: bool = Field(
        default=False,
        description="Gzip backups"
    )

    SEED_SAMPLE_DATA: bool = Field(
        default=False,
        description="Create demo topics when the store starts empty"
    )

    MAX_UPLOAD_BYTES: int = Field(
        default=5 * 1024 * 1024,
        description="Largest accepted import file"
    )

    # ===== CALENDAR =====

    TIMEZONE: str = Field(
        default="UTC",
        description="Timezone used to decide which calendar date is today"
    )

    DEFAULT_LAYOUT: str = Field(
        default="year",
        description="Heatmap layout when none is requested (year/month)"
    )

    # ===== LOGGING =====

    LOG_LEVEL: str = Field(
        default="INFO",
        description="Log level (DEBUG/INFO/WARNING/ERROR/CRITICAL)"
    )

    LOG_FORMAT: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log record format"
    )

    LOG_FILE: Optional[Path] = Field(
        default=None,
        description="Rotating log file; console only when unset"
    )

    # ===== VALIDATORS =====

    @field_validator('ENVIRONMENT')
    @classmethod
    def validate_environment(cls, v):
        allowed_envs = ['development', 'production', 'testing']
        if v.lower() not in allowed_envs:
            raise ValueError(f"ENVIRONMENT must be one of {allowed_envs}")
        return v.lower()

    @field_validator('LOG_LEVEL')
    @classmethod
    def validate_log_level(cls, v):
        allowed_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in allowed_levels:
            raise ValueError(f"LOG_LEVEL must be one of {allowed_levels}")
        return v.upper()

    @field_validator('PORT')
    @classmethod
    def validate_port(cls, v):
        if not 1 <= v <= 65535:
            raise ValueError("PORT must be between 1 and 65535")
        return v

    @field_validator('STORAGE_BACKEND')
    @classmethod
    def validate_backend(cls, v):
        if v.lower() not in BACKENDS:
            raise ValueError(f"STORAGE_BACKEND must be one of {list(BACKENDS)}")
        return v.lower()

    @field_validator('DEFAULT_LAYOUT')
    @classmethod
    def validate_layout(cls, v):
        if v.lower() not in LAYOUTS:
            raise ValueError(f"DEFAULT_LAYOUT must be one of {list(LAYOUTS)}")
        return v.lower()

    @field_validator('TIMEZONE')
    @classmethod
    def validate_timezone(cls, v):
        if not is_valid_timezone(v):
            raise ValueError(f"Unknown timezone: {v}")
        return v

    @field_validator('ALLOWED_ORIGINS', mode='before')
    @classmethod
    def validate_origins(cls, v):
        if isinstance(v, str):
            # A plain string is split on commas
            return [origin.strip() for origin in v.split(',') if origin.strip()]
        return v

    @model_validator(mode='after')
    def validate_production_settings(self):
        if self.ENVIRONMENT == 'production':
            self.DEBUG = False
        return self

    # ===== HELPERS =====

    @property
    def docs_url(self) -> Optional[str]:
        return "/api/docs" if self.DEBUG else None


@lru_cache()
def get_settings() -> DashboardSettings:
    return DashboardSettings()
