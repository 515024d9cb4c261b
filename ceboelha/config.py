from __future__ import annotations

import os
from datetime import timezone, tzinfo
from pathlib import Path
from typing import List
from zoneinfo import ZoneInfo


class Settings:
    """Centralized configuration for the diary backend."""

    def __init__(self) -> None:
        base_dir = Path(__file__).resolve().parent
        repo_root = base_dir.parent
        data_root_default = repo_root / "data"

        self.env: str = (os.environ.get("CEBOELHA_ENV") or "development").strip().lower()
        self.is_production: bool = self.env == "production"
        self.timezone_name: str = (os.environ.get("CEBOELHA_TIMEZONE") or "UTC").strip()

        self.data_root: Path = Path(
            os.environ.get("CEBOELHA_DATA_ROOT") or data_root_default
        ).expanduser()
        self.app_db_path: Path = Path(
            os.environ.get("CEBOELHA_DB_PATH") or (self.data_root / "ceboelha.db")
        ).expanduser()

        # In production you MUST set both secrets. The dev fallbacks keep local runs easy.
        self.jwt_access_secret: str = (
            os.environ.get("CEBOELHA_JWT_ACCESS_SECRET") or "dev-access-secret-change-me"
        )
        self.jwt_refresh_secret: str = (
            os.environ.get("CEBOELHA_JWT_REFRESH_SECRET") or "dev-refresh-secret-change-me"
        )
        self.access_token_ttl_minutes: int = int(
            os.environ.get("CEBOELHA_ACCESS_TOKEN_TTL_MINUTES") or "15"
        )
        self.refresh_token_ttl_days: int = int(
            os.environ.get("CEBOELHA_REFRESH_TOKEN_TTL_DAYS") or "7"
        )

        cors = os.environ.get("CEBOELHA_CORS_ORIGINS", "*")
        if cors.strip() == "*":
            self.cors_origins: List[str] = ["*"]
        else:
            self.cors_origins = [
                origin.strip() for origin in cors.split(",") if origin.strip()
            ]

    @property
    def tz(self) -> tzinfo:
        if self.timezone_name.upper() == "UTC":
            return timezone.utc
        return ZoneInfo(self.timezone_name)


settings = Settings()
