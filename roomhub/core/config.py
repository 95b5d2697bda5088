import os
from datetime import timedelta
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from ..services.token_service import TokenSettings


class Settings:
    """Centralised application configuration sourced from environment variables."""

    def __init__(self) -> None:
        load_dotenv()
        self.database_path = Path(os.getenv("DATABASE_PATH", "data/roomhub.db")).resolve()
        self.debug = os.getenv("DEBUG", "false").strip().lower() in {"1", "true", "yes"}

        self.jwt_access_secret = self._get("JWT_ACCESS_SECRET")
        self.jwt_refresh_secret = self._get("JWT_REFRESH_SECRET")
        self.jwt_access_expires_minutes = self._get_int("JWT_ACCESS_EXPIRES_MINUTES", default=15)
        self.jwt_refresh_expires_days = self._get_int("JWT_REFRESH_EXPIRES_DAYS", default=7)
        self.jwt_issuer = os.getenv("JWT_ISSUER", "roomhub-api")
        self.jwt_audience = os.getenv("JWT_AUDIENCE", "roomhub-app")

        self.bcrypt_rounds = self._get_int("BCRYPT_ROUNDS", default=10)
        self.code_ttl_minutes = self._get_int("CODE_TTL_MINUTES", default=30)

        self.smtp_host = os.getenv("SMTP_HOST", "")
        self.smtp_port = self._get_int("SMTP_PORT", default=587)
        self.smtp_username = os.getenv("SMTP_USERNAME", "")
        self.smtp_password = os.getenv("SMTP_PASSWORD", "")
        self.smtp_from_email = os.getenv("SMTP_FROM_EMAIL", "")
        self.smtp_from_name = os.getenv("SMTP_FROM_NAME", "RoomHub")
        self.smtp_timeout_seconds = self._get_int("SMTP_TIMEOUT_SECONDS", default=10)

        self.cloudinary_cloud_name = os.getenv("CLOUDINARY_CLOUD_NAME")
        self.cloudinary_api_key = os.getenv("CLOUDINARY_API_KEY")
        self.cloudinary_api_secret = os.getenv("CLOUDINARY_API_SECRET")
        self.cloudinary_folder = os.getenv("CLOUDINARY_FOLDER", "roomhub/profile-photos")
        self.max_photo_mb = self._get_int("MAX_PHOTO_MB", default=5)

        self.admin_default_email = os.getenv("ADMIN_EMAIL")
        self.admin_default_password = os.getenv("ADMIN_PASSWORD")
        self.admin_default_phone = os.getenv("ADMIN_PHONE", "900000000")
        self.frontend_base_url = os.getenv("FRONTEND_BASE_URL", "http://localhost:3000")
        origins = os.getenv("CORS_ALLOW_ORIGINS")
        if origins:
            self.cors_allow_origins = [item.strip() for item in origins.split(",") if item.strip()]
        else:
            self.cors_allow_origins = ["*"]

    @property
    def token_settings(self) -> TokenSettings:
        return TokenSettings(
            access_secret=self.jwt_access_secret,
            refresh_secret=self.jwt_refresh_secret,
            access_ttl=timedelta(minutes=self.jwt_access_expires_minutes),
            refresh_ttl=timedelta(days=self.jwt_refresh_expires_days),
            issuer=self.jwt_issuer,
            audience=self.jwt_audience,
        )

    @property
    def code_ttl(self) -> timedelta:
        return timedelta(minutes=self.code_ttl_minutes)

    @staticmethod
    def _get(key: str) -> str:
        value = os.getenv(key)
        if not value:
            raise RuntimeError(f"Missing required environment variable: {key}")
        return value

    @staticmethod
    def _get_int(key: str, default: Optional[int] = None) -> int:
        value = os.getenv(key)
        if value is None:
            if default is None:
                raise RuntimeError(f"Missing required environment variable: {key}")
            return default
        try:
            return int(value)
        except ValueError as exc:
            raise RuntimeError(f"Environment variable {key} must be an integer") from exc
