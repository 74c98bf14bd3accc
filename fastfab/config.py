# fastfab/config.py
import os
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict
from typing import Optional, List
from functools import lru_cache

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Application Settings
    APP_NAME: str = "FastFab Auth API"
    APP_VERSION: str = "1.0.0"
    ENV: str = "production"  # "development" turns off secure cookies
    DEBUG: bool = False
    DOCS_ENABLED: bool = True

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = int(os.environ.get("PORT", 8000))

    # Database Settings
    DATABASE_URL: str = "sqlite:///./fastfab.db"
    DB_CONNECT_MAX_ATTEMPTS: int = 5
    DB_CONNECT_RETRY_DELAY_SECONDS: float = 1.0

    # Session tokens (two secrets, two lifetimes)
    JWT_SECRET: Optional[str] = None
    JWT_REFRESH_SECRET: Optional[str] = None
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    # OTP Settings
    OTP_EXPIRY_MINUTES: int = 10
    OTP_MAX_ATTEMPTS: int = 5  # 0 disables the limit
    OTP_RETENTION_HOURS: int = 24
    OTP_SEND_MAX_REQUESTS: int = 5
    OTP_SEND_WINDOW_SECONDS: int = 3600
    REDIS_URL: Optional[str] = None

    # Gupshup WhatsApp Settings
    GUPSHUP_API_KEY: str = ""
    GUPSHUP_SOURCE_NUMBER: str = ""
    GUPSHUP_SRC_NAME: str = ""
    GUPSHUP_TEMPLATE_ID: str = ""
    GUPSHUP_API_URL: str = "https://api.gupshup.io/wa/api/v1/msg"
    GUPSHUP_TIMEOUT_SECONDS: float = 15.0

    # CORS Settings (comma-separated)
    ALLOWED_ORIGINS: str = "*"

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    def _split_csv(self, value: str) -> List[str]:
        if value is None:
            return []
        value = value.strip()
        if value == "":
            return []
        return [item.strip() for item in value.split(",")]

    @property
    def allowed_origins_list(self) -> List[str]:
        return self._split_csv(self.ALLOWED_ORIGINS)

    @property
    def is_development(self) -> bool:
        return self.ENV.lower() == "development"

    @property
    def secure_cookies(self) -> bool:
        return not self.is_development

    @property
    def gupshup_configured(self) -> bool:
        return bool(
            self.GUPSHUP_API_KEY
            and self.GUPSHUP_SOURCE_NUMBER
            and self.GUPSHUP_TEMPLATE_ID
            and self.GUPSHUP_API_URL
        )

@lru_cache()
def get_settings() -> Settings:
    return Settings()

settings: Settings = get_settings()
