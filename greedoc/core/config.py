# greedoc/core/config.py
from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # "production" hides internal error messages from API responses
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Frontend origin, used for CORS and the patient login link
    CLIENT_URL: str = "http://localhost:5173"

    # Firebase Admin service account file
    FIREBASE_CREDENTIALS: str = "greedoc/core/firebase_key.json"

    # Session tokens
    JWT_SECRET: str = "greedoc-dev-secret"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_DAYS: int = 7
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30

    # AI providers (tried in this order, each only when its key is set)
    OPENAI_API_KEY: str = ""
    OPENAI_API_URL: str = "https://api.openai.com/v1/chat/completions"
    OPENAI_MODEL: str = "gpt-4o-mini"
    GLM_API_KEY: str = ""
    GLM_API_URL: str = "https://open.bigmodel.cn/api/paas/v4/chat/completions"
    GLM_MODEL: str = "glm-4"
    AI_REQUEST_TIMEOUT_MS: int = 60000
    AI_DEBUG_MODE: bool = False

    # Background reminder worker
    NOTIFICATION_AGENT_ENABLED: bool = False
    NOTIFICATION_INTERVAL_MS: int = 60000
    NOTIFICATION_ADVANCE_MINUTES: int = 15

    # Wall-clock zone for "HH:MM" appointment, event and dose times
    CLINIC_TIMEZONE: str = "UTC"

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


settings = Settings()
