from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Load backend/.env first, then the repo-root .env; unknown keys are ignored so a
    # shared .env can also carry worker or frontend settings.
    model_config = SettingsConfigDict(env_file=(".env", "../.env"), case_sensitive=True, extra="ignore")

    PROJECT_NAME: str = "Forum"
    ENVIRONMENT: str = "development"
    API_V1_STR: str = "/api/v1"
    # Development-mode flag: adds exception text to 500 responses.
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    SECRET_KEY: str = "change_me"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    JWT_ALGORITHM: str = "HS512"
    JWT_ISSUER: str = "forum"
    JWT_AUDIENCE: str = "forum-api"

    DATABASE_URL: str = ""
    POSTGRES_SERVER: str = "db"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "forum"

    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 0
    # Max wait for a pooled connection before the request fails with 503.
    DB_POOL_TIMEOUT_SECONDS: float = 2.0
    DB_POOL_RECYCLE_SECONDS: int = 1800

    CELERY_BROKER_URL: str = "redis://redis:6379/1"
    CELERY_RESULT_BACKEND: str = "redis://redis:6379/2"
    CELERY_TASK_ALWAYS_EAGER: bool = False
    NOTIFY_MAX_RETRIES: int = 5

    BACKEND_CORS_ORIGINS: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])
    FRONTEND_URL: str = "http://localhost:3000"

    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_FROM_EMAIL: str = "no-reply@forum.local"
    SMTP_USE_TLS: bool = True

    PASSWORD_RESET_TOKEN_TTL_MINUTES: int = 60
    MIN_PASSWORD_LENGTH: int = 8

    RATE_LIMIT_ENABLED: bool = True
    LOGIN_RATE_LIMIT: str = "20/minute"
    REGISTER_RATE_LIMIT: str = "10/minute"
    FORGOT_PASSWORD_RATE_LIMIT: str = "5/minute"

    DEFAULT_CATEGORIES: list[str] = Field(
        default_factory=lambda: ["General", "Python", "JavaScript", "Databases", "DevOps"]
    )

    @model_validator(mode="after")
    def _prod_guards(self):
        if self.is_production:
            if self.DEBUG:
                raise ValueError("DEBUG must be false in production")
            if not self.SECRET_KEY or len(self.SECRET_KEY) < 32:
                raise ValueError("SECRET_KEY must be 32+ chars in production")
        return self

    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


@lru_cache
def get_settings() -> Settings:
    return Settings()
