"""Application configuration with environment variables."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment
    ENV: str = "dev"
    VERSION: str = "0.1.0"

    # Server
    PORT: int = 8080

    # Database (SQLite by default)
    DATABASE_URL: str = "sqlite:///./data/sqlite/core.db"
    DB_AUTO_MIGRATE: bool = True

    # Bearer token
    JWT_SECRET: str = "your-secret-key-change-this"
    JWT_EXPIRES_HOURS: int = 24

    # Media storage
    IMAGES_DIRECTORY: str = "./data/images"
    VIDEOS_DIRECTORY: str = "./data/videos"
    MAX_UPLOAD_BYTES: int = 100 * 1024 * 1024
    MAX_COVER_PHOTO_BYTES: int = 10 * 1024 * 1024

    # Email (AWS SES)
    EMAIL_ENABLED: bool = False
    AWS_REGION: str = "us-east-1"
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""
    SENDER_EMAIL: str = "noreply@40weeks.app"
    SENDER_NAME: str = "40Weeks"
    SES_TIMEOUT_SECONDS: int = 10

    # Public links in emails and share pages
    BASE_URL: str = "http://localhost:8080"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000"

    # Error Tracking (optional, set in production)
    SENTRY_DSN: str = ""

    # Rate Limiting (requests per minute)
    RATE_LIMIT_AUTH: int = 10
    RATE_LIMIT_PUBLIC: int = 30
    RATE_LIMIT_API: int = 120

    # Worker
    WORKER_POLL_INTERVAL: int = 10
    WORKER_BATCH_SIZE: int = 10
    JOB_MAX_ATTEMPTS: int = 3
    # Retry n waits n * JOB_RETRY_DELAY_SECONDS
    JOB_RETRY_DELAY_SECONDS: int = 60

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS into a list."""
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def images_path(self) -> Path:
        return Path(self.IMAGES_DIRECTORY).resolve()

    @property
    def videos_path(self) -> Path:
        return Path(self.VIDEOS_DIRECTORY).resolve()

    @property
    def sender_identity(self) -> str:
        """SES Source header value."""
        return f"{self.SENDER_NAME} <{self.SENDER_EMAIL}>"

    @property
    def base_url(self) -> str:
        return self.BASE_URL.rstrip("/")


settings = Settings()
