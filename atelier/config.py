"""Application configuration using Pydantic Settings"""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    environment: str = "development"
    frontend_url: str = "http://localhost:5000"

    # Database
    database_url: str
    database_pool_size: int = 5
    database_max_overflow: int = 10

    # Redis
    redis_url: str = "redis://localhost:6379/0"

    # AWS / S3
    aws_region: str = "eu-west-1"
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_endpoint_url: Optional[str] = None
    s3_bucket: str = "atelier-project-files"
    max_upload_size_mb: int = 25

    # Security
    session_cookie_name: str = "atelier_session"
    session_max_age_days: int = 30
    login_max_attempts: int = 5
    login_attempt_window_seconds: int = 900
    verification_token_hours: int = 24

    # Federated identity (Firebase)
    firebase_project_id: Optional[str] = None

    # Email (SMTP)
    smtp_host: str = "localhost"
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = None
    email_from: str = "noreply@digitaal-atelier.nl"
    email_from_name: str = "Digitaal Atelier"

    # Chat assistant
    anthropic_api_key: Optional[str] = None
    chat_model: str = "claude-3-5-haiku-latest"
    chat_max_tokens: int = 512
    chat_history_limit: int = 50

    # CORS
    cors_origins: str = "http://localhost:5000,http://localhost:5173"

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins into a list"""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def session_max_age_seconds(self) -> int:
        return self.session_max_age_days * 24 * 3600

    @property
    def session_cookie_secure(self) -> bool:
        return self.environment == "production"

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024


# Global settings instance
settings = Settings()
