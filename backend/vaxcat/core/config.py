"""Module: config."""

from pydantic_settings import BaseSettings

# Centralized runtime configuration loaded from environment variables.
class Settings(BaseSettings):
    # Primary SQLAlchemy connection string for the catalog database.
    database_url: str
    # Echo emitted SQL to the log (local debugging only).
    sql_echo: bool = False

    # Shared secret and algorithm used to verify bearer tokens issued upstream.
    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"

    # Root log level applied once at application start.
    log_level: str = "INFO"

    # Frontend origins allowed to call the API from a browser.
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    # Configure pydantic-settings to also load values from local .env file.
    class Config:
        env_file = ".env"

# Global settings instance imported by app modules at runtime.
settings = Settings()
