import logging
import os
from enum import Enum
from typing import List

from pydantic_settings import BaseSettings
from starlette.config import Config

logger = logging.getLogger(__name__)

current_file_dir = os.path.dirname(os.path.realpath(__file__))
project_root = os.path.abspath(os.path.join(current_file_dir, "..", "..", ".."))

env_paths = [
    "/code/.env",
    os.path.join(project_root, ".env"),
    "/.env",
]

env_path = next((path for path in env_paths if os.path.isfile(path)), env_paths[0])
logger.info(f"Using environment file at: {env_path}")

config = Config(env_path)

DEFAULT_ALLOWED_MIME_TYPES = (
    "application/pdf",
    "image/jpeg",
    "image/png",
    "image/tiff",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
)


class EnvironmentOption(str, Enum):
    """Environment options for the application."""

    PRODUCTION = "production"
    STAGING = "staging"
    DEVELOPMENT = "development"
    LOCAL = "local"


class StorageBackendOption(str, Enum):
    """Where uploaded file bytes are kept."""

    LOCAL = "local"
    S3 = "s3"


class EnvironmentSettings(BaseSettings):
    """Environment-related settings."""

    ENVIRONMENT: EnvironmentOption = config("ENVIRONMENT", default=EnvironmentOption.DEVELOPMENT, cast=EnvironmentOption)


class DatabaseSettings(BaseSettings):
    """Database-related settings."""

    POSTGRES_USER: str = config("POSTGRES_USER", default="postgres")
    POSTGRES_PASSWORD: str = config("POSTGRES_PASSWORD", default="postgres")
    POSTGRES_SERVER: str = config("POSTGRES_SERVER", default="localhost")
    POSTGRES_PORT: int = config("POSTGRES_PORT", default=5432, cast=int)
    POSTGRES_DB: str = config("POSTGRES_DB", default="papermind")
    POSTGRES_ASYNC_PREFIX: str = config("POSTGRES_ASYNC_PREFIX", default="postgresql+asyncpg://")
    CREATE_TABLES_ON_STARTUP: bool = config("CREATE_TABLES_ON_STARTUP", default=True, cast=bool)

    POSTGRES_POOL_SIZE: int = config("POSTGRES_POOL_SIZE", default=20, cast=int)
    POSTGRES_MAX_OVERFLOW: int = config("POSTGRES_MAX_OVERFLOW", default=0, cast=int)

    @property
    def DATABASE_URL(self) -> str:
        """Get the full database URL."""
        return (
            f"{self.POSTGRES_ASYNC_PREFIX}{self.POSTGRES_USER}:"
            f"{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:"
            f"{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )


class CORSSettings(BaseSettings):
    """CORS-related settings."""

    CORS_ENABLED: bool = config("CORS_ENABLED", default=True, cast=bool)
    CORS_ORIGINS: str = config("CORS_ORIGINS", default="*")
    CORS_ALLOW_CREDENTIALS: bool = config("CORS_ALLOW_CREDENTIALS", default=True, cast=bool)

    @property
    def CORS_ORIGINS_LIST(self) -> List[str]:
        """Get CORS origins as a list."""
        if not self.CORS_ORIGINS:
            return ["*"]
        return [x.strip() for x in self.CORS_ORIGINS.split(",") if x.strip()]


class CompressionSettings(BaseSettings):
    """Compression-related settings."""

    GZIP_ENABLED: bool = config("GZIP_ENABLED", default=True, cast=bool)
    GZIP_MINIMUM_SIZE: int = config("GZIP_MINIMUM_SIZE", default=1000, cast=int)


class APIDocSettings(BaseSettings):
    """API documentation settings."""

    ENABLE_DOCS_IN_PRODUCTION: bool = config("ENABLE_DOCS_IN_PRODUCTION", default=False, cast=bool)
    DOCS_URL: str = config("DOCS_URL", default="/docs")
    REDOC_URL: str = config("REDOC_URL", default="/redoc")
    OPENAPI_URL: str = config("OPENAPI_URL", default="/openapi.json")


class AppSettings(BaseSettings):
    """Application-related settings."""

    APP_NAME: str = "PaperMind API"
    APP_DESCRIPTION: str = "Document intake, analysis and reminders"
    DEBUG: bool = config("DEBUG", default=False, cast=bool)
    VERSION: str = "0.1.0"


class AuthSettings(BaseSettings):
    """Bearer token verification settings for the external identity provider."""

    AUTH_JWT_SECRET: str = config("AUTH_JWT_SECRET", default="")
    AUTH_JWT_ALGORITHM: str = config("AUTH_JWT_ALGORITHM", default="HS256")
    AUTH_JWT_AUDIENCE: str = config("AUTH_JWT_AUDIENCE", default="authenticated")


class UploadSettings(BaseSettings):
    """Upload validation settings."""

    MAX_UPLOAD_BYTES: int = config("MAX_UPLOAD_BYTES", default=10 * 1024 * 1024, cast=int)
    ALLOWED_MIME_TYPES: str = config("ALLOWED_MIME_TYPES", default=",".join(DEFAULT_ALLOWED_MIME_TYPES))

    @property
    def ALLOWED_MIME_TYPES_LIST(self) -> List[str]:
        """Get the accepted upload content types as a list."""
        return [x.strip().lower() for x in self.ALLOWED_MIME_TYPES.split(",") if x.strip()]


class StorageSettings(BaseSettings):
    """Object storage settings."""

    STORAGE_BACKEND: StorageBackendOption = config(
        "STORAGE_BACKEND", default=StorageBackendOption.LOCAL, cast=StorageBackendOption
    )
    LOCAL_STORAGE_PATH: str = config("LOCAL_STORAGE_PATH", default=os.path.join(project_root, "storage", "documents"))

    S3_BUCKET_NAME: str = config("S3_BUCKET_NAME", default="")
    S3_REGION: str = config("S3_REGION", default="")
    S3_ENDPOINT_URL: str = config("S3_ENDPOINT_URL", default="")
    S3_ACCESS_KEY_ID: str = config("S3_ACCESS_KEY_ID", default="")
    S3_SECRET_ACCESS_KEY: str = config("S3_SECRET_ACCESS_KEY", default="")


class ExtractionSettings(BaseSettings):
    """Text extraction settings."""

    OCR_LANGUAGE: str = config("OCR_LANGUAGE", default="eng")
    TESSERACT_CMD: str = config("TESSERACT_CMD", default="")
    EXTRACTION_TIMEOUT_SECONDS: float = config("EXTRACTION_TIMEOUT_SECONDS", default=60.0, cast=float)


class AnalysisSettings(BaseSettings):
    """Language model settings."""

    ANTHROPIC_API_KEY: str = config("ANTHROPIC_API_KEY", default="")
    ANALYSIS_MODEL: str = config("ANALYSIS_MODEL", default="claude-3-7-sonnet-20250219")
    ANALYSIS_MAX_TOKENS: int = config("ANALYSIS_MAX_TOKENS", default=1024, cast=int)
    ANALYSIS_TIMEOUT_SECONDS: float = config("ANALYSIS_TIMEOUT_SECONDS", default=60.0, cast=float)
    ANALYSIS_MAX_INPUT_CHARS: int = config("ANALYSIS_MAX_INPUT_CHARS", default=100_000, cast=int)


class LoggingSettings(BaseSettings):
    """Centralized logging configuration settings."""

    LOG_LEVEL: str = config("LOG_LEVEL", default="INFO")
    LOG_FORMAT: str = config("LOG_FORMAT", default="structured")  # "simple", "detailed", "structured", "json"

    LOG_CONSOLE_ENABLED: bool = config("LOG_CONSOLE_ENABLED", default=True, cast=bool)
    LOG_FILE_ENABLED: bool = config("LOG_FILE_ENABLED", default=False, cast=bool)
    LOG_FILE_PATH: str = config("LOG_FILE_PATH", default="logs/papermind.log")
    LOG_FILE_MAX_SIZE: int = config("LOG_FILE_MAX_SIZE", default=10485760, cast=int)
    LOG_FILE_BACKUP_COUNT: int = config("LOG_FILE_BACKUP_COUNT", default=5, cast=int)
    LOG_SQL_QUERIES: bool = config("LOG_SQL_QUERIES", default=False, cast=bool)

    @property
    def LOG_LEVEL_INT(self) -> int:
        """Convert string log level to integer."""
        level_map = {
            "DEBUG": logging.DEBUG,
            "INFO": logging.INFO,
            "WARNING": logging.WARNING,
            "ERROR": logging.ERROR,
            "CRITICAL": logging.CRITICAL,
        }
        return level_map.get(self.LOG_LEVEL.upper(), logging.INFO)


class Settings(
    EnvironmentSettings,
    DatabaseSettings,
    CORSSettings,
    CompressionSettings,
    APIDocSettings,
    AppSettings,
    AuthSettings,
    UploadSettings,
    StorageSettings,
    ExtractionSettings,
    AnalysisSettings,
    LoggingSettings,
):
    """Main settings class that combines all setting categories."""

    pass


settings = Settings()


def get_settings() -> Settings:
    """Get application settings.

    Returns:
        The application settings.
    """
    return settings
