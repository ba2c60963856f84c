# config.py
"""
Configuration module for the application.
Handles environment-specific settings using Pydantic v2 and pydantic-settings.
"""
from typing import Optional, List
from enum import Enum
from pydantic import Field, field_validator, BaseModel, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"

class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: str = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"
    file_enabled: bool = False
    file_path: str = "logs/app.log"

class APISettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    prefix: str = "/api"
    version: str = "1.0.0"
    title: str = "FieldWorkBook API"
    description: str = "Team budgets, field expenses and top-up approvals"

class DatabaseSettings(BaseModel):
    url: str
    pool_size: int = 20
    max_overflow: int = 30
    pool_recycle: int = 3600

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

class SecuritySettings(BaseModel):
    secret_key: SecretStr
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 1440
    password_min_length: int = 6
    @property
    def secret_key_str(self) -> str:
        """Return the secret key as a string for JWT operations."""
        return self.secret_key.get_secret_value()

class UploadSettings(BaseModel):
    directory: str = "uploads"
    max_size: int = 5 * 1024 * 1024
    allowed_extensions: List[str] = ["jpg", "jpeg", "png", "gif", "pdf"]

class AdminSeedSettings(BaseModel):
    username: str = "admin"
    password: Optional[SecretStr] = None
    full_name: str = "System Administrator"
    email: str = "admin@fieldworkbook.com"

    @property
    def password_str(self) -> Optional[str]:
        return self.password.get_secret_value() if self.password else None

class Settings(BaseSettings):
    """Main settings class with environment-specific configurations."""
    # Environment
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = False

    # API
    api_title: str = "FieldWorkBook API"
    api_description: str = "Team budgets, field expenses and top-up approvals"
    api_version: str = "1.0.0"
    host: str = "0.0.0.0"
    port: int = 8000

    # Database
    database_url: str
    pool_size: int = 20
    max_overflow: int = 30
    pool_recycle: int = 3600

    # Security
    secret_key: SecretStr
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 1440
    password_min_length: int = 6

    # Logging
    log_level: str = "INFO"
    log_format: str = Field(default="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}")
    log_file_enabled: bool = False
    log_file_path: str = "logs/app.log"

    # Attachments
    upload_dir: str = "uploads"
    max_upload_size: int = 5 * 1024 * 1024
    allowed_attachment_extensions_raw: str = Field(
        default="jpg,jpeg,png,gif,pdf",
        alias="ALLOWED_ATTACHMENT_EXTENSIONS",
        exclude=True,
    )

    # First admin account
    admin_username: str = "admin"
    admin_password: Optional[SecretStr] = None
    admin_full_name: str = "System Administrator"
    admin_email: str = "admin@fieldworkbook.com"

    # Frontend
    frontend_urls_raw: str = Field(
        default="http://localhost:3000",
        alias="FRONTEND_URLS",
        exclude=True,
    )

    # Feature flags
    enable_audit_logs: bool = True

    # Validators
    @field_validator("debug")
    @classmethod
    def debug_not_in_production(cls, v, info):
        env = info.data.get("environment")
        if v and env == Environment.PRODUCTION:
            raise ValueError("Debug mode should not be enabled in production")
        return v

    @property
    def frontend_urls(self) -> list[str]:
        """Comma-separated frontend URLs from .env, parsed into a list."""
        urls = [url.strip() for url in self.frontend_urls_raw.split(",") if url.strip()]
        from urllib.parse import urlparse
        for url in urls:
            parsed = urlparse(url)
            if parsed.scheme not in ("http", "https") or not parsed.netloc:
                raise ValueError(f"Invalid URL in frontend_urls: {url}")
        return urls

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v):
        if not v.startswith(("postgresql://", "postgresql+asyncpg://", "sqlite+aiosqlite://")):
            raise ValueError("Invalid database URL format")
        # Plain postgresql:// URLs would pick the sync psycopg2 driver
        if v.startswith("postgresql://"):
            v = "postgresql+asyncpg://" + v[len("postgresql://"):]
        return v

    # Sub-settings via properties
    @property
    def api(self) -> APISettings:
        return APISettings(
            host=self.host,
            port=self.port,
            title=self.api_title,
            description=self.api_description,
            version=self.api_version,
        )

    @property
    def logging(self) -> LoggingSettings:
        return LoggingSettings(
            level=self.log_level,
            format=self.log_format,
            file_enabled=self.log_file_enabled,
            file_path=self.log_file_path,
        )

    @property
    def database(self) -> DatabaseSettings:
        return DatabaseSettings(
            url=self.database_url,
            pool_size=self.pool_size,
            max_overflow=self.max_overflow,
            pool_recycle=self.pool_recycle,
        )

    @property
    def security(self) -> SecuritySettings:
        return SecuritySettings(
            secret_key=self.secret_key,
            algorithm=self.algorithm,
            access_token_expire_minutes=self.access_token_expire_minutes,
            password_min_length=self.password_min_length,
        )

    @property
    def uploads(self) -> UploadSettings:
        extensions = [
            ext.strip().lower().lstrip(".")
            for ext in self.allowed_attachment_extensions_raw.split(",")
            if ext.strip()
        ]
        return UploadSettings(
            directory=self.upload_dir,
            max_size=self.max_upload_size,
            allowed_extensions=extensions,
        )

    @property
    def admin_seed(self) -> AdminSeedSettings:
        return AdminSeedSettings(
            username=self.admin_username,
            password=self.admin_password,
            full_name=self.admin_full_name,
            email=self.admin_email,
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="allow",
        populate_by_name=True,
    )

class DevelopmentSettings(Settings):
    debug: bool = True
    log_level: str = "DEBUG"

class ProductionSettings(Settings):
    debug: bool = False
    log_level: str = "INFO"

    @field_validator("admin_password")
    @classmethod
    def validate_admin_password(cls, v):
        if v is not None and v.get_secret_value() == "admin123":
            raise ValueError("The default admin password must not be used in production")
        return v

class TestingSettings(Settings):
    database_url: str = "sqlite+aiosqlite:///./test.db"
    debug: bool = False
    log_level: str = "DEBUG"

def get_settings() -> Settings:
    """Factory to return environment-specific settings."""
    env = Settings().environment
    if env == Environment.PRODUCTION:
        return ProductionSettings()
    elif env == Environment.TESTING:
        return TestingSettings()
    return DevelopmentSettings()

# Global settings instance
settings = get_settings()
