# student_invoice/core/config.py - Centralized settings management using Pydantic
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from typing import Annotated, List

DEFAULT_CORS_ORIGINS = [
    "tauri://localhost",
    "http://tauri.localhost",
    "http://localhost:1420",   # Tauri dev server
    "http://localhost:5173",   # Vite dev server
    "http://127.0.0.1:5173",
]


class Settings(BaseSettings):
    """Application settings with validation and type safety"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application Environment
    ENV: str = Field(default="dev", description="Environment: dev, staging, prod")
    DEBUG: bool = Field(default=False, description="Debug mode")
    API_HOST: str = Field(default="127.0.0.1", description="API host")
    API_PORT: int = Field(default=3001, ge=1, le=65535, description="API port")
    API_TITLE: str = Field(default="Student Invoice API", description="API title")
    API_VERSION: str = Field(default="1.0.0", description="API version")

    # Database Configuration
    DATABASE_URL: str = Field(default="sqlite:///./student_invoice.db", description="Database connection URL")
    DATABASE_ECHO: bool = Field(default=False, description="Echo SQL queries")

    # CORS Configuration
    CORS_ORIGINS: Annotated[List[str], NoDecode] = Field(default=DEFAULT_CORS_ORIGINS, description="CORS allowed origins")

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: str = Field(default="detailed", description="Log format: simple, detailed")

    # Gmail Configuration (OAuth2 + drafts API)
    GMAIL_AUTH_URL: str = Field(default="https://accounts.google.com/o/oauth2/v2/auth", description="OAuth authorize endpoint")
    GMAIL_TOKEN_URL: str = Field(default="https://oauth2.googleapis.com/token", description="OAuth token endpoint")
    GMAIL_API_BASE_URL: str = Field(default="https://gmail.googleapis.com/gmail/v1", description="Gmail REST API base")
    GMAIL_REDIRECT_URI: str = Field(default="http://localhost:3001/api/gmail/callback", description="OAuth redirect URI")
    GMAIL_SCOPES: Annotated[List[str], NoDecode] = Field(
        default=[
            "https://www.googleapis.com/auth/gmail.compose",
            "https://www.googleapis.com/auth/gmail.send",
            "https://www.googleapis.com/auth/gmail.modify",
        ],
        description="OAuth scopes requested for draft creation"
    )
    GMAIL_TIMEOUT_SECONDS: float = Field(default=30.0, gt=0, le=300, description="Gmail request timeout")

    # Invoice Configuration
    INVOICE_SIGN_OFF: str = Field(default="Robert", min_length=1, description="Name under 'Kind regards'")

    @field_validator("ENV")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        allowed_envs = ["dev", "development", "staging", "prod", "production", "test"]
        if v.lower() not in allowed_envs:
            raise ValueError(f"ENV must be one of: {allowed_envs}")
        return v.lower()

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        allowed_prefixes = (
            "sqlite://",
            "postgresql://",
            "postgresql+psycopg://",
        )
        if not v.startswith(allowed_prefixes):
            raise ValueError("DATABASE_URL must be a sqlite or postgresql connection string")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed_levels:
            raise ValueError(f"LOG_LEVEL must be one of: {allowed_levels}")
        return v.upper()

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v.lower() not in ("simple", "detailed"):
            raise ValueError("LOG_FORMAT must be 'simple' or 'detailed'")
        return v.lower()

    @field_validator("CORS_ORIGINS", "GMAIL_SCOPES", mode="before")
    @classmethod
    def parse_comma_separated(cls, v):
        if isinstance(v, str):
            # Handle comma-separated string
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode"""
        return self.ENV in ["dev", "development"]

    def get_cors_config(self) -> dict:
        """Get CORS configuration for FastAPI"""
        return {
            "allow_origins": self.CORS_ORIGINS,
            "allow_credentials": True,
            "allow_methods": ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type", "Accept", "Origin"],
        }

    def log_format_string(self) -> str:
        if self.LOG_FORMAT == "simple":
            return "%(levelname)s - %(message)s"
        return "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


# Create settings instance with validation
try:
    settings = Settings()
except Exception as e:
    print(f"Configuration error: {e}")
    print("Please check your .env file and environment variables")
    raise

# Export settings
__all__ = ["settings", "Settings"]
