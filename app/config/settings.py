"""
Configuration management system using Pydantic Settings.
Supports environment-based configuration for different deployment environments.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings
from typing import Optional, Dict, Any, List
import os
from enum import Enum


# .env.{ENVIRONMENT} overrides the shared .env
_ENV_FILES = (".env", f".env.{os.getenv('ENVIRONMENT', 'development').lower()}")


class Environment(str, Enum):
    """Supported deployment environments"""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(str, Enum):
    """Supported log levels"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class DistanceUnit(str, Enum):
    """Units a search radius can be expressed in"""
    MILES = "miles"
    KILOMETERS = "km"


class ContentStoreSettings(BaseSettings):
    """Hosted CMS (content lake) configuration"""

    project_id: str = Field(default="", description="CMS project identifier")
    dataset: str = Field(default="production")
    api_version: str = Field(default="2024-01-01")
    use_cdn: bool = Field(default=True)
    token: Optional[str] = Field(default=None, description="Write/read token for the CMS")
    timeout_seconds: int = Field(default=10, ge=1, le=60)

    @property
    def query_host(self) -> str:
        """Host for read queries; CDN host is skipped when a token is set."""
        api = "apicdn" if self.use_cdn and not self.token else "api"
        return f"https://{self.project_id}.{api}.sanity.io"

    @property
    def api_host(self) -> str:
        """Host for uncached reads and mutations"""
        return f"https://{self.project_id}.api.sanity.io"

    model_config = {"env_prefix": "CONTENT_", "env_file": _ENV_FILES, "extra": "ignore"}


class AuthSettings(BaseSettings):
    """Auth provider token verification"""

    jwt_secret: str = Field(default="please-change-me")
    jwt_algorithm: str = Field(default="HS256")
    jwt_issuer: Optional[str] = Field(default=None)
    # When set, tokens are verified against the provider's published keys instead of jwt_secret
    jwks_url: Optional[str] = Field(default=None, description="Auth provider JWKS endpoint")
    jwks_algorithm: str = Field(default="RS256")
    jwks_cache_seconds: int = Field(default=300, ge=0)

    model_config = {"env_prefix": "AUTH_", "env_file": _ENV_FILES, "extra": "ignore"}


class RedisSettings(BaseSettings):
    """Redis cache configuration"""

    enabled: bool = Field(default=False)
    host: str = Field(default="redis")  # Default to docker service name
    port: int = Field(default=6379, ge=1, le=65535)
    password: Optional[str] = Field(default=None)
    db: int = Field(default=0, ge=0, le=15)
    socket_timeout: int = Field(default=5, ge=1, le=30)
    cache_ttl_seconds: int = Field(default=300, ge=10, le=86400)
    reconnect_backoff_seconds: int = Field(default=30, ge=1, le=3600)

    @property
    def url(self) -> str:
        """Generate Redis URL from configuration"""
        auth = f":{self.password}@" if self.password else ""
        return f"redis://{auth}{self.host}:{self.port}/{self.db}"

    model_config = {"env_prefix": "REDIS_", "env_file": _ENV_FILES, "extra": "ignore"}


class SearchSettings(BaseSettings):
    """Geographic class search configuration"""

    distance_unit: DistanceUnit = Field(default=DistanceUnit.MILES)
    max_radius: float = Field(default=100.0, gt=0)
    grouping_timezone: str = Field(default="UTC", description="IANA zone used to derive day keys")
    categories_cache_ttl_seconds: int = Field(default=600, ge=0, le=86400)
    onboarding_path: str = Field(default="/onboarding")

    model_config = {"env_prefix": "SEARCH_", "env_file": _ENV_FILES, "extra": "ignore"}


class SecuritySettings(BaseSettings):
    """CORS configuration"""

    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    cors_allow_credentials: bool = Field(default=True)
    cors_allow_methods: List[str] = Field(
        default_factory=lambda: ["GET"]
    )
    cors_allow_headers: List[str] = Field(default_factory=lambda: ["*"])

    @field_validator('cors_origins', mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from environment variable or list"""
        if isinstance(v, str):
            origin_list = v.split(",")
            return [origin.strip() for origin in origin_list if origin.strip()]
        return v or ["*"]

    model_config = {"env_prefix": "SECURITY_", "env_file": _ENV_FILES, "extra": "ignore"}


class Settings(BaseSettings):
    """Main application settings"""

    # Application Configuration
    app_name: str = Field(default="Class Finder Backend")
    app_version: str = Field(default="1.0.0")
    environment: Environment = Field(default=Environment.DEVELOPMENT)
    debug: bool = Field(default=False)

    # Server Configuration
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000, ge=1, le=65535)
    reload: bool = Field(default=False)
    workers: int = Field(default=1, ge=1, le=16)

    # Logging Configuration
    log_level: LogLevel = Field(default=LogLevel.INFO)
    log_format: str = Field(default="json", description="'json' or 'text'")

    # Nested Settings
    content: ContentStoreSettings = Field(default_factory=ContentStoreSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)

    @field_validator('environment', mode='before')
    @classmethod
    def validate_environment(cls, v):
        """Validate and normalize environment setting"""
        if isinstance(v, str):
            return Environment(v.lower())
        return v

    def get_cors_config(self) -> Dict[str, Any]:
        """Get CORS configuration for FastAPI"""
        return {
            "allow_origins": self.security.cors_origins,
            "allow_credentials": self.security.cors_allow_credentials,
            "allow_methods": self.security.cors_allow_methods,
            "allow_headers": self.security.cors_allow_headers,
        }

    model_config = {
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings instance"""
    return settings


def reload_settings() -> Settings:
    """Reload settings from environment and files"""
    global settings
    settings = Settings()
    return settings
