"""
Configuration loader utility for environment-specific settings.
"""

import logging
import os
from pathlib import Path
from typing import Optional
from .settings import (
    AuthSettings,
    ContentStoreSettings,
    Environment,
    RedisSettings,
    SearchSettings,
    SecuritySettings,
    Settings,
)

logger = logging.getLogger(__name__)


class ConfigLoader:
    """Utility class for loading environment-specific configurations"""

    @staticmethod
    def load_environment_config(environment: Optional[str] = None) -> Settings:
        """
        Load configuration for the specified environment.

        Args:
            environment: Target environment (development, staging, production, testing)
                        If None, uses ENVIRONMENT env var or defaults to development

        Returns:
            Settings instance with environment-specific configuration
        """
        if environment is None:
            environment = os.getenv("ENVIRONMENT", "development")

        env = Environment(environment.lower())
        env_file = Path(f".env.{env.value}")

        if env_file.exists():
            return ConfigLoader._settings_from_files((".env", str(env_file)), env)

        logger.warning(f"Environment file {env_file} not found, using default settings")
        return Settings(environment=env)

    @staticmethod
    def _settings_from_files(env_files: tuple, env: Environment) -> Settings:
        """Nested groups read their own prefixes, so each gets the same files."""
        return Settings(
            _env_file=env_files,
            environment=env,
            content=ContentStoreSettings(_env_file=env_files),
            auth=AuthSettings(_env_file=env_files),
            redis=RedisSettings(_env_file=env_files),
            search=SearchSettings(_env_file=env_files),
            security=SecuritySettings(_env_file=env_files),
        )

    @staticmethod
    def get_available_environments() -> list[str]:
        """Get list of available environment configurations"""
        env_files = []
        for env_file in Path(".").glob(".env.*"):
            if env_file.name.endswith(".sample"):
                continue
            env_files.append(env_file.name.replace(".env.", ""))
        return sorted(env_files)

    @staticmethod
    def validate_environment_config(environment: str) -> bool:
        """
        Validate that an environment configuration exists and is valid.

        Args:
            environment: Environment name to validate

        Returns:
            True if configuration is valid, False otherwise
        """
        try:
            env = Environment(environment.lower())
            if not Path(f".env.{env.value}").exists():
                return False

            settings = ConfigLoader.load_environment_config(environment)
        except ValueError:
            return False

        # The content store is the only hard requirement to serve pages
        return bool(settings.content.project_id and settings.content.dataset)

    @staticmethod
    def create_sample_env_file(environment: str, output_path: Optional[str] = None) -> str:
        """
        Create a sample .env file for the specified environment.

        Args:
            environment: Target environment
            output_path: Optional custom output path

        Returns:
            Path to the created sample file
        """
        env = Environment(environment.lower())

        if output_path is None:
            output_path = f".env.{env.value}.sample"

        defaults = Settings()

        sample_content = f"""# Sample configuration for {env.value} environment
# Copy this file to .env.{env.value} and modify as needed

# Application Configuration
APP_NAME={defaults.app_name}
APP_VERSION={defaults.app_version}
ENVIRONMENT={env.value}
DEBUG={'true' if env == Environment.DEVELOPMENT else 'false'}

# Server Configuration
HOST={defaults.host}
PORT={defaults.port}
RELOAD={'true' if env == Environment.DEVELOPMENT else 'false'}
WORKERS={1 if env == Environment.DEVELOPMENT else 4}

# Logging Configuration
LOG_LEVEL={defaults.log_level.value}
LOG_FORMAT={defaults.log_format}

# Content Store Configuration
CONTENT_PROJECT_ID=your-project-id
CONTENT_DATASET={defaults.content.dataset}
CONTENT_API_VERSION={defaults.content.api_version}
CONTENT_USE_CDN={'false' if env == Environment.DEVELOPMENT else 'true'}
CONTENT_TOKEN=your-write-token

# Auth Provider Configuration
AUTH_JWT_SECRET=change-me
AUTH_JWT_ALGORITHM={defaults.auth.jwt_algorithm}
# AUTH_JWKS_URL=https://your-auth-provider/.well-known/jwks.json

# Redis Configuration
REDIS_ENABLED=false
REDIS_HOST={defaults.redis.host}
REDIS_PORT={defaults.redis.port}
REDIS_DB={defaults.redis.db}
REDIS_CACHE_TTL_SECONDS={defaults.redis.cache_ttl_seconds}
REDIS_RECONNECT_BACKOFF_SECONDS={defaults.redis.reconnect_backoff_seconds}

# Search Configuration
SEARCH_DISTANCE_UNIT={defaults.search.distance_unit.value}
SEARCH_MAX_RADIUS={defaults.search.max_radius}
SEARCH_GROUPING_TIMEZONE={defaults.search.grouping_timezone}
SEARCH_ONBOARDING_PATH={defaults.search.onboarding_path}

# Security Configuration
SECURITY_CORS_ORIGINS=*
"""

        with open(output_path, "w") as f:
            f.write(sample_content)

        return output_path


def load_config_for_environment(environment: Optional[str] = None) -> Settings:
    """Convenience function to load configuration for an environment"""
    return ConfigLoader.load_environment_config(environment)
