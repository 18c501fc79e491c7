"""
Validation Engine Configuration Module

Environment-driven configuration for the validation engine using python-dotenv for
.env discovery and os.getenv for value resolution. Configuration classes follow an
inheritance hierarchy with environment-specific overrides selected through the
get_config() factory.

Key Features:
- python-dotenv environment variable management with auto-discovery of .env files
- Typed environment variable parsing with validation on construction
- Rate limiting, slow-call threshold and metrics toggles for the request pipeline
- Environment-specific overrides for development, testing and production

Environment Variables:
    VALIDATION_ENV: configuration name (development, testing, production)
    LOG_LEVEL / LOG_FORMAT: structured logging level and renderer
    DATABASE_PATH: SQLite database path for the bundled data store adapter
    RATE_LIMIT_ENABLED / RATE_LIMIT_MAX_REQUESTS / RATE_LIMIT_WINDOW_MS
    SLOW_CALL_THRESHOLD_MS: performance monitoring threshold
    METRICS_ENABLED: Prometheus metrics collection toggle
    AUTH_REQUIRED: whether the authentication gate is installed
"""

import logging
import os
from typing import Any, Callable, Dict, Optional

from dotenv import find_dotenv, load_dotenv

from validation_engine.utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

TRUE_VALUES = ("true", "1", "yes", "on")


class EnvironmentManager:
    """
    Environment variable loading and typed lookup.

    Loads a .env file once (without overriding variables already present in the
    process environment) and exposes typed getters that raise ConfigurationError
    on malformed values.
    """

    def __init__(self, env_file: Optional[str] = None):
        """
        Initialize environment manager and load the .env file if one exists.

        Args:
            env_file: Optional path to .env file, defaults to auto-discovery
        """
        self.env_file = env_file or find_dotenv(usecwd=True)
        if self.env_file:
            load_dotenv(self.env_file, override=False)

    def get_str(self, key: str, default: str) -> str:
        """Get a string environment variable."""
        value = os.getenv(key)
        return default if value is None or value == "" else value

    def get_bool(self, key: str, default: bool) -> bool:
        """Get a boolean environment variable."""
        value = os.getenv(key)
        if value is None or value == "":
            return default
        return value.strip().lower() in TRUE_VALUES

    def get_number(self, key: str, default: float, cast: Callable[[str], Any] = int) -> Any:
        """
        Get a positive numeric environment variable.

        Args:
            key: Environment variable name
            default: Value used when the variable is unset
            cast: Conversion callable (int or float)

        Returns:
            Parsed numeric value

        Raises:
            ConfigurationError: When the value does not parse or is not positive
        """
        raw = os.getenv(key)
        if raw is None or raw == "":
            return default
        try:
            value = cast(raw)
        except ValueError:
            raise ConfigurationError(
                f"Environment variable '{key}' must be numeric, got '{raw}'",
                details={"key": key, "value": raw},
            )
        if value <= 0:
            raise ConfigurationError(
                f"Environment variable '{key}' must be positive, got {value}",
                details={"key": key, "value": raw},
            )
        return value


class BaseConfig:
    """
    Base configuration shared by every environment.

    Attribute names mirror the environment variables they are read from.
    """

    ENVIRONMENT = "production"

    def __init__(self, env_manager: Optional[EnvironmentManager] = None):
        """Initialize base configuration from the environment."""
        self.env = env_manager or EnvironmentManager()

        # Logging
        self.LOG_LEVEL = self.env.get_str("LOG_LEVEL", "INFO").upper()
        self.LOG_FORMAT = self.env.get_str("LOG_FORMAT", "json").lower()

        # Data store
        self.DATABASE_PATH = self.env.get_str("DATABASE_PATH", ":memory:")

        # Request pipeline
        self.AUTH_REQUIRED = self.env.get_bool("AUTH_REQUIRED", True)
        self.RATE_LIMIT_ENABLED = self.env.get_bool("RATE_LIMIT_ENABLED", True)
        self.RATE_LIMIT_MAX_REQUESTS = self.env.get_number("RATE_LIMIT_MAX_REQUESTS", 20)
        self.RATE_LIMIT_WINDOW_MS = self.env.get_number("RATE_LIMIT_WINDOW_MS", 1000.0, float)
        self.SLOW_CALL_THRESHOLD_MS = self.env.get_number("SLOW_CALL_THRESHOLD_MS", 1000.0, float)

        # Monitoring
        self.METRICS_ENABLED = self.env.get_bool("METRICS_ENABLED", True)

        self.TESTING = False
        self.DEBUG = False

    def to_dict(self) -> Dict[str, Any]:
        """Return the public configuration values."""
        return {
            key: value for key, value in vars(self).items()
            if key.isupper()
        }


class DevelopmentConfig(BaseConfig):
    """Development configuration with console logging and debug output."""

    ENVIRONMENT = "development"

    def __init__(self, env_manager: Optional[EnvironmentManager] = None):
        super().__init__(env_manager)
        self.DEBUG = True
        self.LOG_LEVEL = self.env.get_str("LOG_LEVEL", "DEBUG").upper()
        self.LOG_FORMAT = self.env.get_str("LOG_FORMAT", "console").lower()


class TestingConfig(BaseConfig):
    """
    Testing configuration for unit and integration tests.

    Uses an in-memory database, DEBUG logging and no metrics export.
    """

    ENVIRONMENT = "testing"

    def __init__(self, env_manager: Optional[EnvironmentManager] = None):
        super().__init__(env_manager)
        self.TESTING = True
        self.DEBUG = True
        self.LOG_LEVEL = "DEBUG"
        self.LOG_FORMAT = "console"
        self.DATABASE_PATH = ":memory:"
        self.METRICS_ENABLED = False


class ProductionConfig(BaseConfig):
    """Production configuration; values come straight from the environment."""

    ENVIRONMENT = "production"


CONFIG_MAPPING = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config(config_name: Optional[str] = None) -> BaseConfig:
    """
    Configuration factory returning an environment-specific configuration.

    Args:
        config_name: Optional configuration name override; defaults to the
            VALIDATION_ENV environment variable, then 'production'

    Returns:
        Environment-specific configuration instance

    Raises:
        ConfigurationError: When an unknown configuration name is provided
    """
    config_name = config_name or os.getenv("VALIDATION_ENV", "production")

    config_class = CONFIG_MAPPING.get(config_name.lower())
    if not config_class:
        available_configs = ", ".join(CONFIG_MAPPING.keys())
        raise ConfigurationError(
            f"Invalid configuration name '{config_name}'. "
            f"Available configurations: {available_configs}"
        )

    config_instance = config_class()
    logger.debug("Configuration '%s' loaded", config_name)
    return config_instance


__all__ = [
    "EnvironmentManager",
    "BaseConfig",
    "DevelopmentConfig",
    "TestingConfig",
    "ProductionConfig",
    "get_config",
]
