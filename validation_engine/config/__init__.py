"""Configuration package for the validation engine."""

from validation_engine.config.settings import (
    BaseConfig,
    DevelopmentConfig,
    EnvironmentManager,
    ProductionConfig,
    TestingConfig,
    get_config,
)

__all__ = [
    "BaseConfig",
    "DevelopmentConfig",
    "EnvironmentManager",
    "ProductionConfig",
    "TestingConfig",
    "get_config",
]
