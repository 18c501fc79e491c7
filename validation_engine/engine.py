"""
Validation Engine Context

Explicit context object that owns every engine component for the lifetime of the
process: configuration, structured logging, metrics, the data store, the
processor registry and the channel router with its middleware pipeline.

Usage:
    engine = create_engine("development")
    await engine.init()
    result = await engine.invoke(
        CallerIdentity(sender_id="window-1"),
        "validation:run",
        {"validationName": "duplicate_records", "ou": "OU1"},
    )
    await engine.teardown()

Default pipeline, outermost first:
    logging -> authentication -> rate limiting -> sanitization ->
    performance monitoring -> [schema validation] -> error normalization -> handler
"""

from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional

import structlog

from validation_engine.auth.session import Authenticator, SessionAuthenticator
from validation_engine.channels.router import ChannelResult, ChannelRouter
from validation_engine.channels.validations import REQUIRED_FIELDS, create_validation_handlers
from validation_engine.config.settings import BaseConfig, get_config
from validation_engine.data.store import DataStore, SQLiteDataStore
from validation_engine.middleware.chain import CallerIdentity, MiddlewareStage
from validation_engine.middleware.stages import (
    AuthenticationStage,
    ErrorNormalizationStage,
    LoggingStage,
    PerformanceStage,
    RateLimitStage,
    SanitizationStage,
    SchemaValidationStage,
)
from validation_engine.monitoring.logging import setup_structured_logging
from validation_engine.monitoring.metrics import EngineMetrics
from validation_engine.processors.registry import (
    DEFAULT_PROCESSORS,
    ProcessorFactory,
    ValidationRegistry,
)

logger = structlog.get_logger("validation_engine.engine")


class ValidationEngine:
    """
    Validation engine lifecycle manager.

    Args:
        config: Engine configuration, defaults to get_config()
        store: Data store to use; when omitted the engine opens and owns a
            SQLiteDataStore at ``config.DATABASE_PATH``
        authenticator: Authenticator consulted when ``AUTH_REQUIRED`` is set;
            defaults to a fresh SessionAuthenticator
        processor_factories: Ordered processor factories for the registry
        configure_logging: Whether init() configures structlog
    """

    def __init__(
        self,
        config: Optional[BaseConfig] = None,
        store: Optional[DataStore] = None,
        authenticator: Optional[Authenticator] = None,
        processor_factories: Iterable[ProcessorFactory] = DEFAULT_PROCESSORS,
        configure_logging: bool = True,
    ) -> None:
        self.config = config or get_config()
        self.store = store
        self.authenticator = authenticator
        self.processor_factories = list(processor_factories)
        self.configure_logging = configure_logging

        self.metrics: Optional[EngineMetrics] = None
        self.registry: Optional[ValidationRegistry] = None
        self.router: Optional[ChannelRouter] = None
        self.initialized = False
        self.startup_time: Optional[datetime] = None
        self._owns_store = store is None

    async def init(self) -> "ValidationEngine":
        """
        Build and wire every component.

        Returns:
            The engine itself, for chaining
        """
        if self.initialized:
            logger.warning("Validation engine already initialized")
            return self

        if self.configure_logging:
            setup_structured_logging(self.config)

        self.startup_time = datetime.now(timezone.utc)
        logger.info(
            "Initializing validation engine",
            environment=self.config.ENVIRONMENT,
            auth_required=self.config.AUTH_REQUIRED,
            rate_limit_enabled=self.config.RATE_LIMIT_ENABLED,
        )

        if self.config.METRICS_ENABLED:
            self.metrics = EngineMetrics()

        if self._owns_store:
            sqlite_store = SQLiteDataStore(self.config.DATABASE_PATH)
            await sqlite_store.connect()
            self.store = sqlite_store

        self.registry = ValidationRegistry(self.processor_factories, metrics=self.metrics)
        self.registry.set_database(self.store)
        self.registry.initialize()

        if self.config.AUTH_REQUIRED and self.authenticator is None:
            self.authenticator = SessionAuthenticator()

        self.router = ChannelRouter(metrics=self.metrics)
        for stage in self._global_stages():
            self.router.use(stage)

        handlers = create_validation_handlers(self.registry)
        for channel, handler in handlers.items():
            stages: List[MiddlewareStage] = []
            if channel in REQUIRED_FIELDS:
                stages.append(SchemaValidationStage(REQUIRED_FIELDS[channel]))
            stages.append(ErrorNormalizationStage())
            self.router.register(channel, handler, stages)

        self.router.initialize()
        self.initialized = True
        logger.info(
            "Validation engine initialized",
            channels=len(self.router.registered_channels()),
            processors=len(self.registry.get_all_processors()),
        )
        return self

    def _global_stages(self) -> List[MiddlewareStage]:
        stages: List[MiddlewareStage] = [LoggingStage()]
        if self.config.AUTH_REQUIRED:
            stages.append(AuthenticationStage(self.authenticator))
        if self.config.RATE_LIMIT_ENABLED:
            stages.append(RateLimitStage(
                max_requests=self.config.RATE_LIMIT_MAX_REQUESTS,
                window_ms=self.config.RATE_LIMIT_WINDOW_MS,
                metrics=self.metrics,
            ))
        stages.append(SanitizationStage())
        stages.append(PerformanceStage(
            threshold_ms=self.config.SLOW_CALL_THRESHOLD_MS,
            metrics=self.metrics,
        ))
        return stages

    async def invoke(self, caller: CallerIdentity, channel: str, *args: Any) -> ChannelResult:
        """Dispatch one request through the router."""
        if not self.initialized:
            raise RuntimeError("Validation engine is not initialized")
        return await self.router.handle_request(caller, channel, *args)

    async def teardown(self) -> None:
        """Clean up processors and close the data store if the engine opened it."""
        if not self.initialized:
            return

        logger.info("Tearing down validation engine")
        await self.registry.cleanup()

        if self._owns_store and isinstance(self.store, SQLiteDataStore):
            await self.store.close()
            self.store = None

        self.router.clear()
        self.initialized = False
        logger.info("Validation engine teardown complete")

    async def __aenter__(self) -> "ValidationEngine":
        return await self.init()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.teardown()


def create_engine(config_name: Optional[str] = None, **kwargs: Any) -> ValidationEngine:
    """
    Create an engine for a named configuration.

    Args:
        config_name: Configuration name (development, testing, production);
            defaults to the VALIDATION_ENV environment variable
        **kwargs: Passed through to ValidationEngine

    Returns:
        Uninitialized ValidationEngine
    """
    return ValidationEngine(config=get_config(config_name), **kwargs)


__all__ = ["ValidationEngine", "create_engine"]
