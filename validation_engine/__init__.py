"""
Validation Engine
=================

Pluggable validation processors for staged financial data, executed through a
processor registry and reached through a request middleware pipeline that gates
every channel call (authentication, rate limiting, input sanitization, logging,
error normalization).

Package Structure:
- processors: processor contract, base class, bundled processors and registry
- middleware: stage capability, composition function and the stages
- channels: channel router and the validation:* handlers
- business: pydantic data model
- data: data store capability and SQLite adapter
- auth: caller session authentication
- config: environment-driven configuration classes
- monitoring: structlog setup and Prometheus metrics
- utils: error taxonomy and input sanitization
"""

__version__ = "1.0.0"
__title__ = "Staging Validation Engine"
__description__ = "Validation processor registry behind a request middleware pipeline"

PACKAGE_NAME = "validation_engine"

from validation_engine.engine import ValidationEngine, create_engine  # noqa: E402
from validation_engine.middleware.chain import CallerIdentity  # noqa: E402

__all__ = [
    "CallerIdentity",
    "ValidationEngine",
    "create_engine",
    "__version__",
]
