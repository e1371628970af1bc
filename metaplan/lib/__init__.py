"""
Lib package for Metaplan.

Contains shared utilities:
- dates.py: calendar bucket keys (day, week, month, year)
- exceptions.py: exception hierarchy
- circuit_breaker.py: circuit breaker for AI endpoint calls
- logging.py: structlog configuration
"""

from metaplan.lib.circuit_breaker import CircuitBreaker, CircuitOpenError, CircuitState
from metaplan.lib.exceptions import (
    ConfigurationError,
    ExternalServiceError,
    MetaplanException,
    SerializationError,
    ServiceError,
    StateError,
    StoreError,
    ValidationError,
)

__all__ = [
    "CircuitBreaker",
    "CircuitOpenError",
    "CircuitState",
    "ConfigurationError",
    "ExternalServiceError",
    "MetaplanException",
    "SerializationError",
    "ServiceError",
    "StateError",
    "StoreError",
    "ValidationError",
]
