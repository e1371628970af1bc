"""
Custom exception hierarchy for Metaplan.

All exceptions inherit from MetaplanException, so callers can catch
everything Metaplan raises while still being able to handle a single
subsystem's failures.

Which layer handles what:
- Validation no-ops (empty text, moves past a bucket edge) never raise.
- StoreError / SerializationError are caught by the SyncController.
- ExternalServiceError is caught inside the AI collaborator.
- StateError surfaces to the API as 409.
"""

from __future__ import annotations


class MetaplanException(Exception):
    """Base exception for all Metaplan errors."""


class ConfigurationError(MetaplanException):
    """Invalid environment configuration or startup failures."""


class ValidationError(MetaplanException):
    """Input validation or identifier format failures."""


class SerializationError(MetaplanException):
    """The persisted AppData payload could not be encoded or decoded."""


class StateError(MetaplanException):
    """Operation requires state that is missing (e.g. no active session)."""


class ServiceError(MetaplanException):
    """Failures talking to something outside the process."""


class StoreError(ServiceError):
    """Remote store lookup, create or replace failed."""


class ExternalServiceError(ServiceError):
    """AI endpoint failures (HTTP errors, bad payloads, open circuit)."""
