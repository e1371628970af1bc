"""
Runtime configuration for Metaplan.

Everything is read from ``METAPLAN_*`` environment variables once at
startup. Missing variables fall back to defaults that run fully offline
(in-memory store, no AI key).

Variables:
    METAPLAN_DEV_MODE         "1" for console logs and /docs
    METAPLAN_ENVIRONMENT      development | production
    METAPLAN_SYNC_DELAY       debounce delay in seconds (default 1.5)
    METAPLAN_STORE            memory | http | sql | redis
    METAPLAN_STORE_URL        REST base URL, database URL or Redis URL
    METAPLAN_SESSION_FILE     where the logged-in identifier is kept
    METAPLAN_AI_API_KEY       enables the AI collaborator
    METAPLAN_AI_BASE_URL      generateContent API root
    METAPLAN_AI_BREAKDOWN_MODEL / METAPLAN_AI_INSPIRATION_MODEL
    METAPLAN_AI_TIMEOUT       seconds (default 30)
    METAPLAN_CORS_ORIGINS     comma separated origins
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from metaplan.lib.exceptions import ConfigurationError

STORE_BACKENDS: frozenset[str] = frozenset({"memory", "http", "sql", "redis"})

DEFAULT_SYNC_DELAY = 1.5
DEFAULT_AI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_BREAKDOWN_MODEL = "gemini-2.5-pro"
DEFAULT_INSPIRATION_MODEL = "gemini-2.5-flash"


def _float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e
    if value < 0:
        raise ConfigurationError(f"{name} must not be negative, got {value}")
    return value


@dataclass(frozen=True)
class Settings:
    """Resolved application settings."""

    dev_mode: bool = False
    environment: str = "development"
    sync_delay_seconds: float = DEFAULT_SYNC_DELAY
    store_backend: str = "memory"
    store_url: str | None = None
    session_file: Path = field(
        default_factory=lambda: Path.home() / ".metaplan" / "session.json"
    )
    ai_api_key: str | None = None
    ai_base_url: str = DEFAULT_AI_BASE_URL
    ai_breakdown_model: str = DEFAULT_BREAKDOWN_MODEL
    ai_inspiration_model: str = DEFAULT_INSPIRATION_MODEL
    ai_timeout_seconds: float = 30.0
    cors_origins: tuple[str, ...] = ()

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> Settings:
        """
        Build settings from the environment.

        Args:
            env: Mapping to read instead of os.environ (tests).

        Raises:
            ConfigurationError: On unparsable numbers, an unknown store
                backend, or a remote backend without METAPLAN_STORE_URL.
        """
        env = os.environ if env is None else env

        backend = env.get("METAPLAN_STORE", "memory").strip().lower() or "memory"
        if backend not in STORE_BACKENDS:
            raise ConfigurationError(
                f"METAPLAN_STORE must be one of {', '.join(sorted(STORE_BACKENDS))}, "
                f"got {backend!r}"
            )
        store_url = env.get("METAPLAN_STORE_URL") or None
        if backend != "memory" and not store_url:
            raise ConfigurationError(f"METAPLAN_STORE_URL is required for the {backend} store")

        session_file = env.get("METAPLAN_SESSION_FILE")
        cors_env = env.get("METAPLAN_CORS_ORIGINS", "")

        return cls(
            dev_mode=env.get("METAPLAN_DEV_MODE") == "1",
            environment=env.get("METAPLAN_ENVIRONMENT", "development"),
            sync_delay_seconds=_float(env, "METAPLAN_SYNC_DELAY", DEFAULT_SYNC_DELAY),
            store_backend=backend,
            store_url=store_url,
            session_file=(
                Path(session_file).expanduser()
                if session_file
                else Path.home() / ".metaplan" / "session.json"
            ),
            ai_api_key=env.get("METAPLAN_AI_API_KEY") or None,
            ai_base_url=env.get("METAPLAN_AI_BASE_URL", DEFAULT_AI_BASE_URL).rstrip("/"),
            ai_breakdown_model=env.get("METAPLAN_AI_BREAKDOWN_MODEL", DEFAULT_BREAKDOWN_MODEL),
            ai_inspiration_model=env.get(
                "METAPLAN_AI_INSPIRATION_MODEL", DEFAULT_INSPIRATION_MODEL
            ),
            ai_timeout_seconds=_float(env, "METAPLAN_AI_TIMEOUT", 30.0),
            cors_origins=tuple(
                origin.strip() for origin in cors_env.split(",") if origin.strip()
            ),
        )
