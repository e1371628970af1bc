"""Entity id generation."""

import uuid


def new_id() -> str:
    """Return a fresh opaque id (32 hex chars)."""
    return uuid.uuid4().hex
