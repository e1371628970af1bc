"""
Local persistence of the session identifier.

The identifier is the only credential: whoever knows it can load and
overwrite that user's document. It is kept in a small JSON file so the
next run resumes the same session, the way a browser keeps it in local
storage.
"""

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

USER_ID_KEY = "metaplan_user_id"


def normalize_user_id(raw: str | None) -> str | None:
    """Trim an identifier; blank input yields None (no login)."""
    if raw is None:
        return None
    user_id = raw.strip()
    return user_id or None


class IdentityStore:
    """Reads and writes the remembered identifier at ``path``."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> str | None:
        """Return the remembered identifier, or None if absent/unreadable."""
        if not self.path.exists():
            return None
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable session file %s: %s", self.path, e)
            return None
        value = data.get(USER_ID_KEY) if isinstance(data, dict) else None
        return normalize_user_id(value) if isinstance(value, str) else None

    def save(self, user_id: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump({USER_ID_KEY: user_id}, f)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
