"""
Application runtime: wires identity, session, sync and the AI assistant.

There is at most one active PlannerSession per runtime. Logging in
builds a session, remembers the identifier locally and loads the remote
document; logging out drops the pending write, forgets the identifier and
resets local data. The remote record is never deleted.
"""

from __future__ import annotations

import logging

from metaplan.config.settings import Settings
from metaplan.core.goals import find_goal
from metaplan.core.session import PlannerSession
from metaplan.lib.exceptions import StateError
from metaplan.lib.logging import bind_user, unbind_user
from metaplan.services.ai import PlanningAssistant
from metaplan.services.identity import IdentityStore, normalize_user_id
from metaplan.services.stores import RemoteStore, build_store
from metaplan.services.sync import SyncController

logger = logging.getLogger(__name__)


class PlannerRuntime:
    """
    Owns the active session and its collaborators.

    Args:
        store: RemoteStore for documents.
        identity: Where the logged-in identifier is remembered.
        assistant: AI collaborator.
        sync_delay: Debounce delay for write-back, in seconds.
        today: Override for "today" in new sessions (tests).
    """

    def __init__(
        self,
        store: RemoteStore,
        identity: IdentityStore,
        assistant: PlanningAssistant,
        sync_delay: float = 1.5,
        today: str | None = None,
    ) -> None:
        self.store = store
        self.identity = identity
        self.assistant = assistant
        self.sync = SyncController(store, delay=sync_delay)
        self.inspiration: str = ""
        self._today = today
        self._session: PlannerSession | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> PlannerRuntime:
        return cls(
            store=build_store(settings),
            identity=IdentityStore(settings.session_file),
            assistant=PlanningAssistant.from_settings(settings),
            sync_delay=settings.sync_delay_seconds,
        )

    @property
    def session(self) -> PlannerSession | None:
        return self._session

    def require_session(self) -> PlannerSession:
        if self._session is None:
            raise StateError("No active session; log in first")
        return self._session

    async def login(self, raw_user_id: str) -> PlannerSession | None:
        """
        Start a session for ``raw_user_id``.

        Blank identifiers are ignored (returns None). Logging in as the
        already active user returns the existing session.
        """
        user_id = normalize_user_id(raw_user_id)
        if user_id is None:
            return None
        if self._session is not None and self._session.user_id == user_id:
            return self._session
        if self._session is not None:
            await self.logout()

        session = PlannerSession(user_id, today=self._today)
        self._session = session
        self.identity.save(user_id)
        bind_user(user_id)
        logger.info("Session started for %s", user_id)

        await self.sync.start(session)
        await self.refresh_inspiration()
        return session

    async def resume(self) -> PlannerSession | None:
        """Log back in with the remembered identifier, if any."""
        user_id = self.identity.load()
        if user_id is None:
            return None
        return await self.login(user_id)

    async def logout(self) -> None:
        session = self._session
        self.sync.stop()
        self.identity.clear()
        unbind_user()
        self.inspiration = ""
        self._session = None
        if session is not None:
            session.close()
            logger.info("Session ended for %s", session.user_id)

    async def refresh_inspiration(self) -> str:
        session = self.require_session()
        values = [v.text for v in session.data.core_values]
        self.inspiration = await self.assistant.daily_inspiration(values)
        return self.inspiration

    async def breakdown_goal(self, goal_id: str) -> int:
        """Ask the AI to split a goal into tasks on the selected day.

        Returns the number of tasks added (0 on failure or unknown goal).
        """
        session = self.require_session()
        goal = find_goal(session.data, goal_id)
        if goal is None:
            return 0
        items = await self.assistant.breakdown_goal(goal.text)
        if not items:
            return 0
        before = len(session.data.tasks)
        session.apply_breakdown(items)
        return len(session.data.tasks) - before

    async def shutdown(self) -> None:
        """Flush pending work and release clients."""
        if self._session is not None and self.sync.has_pending_write:
            await self.sync.flush()
        await self.assistant.aclose()
        closer = getattr(self.store, "aclose", None)
        if closer is not None:
            await closer()
