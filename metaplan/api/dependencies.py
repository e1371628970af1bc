"""
FastAPI dependencies for Metaplan routes.

The PlannerRuntime lives on ``app.state.runtime`` (set by create_app).
"""

from __future__ import annotations

from fastapi import Depends, Request

from metaplan.core.session import PlannerSession
from metaplan.lib.logging import bind_user
from metaplan.services.runtime import PlannerRuntime


def get_runtime(request: Request) -> PlannerRuntime:
    runtime: PlannerRuntime = request.app.state.runtime
    return runtime


async def get_session(runtime: PlannerRuntime = Depends(get_runtime)) -> PlannerSession:
    """The active session; raises StateError (409) when nobody is logged in.

    Binds the session's user_id into the request's logging context, which
    the debounced write scheduled by this request inherits.
    """
    session = runtime.require_session()
    bind_user(session.user_id)
    return session
