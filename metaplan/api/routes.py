"""
REST API routes for Metaplan.

Endpoints (all under /api/v1):
- /session               login, logout, status, navigation
- /today                 daily projection (with carried-over tasks)
- /tasks                 add, move, cycle priority, toggle, edit, delete
- /goals                 add, update, delete, promote, copy-to-today, breakdown
- /values                add, update, delete, promote
- /inspiration           refresh the daily quote
- /sync/flush            write the document now

Every mutation goes through PlannerSession.apply(), so the debounced
write-back is scheduled exactly as for any other edit. Unknown ids and
blank text are no-ops and still return 200 with the current document.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from metaplan.api.dependencies import get_runtime, get_session
from metaplan.api.schemas import (
    BreakdownResponse,
    CreateGoalRequest,
    CreateTaskRequest,
    CreateValueRequest,
    DailyItemOut,
    DocumentResponse,
    GoalOut,
    GoalsResponse,
    InspirationResponse,
    LoginRequest,
    MoveTaskRequest,
    NavigationState,
    NavigationUpdate,
    SessionStatus,
    TodayResponse,
    UpdateGoalRequest,
    UpdateTaskRequest,
    UpdateValueRequest,
)
from metaplan.core import goals as goal_ops
from metaplan.core import ordering
from metaplan.core.session import PlannerSession
from metaplan.services.runtime import PlannerRuntime

router = APIRouter(prefix="/api/v1")


def _document(session: PlannerSession) -> DocumentResponse:
    return DocumentResponse.from_data(session.data)


def _navigation(session: PlannerSession) -> NavigationState:
    return NavigationState(
        selected_date=session.selected_date,
        week_id=session.week_id,
        month_id=session.month_id,
        year_id=session.year_id,
        active_priority=session.active_priority,
        active_category=session.active_category,
    )


def _status(runtime: PlannerRuntime) -> SessionStatus:
    session = runtime.session
    return SessionStatus(
        user_id=session.user_id if session else None,
        sync_status=runtime.sync.status.value,
        loaded=runtime.sync.loaded,
        pending_write=runtime.sync.has_pending_write,
        last_synced=runtime.sync.last_synced,
        navigation=_navigation(session) if session else None,
    )


# =============================================================================
# Health & session
# =============================================================================


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/session", response_model=SessionStatus)
async def session_status(runtime: PlannerRuntime = Depends(get_runtime)) -> SessionStatus:
    return _status(runtime)


@router.post("/session/login", response_model=SessionStatus)
async def login(
    body: LoginRequest, runtime: PlannerRuntime = Depends(get_runtime)
) -> SessionStatus:
    await runtime.login(body.user_id)
    return _status(runtime)


@router.post("/session/logout", response_model=SessionStatus)
async def logout(runtime: PlannerRuntime = Depends(get_runtime)) -> SessionStatus:
    await runtime.logout()
    return _status(runtime)


@router.put("/session/navigation", response_model=NavigationState)
async def navigate(
    body: NavigationUpdate, session: PlannerSession = Depends(get_session)
) -> NavigationState:
    if body.selected_date is not None:
        session.select_date(body.selected_date)
    if body.today:
        session.go_today()
    if body.shift_day:
        session.shift_day(body.shift_day)
    if body.shift_month:
        session.shift_month(body.shift_month)
    if body.shift_year:
        session.shift_year(body.shift_year)
    if body.active_priority is not None:
        session.set_active_priority(body.active_priority)
    if body.active_category is not None:
        session.set_active_category(body.active_category)
    return _navigation(session)


# =============================================================================
# Daily view & tasks
# =============================================================================


@router.get("/today", response_model=TodayResponse)
async def today(
    runtime: PlannerRuntime = Depends(get_runtime),
    session: PlannerSession = Depends(get_session),
) -> TodayResponse:
    return TodayResponse(
        selected_date=session.selected_date,
        inspiration=runtime.inspiration,
        items=[DailyItemOut.from_item(item) for item in session.daily_tasks()],
    )


@router.get("/document", response_model=DocumentResponse)
async def document(session: PlannerSession = Depends(get_session)) -> DocumentResponse:
    return _document(session)


@router.post("/tasks", response_model=DocumentResponse)
async def create_task(
    body: CreateTaskRequest, session: PlannerSession = Depends(get_session)
) -> DocumentResponse:
    session.add_task(body.text, body.priority)
    return _document(session)


@router.post("/tasks/{task_id}/move", response_model=DocumentResponse)
async def move_task(
    task_id: str, body: MoveTaskRequest, session: PlannerSession = Depends(get_session)
) -> DocumentResponse:
    session.apply(ordering.move_task, task_id, body.direction)
    return _document(session)


@router.post("/tasks/{task_id}/cycle", response_model=DocumentResponse)
async def cycle_task_priority(
    task_id: str, session: PlannerSession = Depends(get_session)
) -> DocumentResponse:
    session.apply(ordering.cycle_priority, task_id)
    return _document(session)


@router.post("/tasks/{task_id}/toggle", response_model=DocumentResponse)
async def toggle_task(
    task_id: str, session: PlannerSession = Depends(get_session)
) -> DocumentResponse:
    session.apply(ordering.toggle_task, task_id)
    return _document(session)


@router.patch("/tasks/{task_id}", response_model=DocumentResponse)
async def update_task(
    task_id: str, body: UpdateTaskRequest, session: PlannerSession = Depends(get_session)
) -> DocumentResponse:
    if body.text is not None:
        session.apply(ordering.edit_task_text, task_id, body.text)
    if body.memo is not None:
        session.apply(ordering.set_task_memo, task_id, body.memo)
    return _document(session)


@router.delete("/tasks/{task_id}", response_model=DocumentResponse)
async def delete_task(
    task_id: str, session: PlannerSession = Depends(get_session)
) -> DocumentResponse:
    session.apply(ordering.delete_task, task_id)
    return _document(session)


# =============================================================================
# Goals
# =============================================================================


@router.get("/goals", response_model=GoalsResponse)
async def list_goals(session: PlannerSession = Depends(get_session)) -> GoalsResponse:
    return GoalsResponse(
        weekly=[GoalOut.from_entity(g) for g in session.weekly_goals()],
        monthly=[GoalOut.from_entity(g) for g in session.monthly_goals()],
        yearly=[GoalOut.from_entity(g) for g in session.yearly_goals()],
    )


@router.post("/goals", response_model=DocumentResponse)
async def create_goal(
    body: CreateGoalRequest, session: PlannerSession = Depends(get_session)
) -> DocumentResponse:
    session.add_goal(body.type, body.text)
    return _document(session)


@router.patch("/goals/{goal_id}", response_model=DocumentResponse)
async def update_goal(
    goal_id: str, body: UpdateGoalRequest, session: PlannerSession = Depends(get_session)
) -> DocumentResponse:
    if body.text is not None:
        session.apply(goal_ops.edit_goal_text, goal_id, body.text)
    if body.memo is not None:
        session.apply(goal_ops.set_goal_memo, goal_id, body.memo)
    if body.progress is not None:
        session.apply(goal_ops.set_goal_progress, goal_id, body.progress)
    if body.progress_delta is not None:
        session.apply(goal_ops.adjust_goal_progress, goal_id, body.progress_delta)
    if body.completed is not None:
        session.apply(goal_ops.set_goal_completed, goal_id, body.completed)
    return _document(session)


@router.delete("/goals/{goal_id}", response_model=DocumentResponse)
async def delete_goal(
    goal_id: str, session: PlannerSession = Depends(get_session)
) -> DocumentResponse:
    session.apply(goal_ops.delete_goal, goal_id)
    return _document(session)


@router.post("/goals/{goal_id}/promote", response_model=DocumentResponse)
async def promote_goal(
    goal_id: str, session: PlannerSession = Depends(get_session)
) -> DocumentResponse:
    session.promote_goal(goal_id)
    return _document(session)


@router.post("/goals/{goal_id}/copy-to-today", response_model=DocumentResponse)
async def copy_goal_to_today(
    goal_id: str, session: PlannerSession = Depends(get_session)
) -> DocumentResponse:
    session.copy_goal_to_today(goal_id)
    return _document(session)


@router.post("/goals/{goal_id}/breakdown", response_model=BreakdownResponse)
async def breakdown_goal(
    goal_id: str, runtime: PlannerRuntime = Depends(get_runtime)
) -> BreakdownResponse:
    added = await runtime.breakdown_goal(goal_id)
    return BreakdownResponse(added=added, document=_document(runtime.require_session()))


# =============================================================================
# Core values
# =============================================================================


@router.post("/values", response_model=DocumentResponse)
async def create_value(
    body: CreateValueRequest, session: PlannerSession = Depends(get_session)
) -> DocumentResponse:
    session.add_core_value(body.text, body.category)
    return _document(session)


@router.patch("/values/{value_id}", response_model=DocumentResponse)
async def update_value(
    value_id: str, body: UpdateValueRequest, session: PlannerSession = Depends(get_session)
) -> DocumentResponse:
    if body.text is not None:
        session.apply(goal_ops.edit_core_value_text, value_id, body.text)
    if body.progress is not None:
        session.apply(goal_ops.set_value_progress, value_id, body.progress)
    if body.progress_delta is not None:
        session.apply(goal_ops.adjust_value_progress, value_id, body.progress_delta)
    return _document(session)


@router.delete("/values/{value_id}", response_model=DocumentResponse)
async def delete_value(
    value_id: str, session: PlannerSession = Depends(get_session)
) -> DocumentResponse:
    session.apply(goal_ops.delete_core_value, value_id)
    return _document(session)


@router.post("/values/{value_id}/promote", response_model=DocumentResponse)
async def promote_value(
    value_id: str, session: PlannerSession = Depends(get_session)
) -> DocumentResponse:
    session.promote_core_value(value_id)
    return _document(session)


# =============================================================================
# Inspiration & sync
# =============================================================================


@router.post("/inspiration", response_model=InspirationResponse)
async def refresh_inspiration(
    runtime: PlannerRuntime = Depends(get_runtime),
) -> InspirationResponse:
    return InspirationResponse(inspiration=await runtime.refresh_inspiration())


@router.post("/sync/flush", response_model=SessionStatus)
async def flush(runtime: PlannerRuntime = Depends(get_runtime)) -> SessionStatus:
    runtime.require_session()
    await runtime.sync.flush()
    return _status(runtime)
