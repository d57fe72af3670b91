"""Routes exposing the reading progress load and mutation entry points."""
from fastapi import APIRouter, Depends, Path, Request, Response

from app.auth import clear_session_cookies, get_identity_dependency
from app.constants import BOOK_CHAPTERS, PLANS_BY_ID
from app.models.domain import Identity
from app.models.schemas import (
    CustomPlanConfig,
    NoteUpdate,
    ProgressSummary,
    ReadingAssignment,
    SelectedPlanUpdate,
    StartDateUpdate,
    UserProgress,
)
from app.services import plan_calendar
from app.services.progress_service import ProgressService
from app.utils.exceptions import ValidationError

router = APIRouter(prefix="/api/progress", tags=["reading-progress"])


def get_progress_service(request: Request) -> ProgressService:
    return request.app.state.progress_service


@router.get("", response_model=UserProgress)
async def load_progress(
    identity: Identity = Depends(get_identity_dependency),
    service: ProgressService = Depends(get_progress_service),
):
    return await service.load(identity)


@router.get("/summary", response_model=ProgressSummary)
async def get_progress_summary(
    identity: Identity = Depends(get_identity_dependency),
    service: ProgressService = Depends(get_progress_service),
):
    progress = await service.load(identity)
    return plan_calendar.progress_summary(progress)


@router.get("/today", response_model=ReadingAssignment)
async def get_today_reading(
    identity: Identity = Depends(get_identity_dependency),
    service: ProgressService = Depends(get_progress_service),
):
    progress = await service.load(identity)
    summary = plan_calendar.progress_summary(progress)
    return plan_calendar.entry_for_day(
        summary.today_day_number, progress.plan_selection, progress.plan_start_date
    )


@router.post("/days/{day_id}/toggle", response_model=UserProgress)
async def toggle_day(
    day_id: int = Path(..., ge=1),
    identity: Identity = Depends(get_identity_dependency),
    service: ProgressService = Depends(get_progress_service),
):
    progress = await service.current(identity)
    return await service.toggle_day_completion(progress, day_id, identity)


@router.put("/days/{day_id}/note", response_model=UserProgress)
async def save_note(
    payload: NoteUpdate,
    day_id: int = Path(..., ge=1),
    identity: Identity = Depends(get_identity_dependency),
    service: ProgressService = Depends(get_progress_service),
):
    progress = await service.current(identity)
    return await service.save_day_note(progress, day_id, payload.note, identity)


@router.delete("/days/{day_id}/note", response_model=UserProgress)
async def delete_note(
    day_id: int = Path(..., ge=1),
    identity: Identity = Depends(get_identity_dependency),
    service: ProgressService = Depends(get_progress_service),
):
    progress = await service.current(identity)
    return await service.delete_day_note(progress, day_id, identity)


@router.put("/start-date", response_model=UserProgress)
async def update_start_date(
    payload: StartDateUpdate,
    identity: Identity = Depends(get_identity_dependency),
    service: ProgressService = Depends(get_progress_service),
):
    progress = await service.current(identity)
    return await service.update_plan_start_date(progress, payload.plan_start_date, identity)


@router.put("/plan", response_model=UserProgress)
async def update_plan(
    payload: SelectedPlanUpdate,
    identity: Identity = Depends(get_identity_dependency),
    service: ProgressService = Depends(get_progress_service),
):
    if payload.plan_id not in PLANS_BY_ID:
        raise ValidationError(f"Unknown reading plan: {payload.plan_id}")
    progress = await service.current(identity)
    return await service.update_selected_plan(progress, payload.plan_id, identity)


@router.put("/custom-plan", response_model=UserProgress)
async def update_custom_plan(
    payload: CustomPlanConfig,
    identity: Identity = Depends(get_identity_dependency),
    service: ProgressService = Depends(get_progress_service),
):
    if payload.book_name not in BOOK_CHAPTERS:
        raise ValidationError(f"Unknown book: {payload.book_name}")
    progress = await service.current(identity)
    return await service.update_custom_plan_config(progress, payload, identity)


@router.post("/logout", status_code=204)
async def logout():
    response = Response(status_code=204)
    clear_session_cookies(response)
    return response
