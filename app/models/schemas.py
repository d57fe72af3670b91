"""Pydantic models for progress snapshots and request/response schemas."""
from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from app.models.domain import WHOLE_BIBLE_PLAN_ID, PlanSelection, plan_selection


class CustomPlanConfig(BaseModel):
    """Book and pacing chosen for the custom plan."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    # Older rows were written with camelCase keys
    book_name: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("book_name", "bookName"),
        description="Book read by the custom plan, e.g. 'Ester'",
    )
    days: int = Field(..., ge=1, description="Number of plan days to spread the book over")


class Badge(BaseModel):
    """Achievement unlocked by reaching a streak threshold."""
    id: str
    label: str
    description: str
    days_required: int = Field(..., ge=1)
    icon_name: str


class ReadingPlan(BaseModel):
    """Static reading plan definition."""
    id: str
    label: str
    description: str
    days: int = Field(..., ge=0, description="Plan length; 0 means the length is configured per user")
    books: List[str] = Field(default_factory=list, description="Books covered; empty means every book")


def default_plan_start(today: Optional[date] = None) -> date:
    """Plans start on January 1st of the current year unless the user says otherwise."""
    today = today or date.today()
    return date(today.year, 1, 1)


class UserProgress(BaseModel):
    """Complete snapshot of one user's reading journey.

    ``completed_ids`` is always the ``all_progress`` bucket of the current
    context key; validation re-derives it so a stored blob can never carry a
    stale view.
    """
    model_config = ConfigDict(extra="ignore")

    completed_ids: List[int] = Field(default_factory=list)
    all_progress: Dict[str, List[int]] = Field(default_factory=dict)
    notes: Dict[int, str] = Field(default_factory=dict)
    last_access_date: Optional[datetime] = None
    streak: int = Field(default=0, ge=0)
    unlocked_badges: List[str] = Field(default_factory=list)
    plan_start_date: date = Field(default_factory=default_plan_start)
    selected_plan_id: str = WHOLE_BIBLE_PLAN_ID
    custom_plan_config: Optional[CustomPlanConfig] = None

    @field_validator("completed_ids")
    @classmethod
    def _dedupe_ids(cls, value: List[int]) -> List[int]:
        return sorted(set(value))

    @field_validator("all_progress")
    @classmethod
    def _dedupe_buckets(cls, value: Dict[str, List[int]]) -> Dict[str, List[int]]:
        return {key: sorted(set(ids)) for key, ids in value.items()}

    @field_validator("unlocked_badges")
    @classmethod
    def _dedupe_badges(cls, value: List[str]) -> List[str]:
        return list(dict.fromkeys(value))

    @model_validator(mode="after")
    def _derive_completed_ids(self) -> "UserProgress":
        key = self.context_key
        if key not in self.all_progress and self.completed_ids:
            # Blobs written before per-context buckets existed only carry completed_ids
            self.all_progress[key] = list(self.completed_ids)
        self.completed_ids = list(self.all_progress.get(key, []))
        return self

    @property
    def plan_selection(self) -> PlanSelection:
        return plan_selection(self.selected_plan_id, self.custom_plan_config)

    @property
    def context_key(self) -> str:
        return self.plan_selection.context_key


class NoteUpdate(BaseModel):
    """Request model for saving a day's note."""
    note: str = Field(..., min_length=1, max_length=5000, description="Free-text reflection for the day")


class StartDateUpdate(BaseModel):
    """Request model for moving day 1 of the plan."""
    plan_start_date: date


class SelectedPlanUpdate(BaseModel):
    """Request model for switching the active plan."""
    plan_id: str = Field(..., min_length=1)


class ReadingAssignment(BaseModel):
    """Chapters due on a given plan day."""
    day_number: int
    book_name: str
    chapters_to_read: List[int]
    reading_range: str
    scheduled_date: date


class ProgressSummary(BaseModel):
    """Derived figures shown on the stats screen."""
    context_key: str
    total_days: int
    completed_count: int
    percent_complete: int
    today_day_number: int
    streak: int
    unlocked_badges: List[str]


class HealthCheck(BaseModel):
    """Health check response model."""
    status: str
    timestamp: datetime
    database_connected: bool
    cache_connected: bool
