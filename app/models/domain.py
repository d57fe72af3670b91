"""Value types shared by the progress core."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

GUEST_PREFIX = "guest_"
WHOLE_BIBLE_PLAN_ID = "whole_bible"
CUSTOM_PLAN_ID = "custom"


@dataclass(frozen=True)
class Identity:
    """Who a snapshot belongs to. Ids starting with ``guest_`` never touch the remote store."""

    user_id: str

    @property
    def is_guest(self) -> bool:
        return self.user_id.startswith(GUEST_PREFIX)


@dataclass(frozen=True)
class WholeBible:
    plan_id: str = WHOLE_BIBLE_PLAN_ID

    @property
    def context_key(self) -> str:
        return self.plan_id


@dataclass(frozen=True)
class FixedPlan:
    plan_id: str

    @property
    def context_key(self) -> str:
        return self.plan_id


@dataclass(frozen=True)
class CustomPlan:
    book_name: str
    days: int
    plan_id: str = CUSTOM_PLAN_ID

    @property
    def context_key(self) -> str:
        return f"{CUSTOM_PLAN_ID}_{self.book_name}"


PlanSelection = Union[WholeBible, FixedPlan, CustomPlan]


def plan_selection(selected_plan_id: str, custom_plan_config: Optional[object] = None) -> PlanSelection:
    """Turn the stored ``(selected_plan_id, custom_plan_config)`` pair into a tagged selection.

    ``custom_plan_config`` is anything exposing ``book_name`` and ``days``. A
    custom plan id without a config stays a plain ``FixedPlan("custom")``.
    """
    if selected_plan_id == CUSTOM_PLAN_ID and custom_plan_config is not None:
        return CustomPlan(book_name=custom_plan_config.book_name, days=custom_plan_config.days)
    if selected_plan_id == WHOLE_BIBLE_PLAN_ID:
        return WholeBible()
    return FixedPlan(plan_id=selected_plan_id)
