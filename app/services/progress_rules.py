"""Pure derivations over a progress snapshot: context keys, streaks and badges."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from app.constants import ACHIEVEMENT_BADGES
from app.models.domain import plan_selection
from app.models.schemas import Badge, CustomPlanConfig


def resolve_context_key(selected_plan_id: str, custom_plan_config: Optional[CustomPlanConfig] = None) -> str:
    """Key of the ``all_progress`` bucket for a plan, e.g. ``whole_bible`` or ``custom_Ester``."""
    return plan_selection(selected_plan_id, custom_plan_config).context_key


def calculate_streak(completed_ids: Iterable[int]) -> int:
    """Length of the consecutive run of plan days ending at the highest completed day.

    Plan days, not calendar days: completing days 5 and 6 is a streak of 2 no
    matter when they were ticked.
    """
    ordered = sorted(set(completed_ids))
    if not ordered:
        return 0

    streak = 1
    for index in range(len(ordered) - 1, 0, -1):
        if ordered[index] != ordered[index - 1] + 1:
            break
        streak += 1
    return streak


@dataclass
class BadgeEvaluation:
    unlocked: List[str]
    newly_unlocked: List[str] = field(default_factory=list)


def evaluate_badges(
    streak: int,
    unlocked: Sequence[str],
    badges: Sequence[Badge] = ACHIEVEMENT_BADGES,
) -> BadgeEvaluation:
    """Add every badge whose threshold the streak has reached. Badges are never taken away."""
    already = list(dict.fromkeys(unlocked))
    newly = [
        badge.id
        for badge in badges
        if streak >= badge.days_required and badge.id not in already
    ]
    return BadgeEvaluation(unlocked=already + newly, newly_unlocked=newly)
