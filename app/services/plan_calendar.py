"""Date and chapter arithmetic for reading plans."""
from __future__ import annotations

import math
from datetime import date, timedelta
from typing import Dict, List, Optional, Tuple

from app.constants import BIBLE_BOOKS, BOOK_CHAPTERS, PLANS_BY_ID, READING_PLANS
from app.models.domain import CustomPlan, PlanSelection
from app.models.schemas import ProgressSummary, ReadingAssignment, UserProgress


def plan_day_for_date(target: date, plan_start_date: date) -> int:
    """1-based plan day for ``target``; <= 0 before the start, past the end after it."""
    return (target - plan_start_date).days + 1


def total_days(selection: PlanSelection) -> int:
    if isinstance(selection, CustomPlan):
        return selection.days
    plan = PLANS_BY_ID.get(selection.plan_id, READING_PLANS[0])
    # "custom" without a configured book falls back to the whole Bible length
    return plan.days or READING_PLANS[0].days


def _books_for(selection: PlanSelection) -> List[Dict[str, object]]:
    if isinstance(selection, CustomPlan):
        return [{"name": selection.book_name, "chapters": BOOK_CHAPTERS.get(selection.book_name, 1)}]
    plan = PLANS_BY_ID.get(selection.plan_id)
    if plan is None or not plan.books:
        return BIBLE_BOOKS
    return [book for book in BIBLE_BOOKS if book["name"] in plan.books]


def _locate(cumulative_chapter: int, books: List[Dict[str, object]]) -> Tuple[str, int]:
    remaining = cumulative_chapter
    for book in books:
        if remaining <= book["chapters"]:
            return book["name"], remaining
        remaining -= book["chapters"]
    last = books[-1]
    return last["name"], last["chapters"]


def entry_for_day(day_number: int, selection: PlanSelection, plan_start_date: date) -> ReadingAssignment:
    """Chapters due on ``day_number``, spreading the plan's chapters evenly over its days.

    When a day crosses a book boundary, ``reading_range`` names the whole span
    (e.g. "Rute 4 - 1 Samuel 2") while ``book_name`` and ``chapters_to_read``
    only describe the first chapter of the first book.
    """
    max_days = total_days(selection)
    safe_day = max(1, min(max_days, day_number))

    books = _books_for(selection)
    total_chapters = sum(book["chapters"] for book in books)
    per_day = total_chapters / max_days

    start = min(math.floor((safe_day - 1) * per_day) + 1, total_chapters)
    end = max(min(math.floor(safe_day * per_day), total_chapters), start)

    start_book, start_chapter = _locate(start, books)
    end_book, end_chapter = _locate(end, books)

    if start_book == end_book:
        chapters = list(range(start_chapter, end_chapter + 1))
        reading_range = f"{start_book} {start_chapter}-{end_chapter}"
    else:
        chapters = [start_chapter]
        reading_range = f"{start_book} {start_chapter} - {end_book} {end_chapter}"

    return ReadingAssignment(
        day_number=safe_day,
        book_name=start_book,
        chapters_to_read=chapters,
        reading_range=reading_range,
        scheduled_date=plan_start_date + timedelta(days=safe_day - 1),
    )


def progress_summary(progress: UserProgress, today: Optional[date] = None) -> ProgressSummary:
    selection = progress.plan_selection
    days = total_days(selection)
    completed_count = len([day for day in progress.completed_ids if day <= days])
    percentage = round(completed_count / days * 100) if days else 0

    return ProgressSummary(
        context_key=selection.context_key,
        total_days=days,
        completed_count=completed_count,
        percent_complete=min(100, max(0, percentage)),
        today_day_number=plan_day_for_date(today or date.today(), progress.plan_start_date),
        streak=progress.streak,
        unlocked_badges=list(progress.unlocked_badges),
    )
