"""PostgreSQL-backed source of truth for authenticated users' progress."""
import json
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

import psycopg2
from pydantic import ValidationError as PydanticValidationError

from app.database import Database
from app.models.domain import WHOLE_BIBLE_PLAN_ID
from app.models.schemas import CustomPlanConfig, UserProgress
from app.services.progress_rules import calculate_streak, resolve_context_key
from app.utils.exceptions import RemoteFetchCancelled, RemoteStoreError

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("plan_start_date", "selected_plan_id", "streak", "custom_plan_config")


class RemoteProgressStore:
    """Profiles, per-day entries and badges.

    Entries are unique on ``(user_id, day_id, context_key)`` and every write
    touches only the column it owns, so toggling completion keeps the note and
    saving a note keeps ``completed_at``.
    """

    def __init__(self, database: Database):
        self._db = database

    @staticmethod
    def _check_cancelled(cancel_event: Optional[threading.Event]) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise RemoteFetchCancelled("Remote fetch abandoned by caller")

    @staticmethod
    def _ensure_profile(cur, user_id: str) -> None:
        cur.execute(
            "INSERT INTO profiles (id) VALUES (%s) ON CONFLICT (id) DO NOTHING",
            (user_id,),
        )

    @staticmethod
    def _parse_custom_config(raw: Any) -> Optional[CustomPlanConfig]:
        if not raw:
            return None
        if isinstance(raw, str):
            raw = json.loads(raw)
        return CustomPlanConfig.model_validate(raw)

    def fetch_snapshot(
        self,
        user_id: str,
        fallback_custom_config: Optional[CustomPlanConfig] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> UserProgress:
        """Rebuild a full snapshot from the profile, every entry of every context and the badges."""
        try:
            with self._db.connection() as conn:
                with conn.cursor() as cur:
                    self._check_cancelled(cancel_event)
                    cur.execute(
                        """
                        SELECT plan_start_date, selected_plan_id, streak, custom_plan_config
                        FROM profiles
                        WHERE id = %s
                        """,
                        (user_id,),
                    )
                    profile = cur.fetchone()

                    self._check_cancelled(cancel_event)
                    cur.execute(
                        """
                        SELECT day_id, completed_at, note, context_key
                        FROM user_daily_entries
                        WHERE user_id = %s
                        ORDER BY updated_at ASC, day_id ASC
                        """,
                        (user_id,),
                    )
                    entries = cur.fetchall()

                    self._check_cancelled(cancel_event)
                    cur.execute(
                        "SELECT badge_id FROM user_badges WHERE user_id = %s ORDER BY unlocked_at ASC",
                        (user_id,),
                    )
                    badges = cur.fetchall()
        except psycopg2.Error as e:
            raise RemoteStoreError(f"Failed to fetch progress for {user_id}: {e}") from e

        try:
            return self._build_snapshot(profile, entries, badges, fallback_custom_config)
        except (PydanticValidationError, ValueError, KeyError, TypeError) as e:
            raise RemoteStoreError(f"Malformed progress rows for {user_id}: {e}") from e

    @classmethod
    def _build_snapshot(
        cls,
        profile: Optional[Dict[str, Any]],
        entries: Iterable[Dict[str, Any]],
        badges: Iterable[Dict[str, Any]],
        fallback_custom_config: Optional[CustomPlanConfig],
    ) -> UserProgress:
        all_progress: Dict[str, List[int]] = {}
        notes: Dict[int, str] = {}

        for entry in entries:
            day_id = int(entry["day_id"])
            if entry.get("note"):
                notes[day_id] = entry["note"]
            if entry.get("completed_at"):
                # Legacy rows predate context keys
                context = entry.get("context_key") or WHOLE_BIBLE_PLAN_ID
                all_progress.setdefault(context, []).append(day_id)

        profile = profile or {}
        custom_config = cls._parse_custom_config(profile.get("custom_plan_config")) or fallback_custom_config
        selected_plan_id = profile.get("selected_plan_id") or WHOLE_BIBLE_PLAN_ID
        completed_ids = all_progress.get(resolve_context_key(selected_plan_id, custom_config), [])

        snapshot: Dict[str, Any] = {
            "completed_ids": completed_ids,
            "all_progress": all_progress,
            "notes": notes,
            "last_access_date": datetime.now(timezone.utc),
            "streak": calculate_streak(completed_ids),
            "unlocked_badges": [row["badge_id"] for row in badges],
            "selected_plan_id": selected_plan_id,
            "custom_plan_config": custom_config,
        }
        if profile.get("plan_start_date"):
            snapshot["plan_start_date"] = profile["plan_start_date"]
        return UserProgress.model_validate(snapshot)

    def write_completion(self, user_id: str, day_id: int, context_key: str, completed: bool) -> None:
        try:
            with self._db.connection() as conn:
                with conn.cursor() as cur:
                    self._ensure_profile(cur, user_id)
                    if completed:
                        cur.execute(
                            """
                            INSERT INTO user_daily_entries (user_id, day_id, context_key, completed_at)
                            VALUES (%s, %s, %s, CURRENT_TIMESTAMP)
                            ON CONFLICT (user_id, day_id, context_key)
                            DO UPDATE SET completed_at = EXCLUDED.completed_at,
                                          updated_at = CURRENT_TIMESTAMP
                            """,
                            (user_id, day_id, context_key),
                        )
                    else:
                        cur.execute(
                            """
                            UPDATE user_daily_entries
                            SET completed_at = NULL, updated_at = CURRENT_TIMESTAMP
                            WHERE user_id = %s AND day_id = %s AND context_key = %s
                            """,
                            (user_id, day_id, context_key),
                        )
                    conn.commit()
        except psycopg2.Error as e:
            raise RemoteStoreError(f"Failed to write completion for {user_id} day {day_id}: {e}") from e

    def write_note(self, user_id: str, day_id: int, context_key: str, note: Optional[str]) -> None:
        """Save or clear the day's note.

        Notes are per day, not per plan: every context row of the day gets the
        same value, so no older copy can resurface on the next fetch.
        """
        try:
            with self._db.connection() as conn:
                with conn.cursor() as cur:
                    self._ensure_profile(cur, user_id)
                    cur.execute(
                        """
                        INSERT INTO user_daily_entries (user_id, day_id, context_key, note)
                        VALUES (%s, %s, %s, %s)
                        ON CONFLICT (user_id, day_id, context_key)
                        DO UPDATE SET note = EXCLUDED.note,
                                      updated_at = CURRENT_TIMESTAMP
                        """,
                        (user_id, day_id, context_key, note),
                    )
                    cur.execute(
                        """
                        UPDATE user_daily_entries
                        SET note = %s, updated_at = CURRENT_TIMESTAMP
                        WHERE user_id = %s AND day_id = %s AND context_key <> %s
                        """,
                        (note, user_id, day_id, context_key),
                    )
                    conn.commit()
        except psycopg2.Error as e:
            raise RemoteStoreError(f"Failed to write note for {user_id} day {day_id}: {e}") from e

    def write_profile(self, user_id: str, **fields: Any) -> None:
        """Upsert only the given profile columns, creating the row if needed."""
        unknown = set(fields) - set(PROFILE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown profile fields: {sorted(unknown)}")
        if not fields:
            return

        columns = [name for name in PROFILE_FIELDS if name in fields]
        params: List[Any] = [user_id]
        placeholders = []
        for name in columns:
            value = fields[name]
            if name == "custom_plan_config":
                if isinstance(value, CustomPlanConfig):
                    value = value.model_dump()
                placeholders.append("%s::jsonb")
                params.append(json.dumps(value) if value is not None else None)
            else:
                placeholders.append("%s")
                params.append(value)

        updates = ", ".join(f"{name} = EXCLUDED.{name}" for name in columns)
        query = f"""
            INSERT INTO profiles (id, {", ".join(columns)}, updated_at)
            VALUES (%s, {", ".join(placeholders)}, CURRENT_TIMESTAMP)
            ON CONFLICT (id)
            DO UPDATE SET {updates}, updated_at = EXCLUDED.updated_at
        """

        try:
            with self._db.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(query, tuple(params))
                    conn.commit()
        except psycopg2.Error as e:
            raise RemoteStoreError(f"Failed to write profile for {user_id}: {e}") from e

    def write_badges(self, user_id: str, badge_ids: Iterable[str]) -> None:
        rows = [(user_id, badge_id) for badge_id in dict.fromkeys(badge_ids)]
        if not rows:
            return
        try:
            with self._db.connection() as conn:
                with conn.cursor() as cur:
                    self._ensure_profile(cur, user_id)
                    cur.executemany(
                        """
                        INSERT INTO user_badges (user_id, badge_id)
                        VALUES (%s, %s)
                        ON CONFLICT (user_id, badge_id) DO NOTHING
                        """,
                        rows,
                    )
                    conn.commit()
        except psycopg2.Error as e:
            raise RemoteStoreError(f"Failed to write badges for {user_id}: {e}") from e
