"""Local-first orchestration of reading progress.

Loads answer from the local snapshot cache as soon as possible and reconcile
with the remote store opportunistically. Mutations are pure transforms of the
current snapshot: the result is written to the local cache and returned right
away, and the matching remote writes run as unawaited background tasks whose
failures are only logged.
"""
from __future__ import annotations

import asyncio
import logging
import threading
from datetime import date
from typing import Callable, Coroutine, Dict, Optional, Sequence, Set

from app.constants import ACHIEVEMENT_BADGES
from app.models.domain import CUSTOM_PLAN_ID, Identity
from app.models.schemas import Badge, CustomPlanConfig, UserProgress, default_plan_start
from app.repositories.local_progress import LocalProgressStore
from app.repositories.remote_progress import RemoteProgressStore
from app.services.progress_rules import calculate_streak, evaluate_badges, resolve_context_key
from app.utils.exceptions import RemoteStoreError

logger = logging.getLogger(__name__)

DEFAULT_FETCH_TIMEOUT_SECONDS = 3.0


def default_progress(today: Optional[date] = None) -> UserProgress:
    """Fresh snapshot: whole Bible plan starting January 1st, nothing completed."""
    return UserProgress(plan_start_date=default_plan_start(today))


class ProgressService:
    """Coordinates the local snapshot cache and the remote progress store."""

    def __init__(
        self,
        local_store: LocalProgressStore,
        remote_store: RemoteProgressStore,
        *,
        fetch_timeout: float = DEFAULT_FETCH_TIMEOUT_SECONDS,
        badges: Sequence[Badge] = ACHIEVEMENT_BADGES,
    ):
        self._local = local_store
        self._remote = remote_store
        self._fetch_timeout = fetch_timeout
        self._badges = list(badges)
        self._pending: Set[asyncio.Task] = set()
        # user_id -> remote writes scheduled but not finished
        self._syncing: Dict[str, int] = {}
        # user_id -> mutations committed so far; fetches that overlap one are discarded
        self._commits: Dict[str, int] = {}

    @property
    def pending_tasks(self) -> int:
        return len(self._pending)

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------

    async def load(self, identity: Identity) -> UserProgress:
        if identity.is_guest:
            return self._local.read(identity) or default_progress()

        cached = self._local.read(identity)
        if cached is None:
            return await self._first_load(identity)
        return await self._load_with_cache(identity, cached)

    async def current(self, identity: Identity) -> UserProgress:
        """Snapshot the next mutation should start from.

        The local cache already holds every earlier mutation, while the remote
        store may still be missing writes that are in flight. Only a device
        with nothing cached goes through ``load``.
        """
        cached = self._local.read(identity)
        if cached is not None:
            return cached
        return await self.load(identity)

    async def _first_load(self, identity: Identity) -> UserProgress:
        # Nothing to show yet, so wait for the remote store however long it takes
        try:
            fresh = await asyncio.to_thread(self._remote.fetch_snapshot, identity.user_id)
        except RemoteStoreError as e:
            logger.error(f"Failed to load progress for {identity.user_id}, using defaults: {e}")
            return default_progress()

        self._local.write(identity, fresh)
        return fresh

    async def _load_with_cache(self, identity: Identity, cached: UserProgress) -> UserProgress:
        if self._is_syncing(identity):
            # The remote store has not seen the latest mutations yet
            return cached

        generation = self._commits.get(identity.user_id, 0)
        cancel_event = threading.Event()
        fetch = asyncio.to_thread(
            self._remote.fetch_snapshot,
            identity.user_id,
            cached.custom_plan_config,
            cancel_event,
        )
        try:
            fresh = await asyncio.wait_for(fetch, timeout=self._fetch_timeout)
        except asyncio.TimeoutError:
            cancel_event.set()
            logger.info(
                f"Remote store slow for {identity.user_id} (>{self._fetch_timeout}s), using local cache"
            )
            self._spawn(
                f"refresh-cache:{identity.user_id}",
                self._refresh_cache(identity, cached.custom_plan_config, generation),
            )
            return cached
        except RemoteStoreError as e:
            logger.warning(f"Remote store unavailable for {identity.user_id}, using local cache: {e}")
            return cached

        if self._is_outdated(identity, generation):
            # A mutation landed while the fetch was running
            return self._local.read(identity) or cached
        self._local.write(identity, fresh)
        return fresh

    async def _refresh_cache(
        self,
        identity: Identity,
        fallback_config: Optional[CustomPlanConfig],
        generation: int,
    ) -> None:
        fresh = await asyncio.to_thread(self._remote.fetch_snapshot, identity.user_id, fallback_config)
        if self._is_outdated(identity, generation):
            logger.info(f"Discarding background refresh for {identity.user_id}, newer local writes exist")
            return
        self._local.write(identity, fresh)
        logger.info(f"Background refresh updated local cache for {identity.user_id}")

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def toggle_day_completion(self, progress: UserProgress, day_id: int, identity: Identity) -> UserProgress:
        context_key = progress.context_key
        completed = set(progress.all_progress.get(context_key, []))
        was_completed = day_id in completed
        if was_completed:
            completed.discard(day_id)
        else:
            completed.add(day_id)

        completed_ids = sorted(completed)
        streak = calculate_streak(completed_ids)
        badges = evaluate_badges(streak, progress.unlocked_badges, self._badges)

        updated = progress.model_copy(update={
            "completed_ids": completed_ids,
            "all_progress": {**progress.all_progress, context_key: completed_ids},
            "streak": streak,
            "unlocked_badges": badges.unlocked,
        })

        def sync() -> None:
            self._remote.write_completion(identity.user_id, day_id, context_key, not was_completed)
            self._remote.write_profile(identity.user_id, streak=streak)
            if badges.newly_unlocked:
                self._remote.write_badges(identity.user_id, badges.newly_unlocked)

        return self._commit(identity, updated, f"toggle-day:{day_id}", sync)

    async def save_day_note(self, progress: UserProgress, day_id: int, note: str, identity: Identity) -> UserProgress:
        context_key = progress.context_key
        updated = progress.model_copy(update={"notes": {**progress.notes, day_id: note}})

        def sync() -> None:
            self._remote.write_note(identity.user_id, day_id, context_key, note)

        return self._commit(identity, updated, f"save-note:{day_id}", sync)

    async def delete_day_note(self, progress: UserProgress, day_id: int, identity: Identity) -> UserProgress:
        context_key = progress.context_key
        notes = {day: text for day, text in progress.notes.items() if day != day_id}
        updated = progress.model_copy(update={"notes": notes})

        def sync() -> None:
            self._remote.write_note(identity.user_id, day_id, context_key, None)

        return self._commit(identity, updated, f"delete-note:{day_id}", sync)

    async def update_plan_start_date(self, progress: UserProgress, new_date: date, identity: Identity) -> UserProgress:
        updated = progress.model_copy(update={"plan_start_date": new_date})

        def sync() -> None:
            self._remote.write_profile(identity.user_id, plan_start_date=new_date)

        return self._commit(identity, updated, "update-start-date", sync)

    async def update_selected_plan(self, progress: UserProgress, plan_id: str, identity: Identity) -> UserProgress:
        updated = self._switch_context(progress, plan_id, progress.custom_plan_config)

        def sync() -> None:
            self._remote.write_profile(identity.user_id, selected_plan_id=plan_id, streak=updated.streak)

        return self._commit(identity, updated, f"select-plan:{plan_id}", sync)

    async def update_custom_plan_config(
        self,
        progress: UserProgress,
        config: CustomPlanConfig,
        identity: Identity,
    ) -> UserProgress:
        # Configuring a custom book makes the custom plan the active one
        updated = self._switch_context(progress, CUSTOM_PLAN_ID, config)

        def sync() -> None:
            self._remote.write_profile(
                identity.user_id,
                selected_plan_id=CUSTOM_PLAN_ID,
                custom_plan_config=config,
                streak=updated.streak,
            )

        return self._commit(identity, updated, f"custom-plan:{config.book_name}", sync)

    @staticmethod
    def _switch_context(
        progress: UserProgress,
        plan_id: str,
        config: Optional[CustomPlanConfig],
    ) -> UserProgress:
        """Show the bucket of the new plan; every other bucket is kept untouched."""
        completed_ids = list(progress.all_progress.get(resolve_context_key(plan_id, config), []))
        return progress.model_copy(update={
            "selected_plan_id": plan_id,
            "custom_plan_config": config,
            "completed_ids": completed_ids,
            "streak": calculate_streak(completed_ids),
        })

    # ------------------------------------------------------------------
    # Background sync
    # ------------------------------------------------------------------

    def _commit(
        self,
        identity: Identity,
        updated: UserProgress,
        description: str,
        sync: Callable[[], None],
    ) -> UserProgress:
        self._local.write(identity, updated)
        if not identity.is_guest:
            user_id = identity.user_id
            self._syncing[user_id] = self._syncing.get(user_id, 0) + 1
            self._commits[user_id] = self._commits.get(user_id, 0) + 1
            task = self._spawn(f"{description}:{user_id}", asyncio.to_thread(sync))
            task.add_done_callback(lambda _: self._sync_finished(user_id))
        return updated

    def _is_syncing(self, identity: Identity) -> bool:
        return identity.user_id in self._syncing

    def _is_outdated(self, identity: Identity, generation: int) -> bool:
        """True when a fetch started at ``generation`` may miss local mutations."""
        return self._is_syncing(identity) or self._commits.get(identity.user_id, 0) != generation

    def _sync_finished(self, user_id: str) -> None:
        remaining = self._syncing.get(user_id, 0) - 1
        if remaining > 0:
            self._syncing[user_id] = remaining
        else:
            self._syncing.pop(user_id, None)

    def _spawn(self, name: str, coro: Coroutine) -> asyncio.Task:
        task = asyncio.create_task(coro, name=name)
        self._pending.add(task)
        task.add_done_callback(self._on_background_done)
        return task

    def _on_background_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            logger.warning(f"Background sync cancelled: {task.get_name()}")
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Background sync error ({task.get_name()}): {error}")

    async def drain(self) -> None:
        """Wait for every scheduled remote write or refresh to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
