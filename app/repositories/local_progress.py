"""Local snapshot cache keyed by identity, backed by Redis."""
import logging
from typing import Dict, Optional

import redis
from pydantic import ValidationError as PydanticValidationError
from redis.exceptions import RedisError

from app.config import Settings
from app.models.domain import Identity
from app.models.schemas import UserProgress

logger = logging.getLogger(__name__)


def create_redis_client(settings: Settings) -> Optional[redis.Redis]:
    """Build and ping a Redis client, or return None when caching is off or Redis is down."""
    if not settings.cache_enabled:
        logger.info("Caching is disabled in settings")
        return None

    try:
        client = redis.from_url(
            settings.redis_url,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True,
            health_check_interval=30
        )
        # Test connection
        client.ping()
        logger.info(f"Redis client initialized: {settings.redis_url}")
        return client
    except RedisError as e:
        logger.error(f"Failed to initialize Redis client: {e}")
        # Don't raise - snapshots stay in process memory
        return None


def close_redis_client(client: Optional[redis.Redis]) -> None:
    if client is None:
        return
    try:
        client.close()
        logger.info("Redis client closed")
    except RedisError as e:
        logger.error(f"Error closing Redis client: {e}")


class LocalProgressStore:
    """Synchronous snapshot store that never raises to its caller.

    Snapshots that could not be written to Redis (no client, or the write
    failed) are kept in a per-process dict and win over Redis on read until a
    later write for the same key succeeds.
    """

    def __init__(self, client: Optional[redis.Redis], prefix: str = "leitura_anual"):
        self._client = client
        self._prefix = prefix
        self._memory: Dict[str, str] = {}

    def key_for(self, identity: Identity) -> str:
        if identity.is_guest:
            return f"{self._prefix}_guest_{identity.user_id}"
        return f"{self._prefix}_auth_cache_{identity.user_id}"

    def read(self, identity: Identity) -> Optional[UserProgress]:
        """Return the cached snapshot, or None when absent or unparseable."""
        key = self.key_for(identity)
        raw = self._memory.get(key)

        if raw is None and self._client is not None:
            try:
                raw = self._client.get(key)
            except RedisError as e:
                logger.error(f"Local cache read error for key {key}: {e}")

        if raw is None:
            return None

        try:
            return UserProgress.model_validate_json(raw)
        except PydanticValidationError as e:
            logger.warning(f"Discarding unreadable snapshot for key {key}: {e.error_count()} errors")
            return None

    def write(self, identity: Identity, progress: UserProgress) -> bool:
        """Persist the snapshot; returns False when only the in-memory copy was updated."""
        key = self.key_for(identity)
        serialized = progress.model_dump_json()

        if self._client is None:
            self._memory[key] = serialized
            return False

        try:
            self._client.set(key, serialized)
        except RedisError as e:
            logger.error(f"Local cache write error for key {key}: {e}")
            self._memory[key] = serialized
            return False

        self._memory.pop(key, None)
        return True

    def ping(self) -> bool:
        if self._client is None:
            return False
        try:
            return bool(self._client.ping())
        except RedisError:
            return False
