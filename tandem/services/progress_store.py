"""
Progress persistence for in-flight wizards.

One ``ProgressStore`` per wizard kind and owner, namespaced as
``tandem:progress:<kind>:<owner>``. The checkpoint is a pydantic model
written as one JSON document with a single SET, so a save either fully lands
or not at all. When Redis is unreachable the store keeps checkpoints in
process memory.

``MilestonePreferences`` keeps the last celebrated streak milestone on the
same key-value backend.
"""

from __future__ import annotations

import logging
from typing import Generic, TypeVar

import redis.asyncio as redis
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from tandem.config.settings import get_settings
from tandem.lib.exceptions import ContractViolation, ProgressStoreError
from tandem.models.streak import CELEBRATED_VALUES
from tandem.services.redis_service import RedisService

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

KEY_PREFIX = "tandem"


class ProgressStore(Generic[ModelT]):
    """
    Key-scoped checkpoint store: ``save(state)``, ``load() -> state | default``, ``clear()``.

    Args:
        model: Pydantic model class of the checkpoint; ``model()`` is the default
        kind: Wizard kind ("planning", "review")
        owner_id: User the checkpoint belongs to
        redis_service: Backend; None keeps checkpoints in memory only
        ttl: Checkpoint lifetime in seconds
    """

    def __init__(
        self,
        model: type[ModelT],
        kind: str,
        owner_id: str,
        redis_service: RedisService | None = None,
        ttl: int | None = None,
    ) -> None:
        self._model = model
        self._key = f"{KEY_PREFIX}:progress:{kind}:{owner_id}"
        self._redis = redis_service
        self._ttl = ttl if ttl is not None else get_settings().progress_ttl_seconds
        self._memory: str | None = None

    @property
    def key(self) -> str:
        return self._key

    async def save(self, state: ModelT) -> None:
        document = state.model_dump_json()
        if self._redis is not None:
            try:
                stored = await self._redis.set(self._key, document, ttl=self._ttl)
            except redis.RedisError as e:
                raise ProgressStoreError(f"Saving checkpoint {self._key} failed") from e
            if stored:
                self._memory = None
                return
        self._memory = document

    async def load(self) -> ModelT:
        """Stored checkpoint, or the default model when none (or an invalid one) is stored."""
        document = self._memory
        if document is None and self._redis is not None:
            try:
                document = await self._redis.get(self._key)
            except redis.RedisError as e:
                raise ProgressStoreError(f"Loading checkpoint {self._key} failed") from e
        if document is None:
            return self._model()
        try:
            return self._model.model_validate_json(document)
        except PydanticValidationError:
            logger.warning("progress_checkpoint_invalid key=%s", self._key)
            return self._model()

    async def clear(self) -> None:
        self._memory = None
        if self._redis is not None:
            try:
                await self._redis.delete(self._key)
            except redis.RedisError as e:
                raise ProgressStoreError(f"Clearing checkpoint {self._key} failed") from e


class MilestonePreferences:
    """Per-user ``last_celebrated_milestone`` (0, 5, 10, 20 or 50)."""

    def __init__(self, owner_id: str, redis_service: RedisService | None = None) -> None:
        self._key = f"{KEY_PREFIX}:prefs:{owner_id}:last_celebrated_milestone"
        self._redis = redis_service
        self._memory = 0

    async def last_celebrated_milestone(self) -> int:
        if self._redis is not None:
            try:
                raw = await self._redis.get(self._key)
            except redis.RedisError as e:
                raise ProgressStoreError("Loading milestone preference failed") from e
            if raw is not None:
                try:
                    value = int(raw)
                except ValueError:
                    logger.warning("milestone_preference_invalid key=%s", self._key)
                    return 0
                return value if value in CELEBRATED_VALUES else 0
        return self._memory

    async def set_last_celebrated_milestone(self, milestone: int) -> None:
        if milestone not in CELEBRATED_VALUES:
            raise ContractViolation(f"Not a celebratable milestone: {milestone}")
        self._memory = milestone
        if self._redis is not None:
            try:
                await self._redis.set(self._key, str(milestone))
            except redis.RedisError as e:
                raise ProgressStoreError("Saving milestone preference failed") from e


__all__ = ["KEY_PREFIX", "MilestonePreferences", "ProgressStore"]
