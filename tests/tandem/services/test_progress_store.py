"""
Tests for ProgressStore, MilestonePreferences and RedisService.

Covers:
- In-memory round-trip when no Redis is configured
- Default checkpoint when nothing (or garbage) is stored
- Key namespacing and TTL passed to Redis
- Redis errors surface as ProgressStoreError
- Milestone preference validation
- RedisService degrading to a no-op when Redis is unreachable
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import redis.asyncio as redis

from tandem.lib.exceptions import ContractViolation, ProgressStoreError
from tandem.models.task import TaskStatus
from tandem.modules.planning_state import PlanningProgressState, PlanningStep
from tandem.modules.review_state import ReviewProgressState, ReviewStep
from tandem.services.progress_store import MilestonePreferences, ProgressStore
from tandem.services.redis_service import RedisService


def _mock_redis(**overrides):
    service = MagicMock(spec=RedisService)
    service.get = AsyncMock(return_value=overrides.get("get"))
    service.set = AsyncMock(return_value=overrides.get("set", True))
    service.delete = AsyncMock(return_value=True)
    return service


# =============================================================================
# ProgressStore without Redis
# =============================================================================


class TestProgressStoreMemory:
    @pytest.mark.asyncio
    async def test_default_when_empty(self, review_progress):
        state = await review_progress.load()
        assert state == ReviewProgressState()
        assert not state.is_in_progress

    @pytest.mark.asyncio
    async def test_round_trip(self, planning_progress):
        saved = PlanningProgressState(
            current_step=PlanningStep.ADD_TASKS,
            processed_rollover_task_ids={"r1", "r2"},
            added_task_ids=["n1", "n2"],
            rollover_tasks_added=1,
            is_in_progress=True,
            week_id="2026-W42",
        )
        await planning_progress.save(saved)
        assert await planning_progress.load() == saved

    @pytest.mark.asyncio
    async def test_clear(self, review_progress):
        await review_progress.save(ReviewProgressState(is_in_progress=True))
        await review_progress.clear()
        assert not (await review_progress.load()).is_in_progress

    def test_key_is_namespaced(self, review_progress):
        assert review_progress.key == "tandem:progress:review:user-1"


# =============================================================================
# ProgressStore with Redis
# =============================================================================


class TestProgressStoreRedis:
    @pytest.mark.asyncio
    async def test_save_writes_json_with_ttl(self):
        service = _mock_redis()
        store = ProgressStore(ReviewProgressState, "review", "user-1", redis_service=service, ttl=60)

        await store.save(ReviewProgressState(
            week_id="2026-W42",
            current_step=ReviewStep.TASK_REVIEW,
            task_outcomes={"t1": TaskStatus.TRIED},
            is_in_progress=True,
        ))

        service.set.assert_awaited_once()
        key, document = service.set.await_args.args
        assert key == "tandem:progress:review:user-1"
        assert service.set.await_args.kwargs == {"ttl": 60}
        restored = ReviewProgressState.model_validate_json(document)
        assert restored.task_outcomes == {"t1": TaskStatus.TRIED}

    @pytest.mark.asyncio
    async def test_load_from_redis(self):
        document = ReviewProgressState(
            week_id="2026-W42", current_task_index=2, is_in_progress=True,
        ).model_dump_json()
        store = ProgressStore(
            ReviewProgressState, "review", "user-1", redis_service=_mock_redis(get=document), ttl=60,
        )

        state = await store.load()
        assert state.current_task_index == 2
        assert state.week_id == "2026-W42"

    @pytest.mark.asyncio
    async def test_invalid_document_returns_default(self):
        store = ProgressStore(
            ReviewProgressState, "review", "user-1",
            redis_service=_mock_redis(get='{"overall_rating": 9}'), ttl=60,
        )
        assert await store.load() == ReviewProgressState()

    @pytest.mark.asyncio
    async def test_falls_back_to_memory_when_redis_unavailable(self):
        service = _mock_redis(set=False)
        store = ProgressStore(ReviewProgressState, "review", "user-1", redis_service=service, ttl=60)

        await store.save(ReviewProgressState(is_in_progress=True))

        assert (await store.load()).is_in_progress
        service.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_redis_error_raises_progress_store_error(self):
        service = _mock_redis()
        service.set.side_effect = redis.RedisError("boom")
        store = ProgressStore(ReviewProgressState, "review", "user-1", redis_service=service, ttl=60)

        with pytest.raises(ProgressStoreError):
            await store.save(ReviewProgressState())

    @pytest.mark.asyncio
    async def test_clear_deletes_key(self):
        service = _mock_redis()
        store = ProgressStore(PlanningProgressState, "planning", "user-1", redis_service=service, ttl=60)
        await store.clear()
        service.delete.assert_awaited_once_with("tandem:progress:planning:user-1")


# =============================================================================
# MilestonePreferences
# =============================================================================


class TestMilestonePreferences:
    @pytest.mark.asyncio
    async def test_defaults_to_zero(self, milestone_preferences):
        assert await milestone_preferences.last_celebrated_milestone() == 0

    @pytest.mark.asyncio
    async def test_set_and_get(self, milestone_preferences):
        await milestone_preferences.set_last_celebrated_milestone(10)
        assert await milestone_preferences.last_celebrated_milestone() == 10

    @pytest.mark.asyncio
    async def test_rejects_non_milestone(self, milestone_preferences):
        with pytest.raises(ContractViolation):
            await milestone_preferences.set_last_celebrated_milestone(7)

    @pytest.mark.asyncio
    async def test_reads_from_redis(self):
        prefs = MilestonePreferences("user-1", redis_service=_mock_redis(get="20"))
        assert await prefs.last_celebrated_milestone() == 20

    @pytest.mark.asyncio
    async def test_garbage_in_redis_reads_as_zero(self):
        prefs = MilestonePreferences("user-1", redis_service=_mock_redis(get="lots"))
        assert await prefs.last_celebrated_milestone() == 0


# =============================================================================
# RedisService
# =============================================================================


class TestRedisService:
    @pytest.mark.asyncio
    async def test_set_with_ttl_uses_setex(self):
        client = AsyncMock()
        client.setex.return_value = True
        service = RedisService(redis_url="redis://localhost:6379/0", client=client)

        assert await service.set("k", '{"step": "RATING"}', ttl=30)
        client.setex.assert_awaited_once_with("k", 30, '{"step": "RATING"}')

    @pytest.mark.asyncio
    async def test_string_values_stored_raw(self):
        client = AsyncMock()
        client.set.return_value = True
        service = RedisService(redis_url="redis://localhost:6379/0", client=client)

        await service.set("k", "raw")
        client.set.assert_awaited_once_with("k", "raw")

    @pytest.mark.asyncio
    async def test_unreachable_redis_is_noop(self):
        client = AsyncMock()
        client.ping.side_effect = redis.ConnectionError("refused")
        with patch("tandem.services.redis_service.redis.from_url", return_value=client):
            service = RedisService(redis_url="redis://localhost:6379/0")
            assert await service.get("k") is None
            assert await service.set("k", "v") is False
            assert not service.available

    def test_tls_only_for_rediss(self):
        assert RedisService._tls_kwargs("redis://localhost") == {}
        assert "ssl" in RedisService._tls_kwargs("rediss://localhost")
