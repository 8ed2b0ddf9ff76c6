"""
최적화 서비스 + 캐시 통합 테스트 (SQLite)
"""
import asyncio
import random
import time
from datetime import timedelta

import pytest

from config.module_optimizer import ModuleCategory
from DTO.module_optimizer import OptimizeRequest
from exceptions import (
    InsufficientModulesError, InvalidCategoryError, InvalidDesiredLevelError,
    InvalidSortModeError, MaxSolutionsOutOfRangeError,
)
from models import OptimizationResult
from service.module_optimizer.cache import OptimizationCache, generate_request_hash
from service.module_optimizer.calculator import PowerCalculator
from service.module_optimizer.optimize_service import OptimizeService
from utils.time_util import utc_now

pytestmark = pytest.mark.integration

FOUR_MODULES = [
    ("m-1", [("Might", 5), ("Agility", 3)]),
    ("m-2", [("Might", 4)]),
    ("m-3", [("Agility", 6), ("Luck Focus", 2)]),
    ("m-4", [("Critical Focus", 7)]),
]


def make_request(**overrides) -> OptimizeRequest:
    body = {"category": "ATTACK"}
    body.update(overrides)
    return OptimizeRequest.model_validate(body)


@pytest.fixture
async def four_modules(test_db, user_factory, module_factory):
    user = await user_factory()
    for uuid, parts in FOUR_MODULES:
        await module_factory(user, uuid, parts)
    # 다른 카테고리 모듈은 후보가 아님
    await module_factory(user, "d-1", [("Magic Resistance", 9)], category=ModuleCategory.DEFENSE)
    return user


class TestOptimize:
    """최적화 요청 처리"""

    async def test_four_module_floor(self, four_modules):
        cache = OptimizationCache()
        response = await OptimizeService.optimize(four_modules.id, make_request(), cache=cache)
        await cache.drain()

        assert len(response.solutions) == 1
        solution = response.solutions[0]
        assert solution.rank == 1
        assert sorted(m.uuid for m in solution.modules) == ["m-1", "m-2", "m-3", "m-4"]
        assert solution.score == PowerCalculator.score(solution.attr_breakdown)
        assert solution.total_attr_value == 27
        assert all(m.attributes for m in solution.modules)

        assert response.metadata.cache_hit is False
        assert response.metadata.total_modules == 4
        assert response.metadata.algorithm == "hybrid-greedy-local-search"

    async def test_cache_hit_is_idempotent(self, four_modules):
        cache = OptimizationCache()
        request = make_request(
            preferences={"priorityAttributes": ["Might"], "desiredLevels": {"Might": 3}},
            constraints={"maxSolutions": 5, "sortMode": "ByScore"},
        )

        first = await OptimizeService.optimize(four_modules.id, request, cache=cache)
        await cache.drain()
        second = await OptimizeService.optimize(four_modules.id, request, cache=cache)

        assert second.metadata.cache_hit is True
        assert second.metadata.total_modules == first.metadata.total_modules
        assert second.metadata.processing_time_ms == first.metadata.processing_time_ms
        assert [s.model_dump() for s in second.solutions] == [s.model_dump() for s in first.solutions]
        assert await OptimizationResult.all().count() == 1

    async def test_excluded_attribute_filters_modules(self, four_modules):
        """제외 속성 모듈을 빼면 4개 미만"""
        request = make_request(preferences={"excludedAttributes": ["Luck Focus"]})
        with pytest.raises(InsufficientModulesError) as exc_info:
            await OptimizeService.optimize(four_modules.id, request, cache=OptimizationCache())
        assert exc_info.value.current == 3

    @pytest.mark.slow
    async def test_event_loop_keeps_running_during_search(self, test_db, user_factory, module_factory):
        """탐색 중에도 다른 태스크가 계속 실행됨"""
        user = await user_factory()
        rng = random.Random(11)
        names = ["Might", "Agility", "Intellect", "Special Attack", "Elite Slayer", "Critical Focus",
                 "Luck Focus", "Attack Speed Focus", "Casting Focus", "Special Healing", "Healing Expertise"]
        for i in range(200):
            parts = [(name, rng.randint(1, 10)) for name in rng.sample(names, rng.randint(1, 3))]
            await module_factory(user, f"bulk-{i}", parts)

        gaps = []
        stopped = asyncio.Event()

        async def heartbeat():
            last = time.perf_counter()
            while not stopped.is_set():
                await asyncio.sleep(0.01)
                now = time.perf_counter()
                gaps.append(now - last)
                last = now

        beat = asyncio.create_task(heartbeat())
        cache = OptimizationCache()
        request = make_request(
            preferences={"priorityAttributes": ["Might", "Critical Focus"]},
            constraints={"maxSolutions": 60},
        )
        response = await OptimizeService.optimize(user.id, request, cache=cache)
        stopped.set()
        await beat
        await cache.drain()

        assert response.solutions
        assert gaps
        assert max(gaps) < 0.5

    async def test_other_user_modules_not_used(self, four_modules, user_factory):
        other = await user_factory("other")
        with pytest.raises(InsufficientModulesError):
            await OptimizeService.optimize(other.id, make_request(), cache=OptimizationCache())

    @pytest.mark.parametrize("overrides,error", [
        ({"category": "WEAPON"}, InvalidCategoryError),
        ({"constraints": {"sortMode": "ByName"}}, InvalidSortModeError),
        ({"constraints": {"maxSolutions": 0}}, MaxSolutionsOutOfRangeError),
        ({"constraints": {"maxSolutions": 61}}, MaxSolutionsOutOfRangeError),
        ({"preferences": {"desiredLevels": {"Might": 7}}}, InvalidDesiredLevelError),
    ])
    async def test_validation(self, four_modules, overrides, error):
        with pytest.raises(error):
            await OptimizeService.optimize(four_modules.id, make_request(**overrides), cache=OptimizationCache())


class TestOptimizationCache:
    """캐시 읽기/만료/보충"""

    async def _store_row(self, user, combinations, expires_at):
        return await OptimizationResult.create(
            user=user,
            request_hash=generate_request_hash(user.id, "ATTACK", None, 10, "ByScore"),
            category="ATTACK",
            sort_mode="ByScore",
            max_solutions=10,
            combinations=combinations,
            total_modules=4,
            processing_time_ms=12,
            expires_at=expires_at,
        )

    async def test_expired_entry_ignored(self, test_db, user_factory):
        user = await user_factory()
        await self._store_row(user, [], utc_now() - timedelta(seconds=1))

        request_hash = generate_request_hash(user.id, "ATTACK", None, 10, "ByScore")
        assert await OptimizationCache().get(user.id, request_hash) is None

    async def test_undecodable_payload_is_miss(self, test_db, user_factory):
        user = await user_factory()
        await self._store_row(user, [{"rank": "not-a-number"}], utc_now() + timedelta(hours=1))

        request_hash = generate_request_hash(user.id, "ATTACK", None, 10, "ByScore")
        assert await OptimizationCache().get(user.id, request_hash) is None

    async def test_hydrates_missing_attributes(self, test_db, user_factory, module_factory):
        user = await user_factory()
        module = await module_factory(user, "m-1", [("Might", 5), ("Agility", 3)])
        combination = {
            "rank": 1,
            "score": 100.0,
            "priority_level": 0,
            "total_attr_value": 8,
            "modules": [{"id": module.id, "uuid": "m-1", "name": "Module m-1", "quality": 3, "attributes": []}],
            "attr_breakdown": {"Might": 5, "Agility": 3},
        }
        await self._store_row(user, [combination], utc_now() + timedelta(hours=1))

        request_hash = generate_request_hash(user.id, "ATTACK", None, 10, "ByScore")
        cached = await OptimizationCache().get(user.id, request_hash)

        assert cached is not None
        attributes = cached.combinations[0].modules[0].attributes
        assert [(a.name, a.value) for a in attributes] == [("Might", 5), ("Agility", 3)]

    async def test_prune_expired(self, test_db, user_factory):
        user = await user_factory()
        await self._store_row(user, [], utc_now() - timedelta(minutes=5))
        await self._store_row(user, [], utc_now() + timedelta(hours=1))

        deleted = await OptimizationCache().prune_expired()

        assert deleted == 1
        assert await OptimizationResult.all().count() == 1
