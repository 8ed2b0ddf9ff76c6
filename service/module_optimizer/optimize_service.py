"""
모듈 최적화 요청 처리

요청 검증 → 캐시 조회 → (미스) 모듈 로드/필터 → 최적화 → 캐시 저장 예약
"""
import asyncio
import functools
import logging
import time
from typing import List, Optional, Tuple

from config.module_optimizer import MAX_ATTR_LEVEL, OPTIMIZER, ModuleCategory, SortMode
from DTO.module_optimizer import (
    CombinationModule, ModuleAttribute, ModuleCombination,
    OptimizeMetadata, OptimizeRequest, OptimizeResponse,
)
from exceptions import (
    InsufficientModulesError, InvalidDesiredLevelError, InvalidSortModeError,
    MaxSolutionsOutOfRangeError, ModuleHasNoPartsError,
)
from models.repos import module_repo
from service.module_optimizer.cache import OptimizationCache, generate_request_hash, optimization_cache
from service.module_optimizer.calculator import OptimizationPreferences
from service.module_optimizer.module_service import parse_category
from service.module_optimizer.optimizer import ModuleCandidate, ModuleOptimizer, Solution

logger = logging.getLogger(__name__)


def parse_request(
    request: OptimizeRequest,
) -> Tuple[ModuleCategory, OptimizationPreferences, int, SortMode]:
    """
    최적화 요청 검증

    Returns:
        (카테고리, 선호 설정, 최대 결과 수, 정렬 기준)
    """
    category = parse_category(request.category)

    constraints = request.constraints
    raw_sort = constraints.sort_mode if constraints and constraints.sort_mode else SortMode.BY_SCORE.value
    try:
        sort_mode = SortMode(raw_sort)
    except ValueError:
        raise InvalidSortModeError(raw_sort)

    max_solutions = OPTIMIZER.DEFAULT_MAX_SOLUTIONS
    if constraints and constraints.max_solutions is not None:
        max_solutions = constraints.max_solutions
    if max_solutions < 1 or max_solutions > OPTIMIZER.MAX_SOLUTIONS:
        raise MaxSolutionsOutOfRangeError(max_solutions, OPTIMIZER.MAX_SOLUTIONS)

    prefs = request.preferences
    if prefs is None:
        return category, OptimizationPreferences(), max_solutions, sort_mode

    for attr_name, level in prefs.desired_levels.items():
        if level < 1 or level > MAX_ATTR_LEVEL:
            raise InvalidDesiredLevelError(attr_name, level)

    preferences = OptimizationPreferences(
        priority_attributes=tuple(prefs.priority_attributes),
        desired_levels=dict(prefs.desired_levels),
        excluded_attributes=tuple(prefs.excluded_attributes),
    )
    return category, preferences, max_solutions, sort_mode


def build_combinations(solutions: List[Solution]) -> List[ModuleCombination]:
    """Solution → 응답 조합 (rank 1부터)"""
    return [
        ModuleCombination(
            rank=rank,
            score=solution.score,
            priority_level=solution.priority_level,
            total_attr_value=solution.total_attr_value,
            modules=[
                CombinationModule(
                    id=m.id,
                    uuid=m.uuid,
                    name=m.name,
                    quality=m.quality,
                    attributes=[
                        ModuleAttribute(
                            id=p.id,
                            part_id=p.part_id,
                            name=p.name,
                            value=p.value,
                            type=p.type.value,
                        )
                        for p in m.parts
                    ],
                )
                for m in solution.modules
            ],
            attr_breakdown=dict(solution.attr_breakdown),
        )
        for rank, solution in enumerate(solutions, start=1)
    ]


class OptimizeService:
    """모듈 최적화"""

    @staticmethod
    async def optimize(
        user_id: int,
        request: OptimizeRequest,
        cache: Optional[OptimizationCache] = None,
        optimizer: Optional[ModuleOptimizer] = None,
    ) -> OptimizeResponse:
        """
        최적 모듈 조합 계산

        Args:
            user_id: 사용자 ID
            request: 최적화 요청
            cache: 결과 캐시 (기본: 전역 캐시)
            optimizer: 최적화기 (기본: 기본 설정)

        Returns:
            OptimizeResponse

        Raises:
            ValidationFailureError: 요청 검증 실패
            InsufficientModulesError: 조합 가능한 모듈이 4개 미만
        """
        cache = cache or optimization_cache
        optimizer = optimizer or ModuleOptimizer()

        category, preferences, max_solutions, sort_mode = parse_request(request)
        request_hash = generate_request_hash(
            user_id, category.value, preferences, max_solutions, sort_mode.value
        )

        cached = await cache.get(user_id, request_hash)
        if cached is not None:
            return OptimizeResponse(
                solutions=cached.combinations,
                metadata=OptimizeMetadata(
                    total_modules=cached.total_modules,
                    processing_time_ms=cached.processing_time_ms,
                    algorithm=OPTIMIZER.ALGORITHM_NAME,
                    cache_hit=True,
                ),
            )

        started = time.perf_counter()
        modules = await module_repo.get_user_modules(user_id, category)
        candidates = [ModuleCandidate.from_model(m) for m in modules]

        for candidate in candidates:
            if not candidate.parts:
                raise ModuleHasNoPartsError(candidate.name)

        if preferences.excluded_attributes:
            excluded = set(preferences.excluded_attributes)
            candidates = [c for c in candidates if not c.has_any_attribute(excluded)]

        required = OPTIMIZER.MODULES_PER_COMBINATION
        if len(candidates) < required:
            raise InsufficientModulesError(category.value, required, len(candidates))

        # CPU 전용 탐색은 executor에서 실행
        loop = asyncio.get_running_loop()
        solutions = await loop.run_in_executor(
            None,
            functools.partial(
                optimizer.optimize, candidates, category.value, preferences, max_solutions, sort_mode
            ),
        )
        combinations = build_combinations(solutions)
        processing_time_ms = int((time.perf_counter() - started) * 1000)

        logger.info(
            f"최적화 완료: user={user_id}, category={category.value}, "
            f"모듈 {len(candidates)}개, 조합 {len(combinations)}개, {processing_time_ms}ms"
        )

        cache.schedule_store(
            user_id=user_id,
            request_hash=request_hash,
            category=category.value,
            preferences=preferences,
            max_solutions=max_solutions,
            sort_mode=sort_mode.value,
            combinations=combinations,
            total_modules=len(candidates),
            processing_time_ms=processing_time_ms,
        )

        return OptimizeResponse(
            solutions=combinations,
            metadata=OptimizeMetadata(
                total_modules=len(candidates),
                processing_time_ms=processing_time_ms,
                algorithm=OPTIMIZER.ALGORITHM_NAME,
                cache_hit=False,
            ),
        )
