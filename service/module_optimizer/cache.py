"""
최적화 결과 캐시

(user_id, request_hash) 기준으로 optimization_results 테이블에 저장합니다.
저장은 응답과 분리된 백그라운드 태스크로 실행되며 실패해도 요청에는 영향이 없습니다.
"""
import asyncio
import hashlib
import logging
from dataclasses import dataclass
from typing import List, Optional, Set

from pydantic import ValidationError
from tortoise.exceptions import BaseORMException

from config.module_optimizer import OPTIMIZATION_CACHE, OptimizationCacheConfig
from DTO.module_optimizer import ModuleAttribute, ModuleCombination
from models import OptimizationResult
from models.repos import module_repo, optimization_result_repo
from service.module_optimizer.calculator import OptimizationPreferences
from utils.time_util import utc_now

logger = logging.getLogger(__name__)


@dataclass
class CachedOptimization:
    """캐시에서 읽은 최적화 결과"""

    combinations: List[ModuleCombination]
    total_modules: int
    processing_time_ms: int


def generate_request_hash(
    user_id: int,
    category: str,
    preferences: Optional[OptimizationPreferences],
    max_solutions: int,
    sort_mode: str,
    config: OptimizationCacheConfig = OPTIMIZATION_CACHE,
) -> str:
    """
    요청 파라미터 해시

    user:<id>|cat:<카테고리>|priority:<a,b>|levels:<k=v,...>|excluded:<a,b>|max:<n>|sort:<모드>
    비어 있는 선호 항목은 생략하고, levels는 키 순으로 정렬합니다.

    Returns:
        SHA-256 앞 16바이트 (32자리 hex)
    """
    segments = [f"user:{user_id}", f"cat:{category}"]
    if preferences is not None:
        if preferences.priority_attributes:
            segments.append("priority:" + ",".join(preferences.priority_attributes))
        if preferences.desired_levels:
            levels = ",".join(f"{k}={v}" for k, v in sorted(preferences.desired_levels.items()))
            segments.append("levels:" + levels)
        if preferences.excluded_attributes:
            segments.append("excluded:" + ",".join(preferences.excluded_attributes))
    segments.append(f"max:{max_solutions}")
    segments.append(f"sort:{sort_mode}")

    digest = hashlib.sha256("|".join(segments).encode("utf-8")).digest()
    return digest[:config.REQUEST_HASH_BYTES].hex()


class OptimizationCache:
    """최적화 결과 캐시 읽기/쓰기/정리"""

    def __init__(self, config: OptimizationCacheConfig = OPTIMIZATION_CACHE):
        self.config = config
        self._pending: Set[asyncio.Task] = set()

    async def get(self, user_id: int, request_hash: str) -> Optional[CachedOptimization]:
        """
        만료되지 않은 최신 결과 조회

        payload를 읽을 수 없으면 캐시 미스로 처리합니다.
        속성이 비어 있는 모듈은 현재 속성으로 채웁니다.
        """
        row = await optimization_result_repo.find_latest_valid(user_id, request_hash, utc_now())
        if row is None:
            logger.info(f"캐시 미스: user={user_id}, hash={request_hash}")
            return None

        try:
            combinations = [ModuleCombination.model_validate(c) for c in row.combinations or []]
        except (ValidationError, TypeError) as e:
            logger.warning(f"캐시 payload 해석 실패: result={row.id}, {e}")
            return None

        try:
            await self.hydrate(combinations)
        except BaseORMException as e:
            logger.warning(f"캐시 속성 보충 실패: result={row.id}, {e}")

        logger.info(f"캐시 적중: user={user_id}, hash={request_hash}, result={row.id}")
        return CachedOptimization(
            combinations=combinations,
            total_modules=row.total_modules,
            processing_time_ms=row.processing_time_ms,
        )

    @staticmethod
    async def hydrate(combinations: List[ModuleCombination]) -> None:
        """attributes가 빈 모듈에 현재 ModulePart를 채움"""
        missing_ids = {
            module.id
            for combo in combinations
            for module in combo.modules
            if not module.attributes
        }
        if not missing_ids:
            return

        parts_by_module = await module_repo.get_parts_by_module_ids(sorted(missing_ids))
        for combo in combinations:
            for module in combo.modules:
                if module.attributes:
                    continue
                module.attributes = [
                    ModuleAttribute(
                        id=p.id,
                        part_id=p.part_id,
                        name=p.name,
                        value=p.value,
                        type=getattr(p.type, "value", p.type),
                    )
                    for p in parts_by_module.get(module.id, [])
                ]

    async def store(
        self,
        user_id: int,
        request_hash: str,
        category: str,
        preferences: Optional[OptimizationPreferences],
        max_solutions: int,
        sort_mode: str,
        combinations: List[ModuleCombination],
        total_modules: int,
        processing_time_ms: int,
    ) -> Optional[OptimizationResult]:
        """결과 저장 (실패 시 로그만 남기고 None)"""
        preferences = preferences or OptimizationPreferences()
        try:
            row = await optimization_result_repo.create_result(
                user_id=user_id,
                request_hash=request_hash,
                category=category,
                priority_attributes=list(preferences.priority_attributes) or None,
                desired_levels=dict(preferences.desired_levels) or None,
                excluded_attributes=list(preferences.excluded_attributes) or None,
                sort_mode=sort_mode,
                max_solutions=max_solutions,
                combinations=[c.model_dump(mode="json") for c in combinations],
                total_modules=total_modules,
                processing_time_ms=processing_time_ms,
                expires_at=OptimizationResult.calculate_expires_at(),
            )
        except Exception:
            logger.error(f"캐시 저장 실패: user={user_id}, hash={request_hash}", exc_info=True)
            return None

        logger.info(f"캐시 저장: user={user_id}, hash={request_hash}, expires={row.expires_at.isoformat()}")
        return row

    def schedule_store(self, **kwargs) -> asyncio.Task:
        """응답과 분리된 저장 태스크 생성"""
        task = asyncio.create_task(self.store(**kwargs))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """진행 중인 저장 태스크 대기"""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def prune_expired(self) -> int:
        """
        만료된 행 삭제

        Returns:
            삭제된 행 수
        """
        deleted = await optimization_result_repo.delete_expired(utc_now())
        if deleted:
            logger.info(f"만료된 최적화 캐시 {deleted}건 삭제")
        return deleted

    async def run_prune_loop(self) -> None:
        """PRUNE_INTERVAL_MINUTES마다 만료 행 정리"""
        interval = self.config.PRUNE_INTERVAL_MINUTES * 60
        while True:
            await asyncio.sleep(interval)
            try:
                await self.prune_expired()
            except BaseORMException:
                logger.error("최적화 캐시 정리 실패", exc_info=True)


optimization_cache = OptimizationCache()
