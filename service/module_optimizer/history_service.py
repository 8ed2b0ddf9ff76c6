"""
최적화 기록 조회/삭제

캐시로 저장된 optimization_results 행을 사용자별 기록으로 보여줍니다.
만료 여부와 관계없이 정리 전까지는 기록으로 남습니다.
"""
import logging
from typing import List, Optional

from pydantic import ValidationError
from tortoise.exceptions import BaseORMException

from config.module_optimizer import OPTIMIZATION_CACHE, OptimizationCacheConfig
from DTO.module_optimizer import (
    HistoryDetailResponse, HistoryItem, HistoryListResponse,
    HistoryMetadata, ModuleCombination,
)
from exceptions import OptimizationResultNotFoundError
from models import OptimizationResult
from models.repos import optimization_result_repo
from service.module_optimizer.cache import OptimizationCache

logger = logging.getLogger(__name__)


def top_score(combinations) -> float:
    """첫 번째 조합 점수 (읽을 수 없으면 0)"""
    if not isinstance(combinations, list) or not combinations:
        return 0.0
    first = combinations[0]
    if not isinstance(first, dict):
        return 0.0
    score = first.get("score")
    if isinstance(score, (int, float)) and not isinstance(score, bool):
        return float(score)
    return 0.0


def to_history_item(row: OptimizationResult) -> HistoryItem:
    return HistoryItem(
        id=row.id,
        category=row.category,
        priority_attributes=row.priority_attributes,
        desired_levels=row.desired_levels,
        excluded_attributes=row.excluded_attributes,
        sort_mode=row.sort_mode,
        max_solutions=row.max_solutions,
        processing_time_ms=row.processing_time_ms,
        top_score=top_score(row.combinations),
        created_at=row.created_at,
    )


class HistoryService:
    """사용자 최적화 기록"""

    @staticmethod
    async def get_history(
        user_id: int,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        config: OptimizationCacheConfig = OPTIMIZATION_CACHE,
    ) -> HistoryListResponse:
        """
        최적화 기록 목록 (최신순)

        Args:
            user_id: 사용자 ID
            limit: 개수 (1~HISTORY_MAX_LIMIT 밖이면 기본값)
            offset: 건너뛸 개수 (음수면 0)

        Returns:
            HistoryListResponse
        """
        if limit is None or limit < 1 or limit > config.HISTORY_MAX_LIMIT:
            limit = config.HISTORY_DEFAULT_LIMIT
        if offset is None or offset < 0:
            offset = 0

        rows, total = await optimization_result_repo.get_user_history(user_id, limit, offset)
        return HistoryListResponse(history=[to_history_item(r) for r in rows], total=total)

    @staticmethod
    async def get_history_item(user_id: int, result_id: int) -> HistoryDetailResponse:
        """
        기록 한 건 (조합 전체)

        Raises:
            OptimizationResultNotFoundError: 없거나 다른 사용자 기록
        """
        row = await optimization_result_repo.get_user_result(user_id, result_id)
        if row is None:
            raise OptimizationResultNotFoundError(result_id)

        solutions = HistoryService._decode(row)
        try:
            await OptimizationCache.hydrate(solutions)
        except BaseORMException as e:
            logger.warning(f"기록 속성 보충 실패: result={row.id}, {e}")

        return HistoryDetailResponse(
            solutions=solutions,
            metadata=HistoryMetadata(
                category=row.category,
                sort_mode=row.sort_mode,
                max_solutions=row.max_solutions,
                total_modules=row.total_modules,
                processing_time_ms=row.processing_time_ms,
                created_at=row.created_at,
            ),
        )

    @staticmethod
    def _decode(row: OptimizationResult) -> List[ModuleCombination]:
        try:
            return [ModuleCombination.model_validate(c) for c in row.combinations or []]
        except (ValidationError, TypeError) as e:
            logger.warning(f"기록 payload 해석 실패: result={row.id}, {e}")
            return []

    @staticmethod
    async def delete_history_item(user_id: int, result_id: int) -> None:
        """
        기록 삭제

        Raises:
            OptimizationResultNotFoundError: 없거나 다른 사용자 기록
        """
        if not await optimization_result_repo.delete_user_result(user_id, result_id):
            raise OptimizationResultNotFoundError(result_id)
        logger.info(f"최적화 기록 삭제: user={user_id}, result={result_id}")
