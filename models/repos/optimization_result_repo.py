"""
OptimizationResult Repository

최적화 결과 캐시 행 조회/저장/정리입니다.
"""
from datetime import datetime
from typing import List, Optional, Tuple

from models import OptimizationResult


async def find_latest_valid(
    user_id: int,
    request_hash: str,
    now: datetime,
) -> Optional[OptimizationResult]:
    """
    만료되지 않은 최신 캐시 행 조회

    Args:
        user_id: 사용자 ID
        request_hash: 요청 해시
        now: 기준 시각 (expires_at > now 인 행만)

    Returns:
        OptimizationResult 또는 None
    """
    return await (
        OptimizationResult.filter(
            user_id=user_id,
            request_hash=request_hash,
            expires_at__gt=now,
        )
        .order_by("-created_at", "-id")
        .first()
    )


async def create_result(**fields) -> OptimizationResult:
    return await OptimizationResult.create(**fields)


async def delete_expired(now: datetime) -> int:
    """
    만료된 캐시 행 삭제

    Returns:
        삭제된 행 수
    """
    return await OptimizationResult.filter(expires_at__lte=now).delete()


async def get_user_history(
    user_id: int,
    limit: int,
    offset: int,
) -> Tuple[List[OptimizationResult], int]:
    """
    사용자 최적화 기록 (최신순)

    Args:
        user_id: 사용자 ID
        limit: 최대 개수
        offset: 건너뛸 개수

    Returns:
        (기록 목록, 전체 개수)
    """
    query = OptimizationResult.filter(user_id=user_id)
    total = await query.count()
    rows = await query.order_by("-created_at", "-id").offset(offset).limit(limit)
    return rows, total


async def get_user_result(user_id: int, result_id: int) -> Optional[OptimizationResult]:
    return await OptimizationResult.get_or_none(id=result_id, user_id=user_id)


async def delete_user_result(user_id: int, result_id: int) -> bool:
    deleted = await OptimizationResult.filter(id=result_id, user_id=user_id).delete()
    return deleted > 0
