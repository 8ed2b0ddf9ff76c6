"""
Module Repository

사용자 모듈/속성 데이터 접근 레이어입니다.
"""
from typing import Dict, List, Optional, Sequence

from config.module_optimizer import ModuleCategory
from models import Module, ModulePart


async def get_user_modules(
    user_id: int,
    category: Optional[ModuleCategory] = None,
    quality: Optional[int] = None,
) -> List[Module]:
    """
    사용자 모듈 조회 (parts 포함)

    Args:
        user_id: 사용자 ID
        category: 카테고리 필터
        quality: 품질 필터

    Returns:
        id 오름차순 Module 목록
    """
    query = Module.filter(user_id=user_id)
    if category is not None:
        query = query.filter(category=category)
    if quality is not None:
        query = query.filter(quality=quality)
    return await query.order_by("id").prefetch_related("parts")


async def get_user_module(user_id: int, module_id: int) -> Optional[Module]:
    """사용자 소유 모듈 단건 조회"""
    return await Module.get_or_none(id=module_id, user_id=user_id).prefetch_related("parts")


async def get_module_by_uuid(uuid: str, using_db=None) -> Optional[Module]:
    """uuid로 모듈 조회 (소유자 무관)"""
    return await Module.filter(uuid=uuid).using_db(using_db).first()


async def get_parts_by_module_ids(module_ids: Sequence[int]) -> Dict[int, List[ModulePart]]:
    """
    모듈 ID별 현재 속성 조회

    Returns:
        {module_id: [ModulePart, ...]} (id 오름차순)
    """
    if not module_ids:
        return {}

    parts = await ModulePart.filter(module_id__in=list(module_ids)).order_by("id")
    grouped: Dict[int, List[ModulePart]] = {}
    for part in parts:
        grouped.setdefault(part.module_id, []).append(part)
    return grouped


async def replace_parts(module: Module, parts: Sequence[dict], using_db=None) -> None:
    """
    모듈 속성 전체 교체

    Args:
        module: 대상 모듈
        parts: {"part_id", "name", "value", "type"} 목록
        using_db: 트랜잭션 커넥션
    """
    await ModulePart.filter(module_id=module.id).using_db(using_db).delete()
    await ModulePart.bulk_create(
        [ModulePart(module=module, **part) for part in parts],
        using_db=using_db,
    )


async def delete_user_module(user_id: int, module_id: int) -> bool:
    """
    사용자 소유 모듈 삭제

    Returns:
        삭제 여부
    """
    deleted = await Module.filter(id=module_id, user_id=user_id).delete()
    return deleted > 0
