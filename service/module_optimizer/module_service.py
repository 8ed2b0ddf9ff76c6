"""
모듈 관리 서비스

사용자 모듈 등록/수정/삭제/조회와 공통 검증을 담당합니다.
"""
import logging
from typing import List, Optional

from tortoise.transactions import in_transaction

from config.module_optimizer import (
    ATTR_TYPE_BY_NAME, ModuleCategory, PartType,
    get_module_category, is_valid_config_id, is_valid_part_id,
    get_module_name,
)
from DTO.module_optimizer import ModuleCreateRequest, ModulePartIn, ModuleUpdateRequest
from exceptions import InvalidCategoryError, InvalidModuleDataError, UserModuleNotFoundError
from models import Module
from models.module import ModuleSource
from models.repos import module_repo

logger = logging.getLogger(__name__)

MIN_QUALITY = 1
MAX_QUALITY = 5
MAX_PARTS_PER_MODULE = 10


def parse_category(value: str) -> ModuleCategory:
    """카테고리 문자열 검증"""
    try:
        return ModuleCategory(value)
    except ValueError:
        raise InvalidCategoryError(value)


def validate_quality(quality: int) -> None:
    if quality < MIN_QUALITY or quality > MAX_QUALITY:
        raise InvalidModuleDataError(f"품질은 {MIN_QUALITY}~{MAX_QUALITY} 사이여야 합니다. (입력: {quality})")


def validate_parts(parts: List[ModulePartIn]) -> List[dict]:
    """
    속성 목록 검증 후 저장용 dict로 변환

    type이 없으면 속성 이름으로 결정합니다.
    """
    if not parts:
        raise InvalidModuleDataError("속성이 최소 1개 필요합니다.")
    if len(parts) > MAX_PARTS_PER_MODULE:
        raise InvalidModuleDataError(f"속성은 최대 {MAX_PARTS_PER_MODULE}개까지 가능합니다.")

    validated = []
    for i, part in enumerate(parts):
        if not part.name:
            raise InvalidModuleDataError(f"{i + 1}번째 속성 이름이 비어 있습니다.")
        if part.value < 1:
            raise InvalidModuleDataError(f"'{part.name}' 값은 1 이상이어야 합니다.")
        if not is_valid_part_id(part.part_id):
            raise InvalidModuleDataError(f"알 수 없는 속성입니다: {part.name}")

        if part.type is None:
            part_type = ATTR_TYPE_BY_NAME.get(part.name, PartType.BASIC)
        else:
            try:
                part_type = PartType(part.type)
            except ValueError:
                raise InvalidModuleDataError(f"'{part.name}' 속성 타입이 올바르지 않습니다.")

        validated.append({
            "part_id": part.part_id,
            "name": part.name,
            "value": part.value,
            "type": part_type,
        })
    return validated


def validate_module(data: ModuleCreateRequest, strict: bool = False) -> ModuleCategory:
    """
    모듈 데이터 검증

    strict=True(가져오기)면 이름과 카테고리가 필수입니다.

    Returns:
        모듈 카테고리 (없으면 config_id로 결정)

    Raises:
        InvalidModuleDataError / InvalidCategoryError
    """
    if not data.uuid:
        raise InvalidModuleDataError("uuid가 필요합니다.")
    if strict and not data.name:
        raise InvalidModuleDataError("이름이 필요합니다.")
    validate_quality(data.quality)
    if not is_valid_config_id(data.config_id):
        raise InvalidModuleDataError("알 수 없는 모듈 종류입니다.")

    if data.category:
        category = parse_category(data.category)
    elif strict:
        raise InvalidModuleDataError("카테고리가 필요합니다.")
    else:
        category = get_module_category(data.config_id)
    return category


class ModuleService:
    """사용자 모듈 CRUD"""

    @staticmethod
    async def get_user_modules(
        user_id: int,
        category: Optional[str] = None,
        quality: Optional[int] = None,
    ) -> List[Module]:
        """
        사용자 모듈 목록

        Args:
            user_id: 사용자 ID
            category: 카테고리 필터
            quality: 품질 필터

        Returns:
            parts가 로드된 Module 목록
        """
        parsed = parse_category(category) if category else None
        if quality is not None:
            validate_quality(quality)
        return await module_repo.get_user_modules(user_id, parsed, quality)

    @staticmethod
    async def get_module(user_id: int, module_id: int) -> Module:
        module = await module_repo.get_user_module(user_id, module_id)
        if module is None:
            raise UserModuleNotFoundError(module_id)
        return module

    @staticmethod
    async def export_modules(user_id: int, category: Optional[str] = None) -> List[Module]:
        """
        내보낼 모듈 목록

        Args:
            user_id: 사용자 ID
            category: 카테고리 필터 (없거나 "ALL"이면 전체)
        """
        if category == "ALL":
            category = None
        return await ModuleService.get_user_modules(user_id, category)

    @staticmethod
    async def create_module(user_id: int, data: ModuleCreateRequest) -> Module:
        """
        모듈 수동 등록

        Raises:
            InvalidModuleDataError: 검증 실패 또는 이미 등록된 uuid
        """
        category = validate_module(data)
        parts = validate_parts(data.parts)

        if await module_repo.get_module_by_uuid(data.uuid) is not None:
            raise InvalidModuleDataError("이미 등록된 모듈입니다.")

        async with in_transaction() as conn:
            module = await Module.create(
                uuid=data.uuid,
                name=data.name or get_module_name(data.config_id),
                config_id=data.config_id,
                quality=data.quality,
                category=category,
                source=ModuleSource.MANUAL,
                user_id=user_id,
                using_db=conn,
            )
            await module_repo.replace_parts(module, parts, using_db=conn)

        logger.info(f"모듈 등록: user={user_id}, module={module.id}, category={category.value}")
        return await ModuleService.get_module(user_id, module.id)

    @staticmethod
    async def update_module(user_id: int, module_id: int, data: ModuleUpdateRequest) -> Module:
        """
        모듈 수정 (이름/품질/속성)

        Raises:
            UserModuleNotFoundError: 없거나 다른 사용자 소유
        """
        module = await ModuleService.get_module(user_id, module_id)

        parts = validate_parts(data.parts) if data.parts is not None else None
        if data.quality is not None:
            validate_quality(data.quality)

        async with in_transaction() as conn:
            if data.name:
                module.name = data.name
            if data.quality is not None:
                module.quality = data.quality
            await module.save(using_db=conn)
            if parts is not None:
                await module_repo.replace_parts(module, parts, using_db=conn)

        logger.info(f"모듈 수정: user={user_id}, module={module_id}")
        return await ModuleService.get_module(user_id, module_id)

    @staticmethod
    async def delete_module(user_id: int, module_id: int) -> None:
        """
        모듈 삭제 (속성은 CASCADE)

        Raises:
            UserModuleNotFoundError: 없거나 다른 사용자 소유
        """
        if not await module_repo.delete_user_module(user_id, module_id):
            raise UserModuleNotFoundError(module_id)
        logger.info(f"모듈 삭제: user={user_id}, module={module_id}")
