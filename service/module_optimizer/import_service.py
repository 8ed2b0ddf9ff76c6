"""
모듈 일괄 가져오기

클라이언트가 추출한 모듈 목록을 uuid 기준으로 추가/갱신합니다.
항목별로 검증하고 실패한 항목은 error_list에 기록합니다.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from pydantic import ValidationError
from tortoise.exceptions import BaseORMException
from tortoise.transactions import in_transaction

from DTO.module_optimizer import ModuleCreateRequest, ModuleImportResponse
from exceptions import EncounterHubError, InvalidModuleDataError
from models import Module
from models.module import ModuleSource
from models.repos import module_repo
from service.module_optimizer.module_service import validate_module, validate_parts

logger = logging.getLogger(__name__)


@dataclass
class ImportErrorDetail:
    index: int
    uuid: Optional[str]
    error: str


@dataclass
class ImportResult:
    """가져오기 결과"""

    added: int = 0
    updated: int = 0
    errors: int = 0
    error_list: List[ImportErrorDetail] = field(default_factory=list)

    def add_error(self, index: int, uuid: Optional[str], message: str) -> None:
        self.errors += 1
        self.error_list.append(ImportErrorDetail(index, uuid, message))

    def to_response(self) -> ModuleImportResponse:
        return ModuleImportResponse(
            added=self.added,
            updated=self.updated,
            errors=self.errors,
            error_list=[
                {"index": e.index, "uuid": e.uuid, "error": e.error}
                for e in self.error_list
            ],
        )


class ModuleImportService:
    """모듈 일괄 가져오기"""

    @staticmethod
    async def import_modules(user_id: int, modules: Sequence[Any]) -> ImportResult:
        """
        모듈 목록 가져오기

        Args:
            user_id: 사용자 ID
            modules: 원본 모듈 dict 목록

        Returns:
            ImportResult (추가/갱신/오류 수)
        """
        result = ImportResult()

        for index, raw in enumerate(modules):
            uuid = raw.get("uuid") if isinstance(raw, dict) else None
            try:
                added = await ModuleImportService._import_one(user_id, raw)
            except EncounterHubError as e:
                result.add_error(index, uuid, e.message)
                continue
            except BaseORMException as e:
                logger.error(f"모듈 가져오기 저장 실패: user={user_id}, index={index}", exc_info=True)
                result.add_error(index, uuid, "저장 중 오류가 발생했습니다.")
                continue

            if added:
                result.added += 1
            else:
                result.updated += 1

        logger.info(
            f"모듈 가져오기: user={user_id}, 추가 {result.added}, "
            f"갱신 {result.updated}, 오류 {result.errors}"
        )
        return result

    @staticmethod
    async def _import_one(user_id: int, raw: Any) -> bool:
        """
        모듈 한 개 추가 또는 갱신

        Returns:
            새로 추가했으면 True
        """
        if not isinstance(raw, dict):
            raise InvalidModuleDataError("모듈 데이터 형식이 올바르지 않습니다.")

        try:
            data = ModuleCreateRequest.model_validate(raw)
        except ValidationError:
            raise InvalidModuleDataError("필수 항목이 없거나 형식이 올바르지 않습니다.")

        category = validate_module(data, strict=True)
        parts = validate_parts(data.parts)

        async with in_transaction() as conn:
            existing = await module_repo.get_module_by_uuid(data.uuid, using_db=conn)
            if existing is not None and existing.user_id != user_id:
                raise InvalidModuleDataError("다른 사용자가 등록한 모듈입니다.")

            if existing is None:
                module = await Module.create(
                    uuid=data.uuid,
                    name=data.name,
                    config_id=data.config_id,
                    quality=data.quality,
                    category=category,
                    source=ModuleSource.IMPORT,
                    user_id=user_id,
                    using_db=conn,
                )
            else:
                module = existing
                module.name = data.name
                module.config_id = data.config_id
                module.quality = data.quality
                module.category = category
                module.source = ModuleSource.IMPORT
                await module.save(using_db=conn)

            await module_repo.replace_parts(module, parts, using_db=conn)

        return existing is None
