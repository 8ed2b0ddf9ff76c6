"""
모듈 최적화 DTO

카테고리/정렬 기준 같은 값 검증은 서비스에서 하며
여기서는 JSON 형태만 정의합니다.
"""
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from DTO.upload import CamelModel


class OptimizePreferencesIn(CamelModel):
    priority_attributes: list[str] = Field(default_factory=list)
    desired_levels: dict[str, int] = Field(default_factory=dict)
    excluded_attributes: list[str] = Field(default_factory=list)


class OptimizeConstraintsIn(CamelModel):
    max_solutions: Optional[int] = None
    sort_mode: Optional[str] = None


class OptimizeRequest(CamelModel):
    category: str
    preferences: Optional[OptimizePreferencesIn] = None
    constraints: Optional[OptimizeConstraintsIn] = None


class ModuleAttribute(CamelModel):
    id: Optional[int] = None
    part_id: int
    name: str
    value: int
    type: str


class CombinationModule(CamelModel):
    id: int
    uuid: str
    name: str
    quality: int
    attributes: list[ModuleAttribute] = Field(default_factory=list)


class ModuleCombination(CamelModel):
    """최적화 결과 조합 한 개"""

    rank: int
    score: float
    priority_level: int
    total_attr_value: int
    modules: list[CombinationModule]
    attr_breakdown: dict[str, int]


class OptimizeMetadata(CamelModel):
    total_modules: int
    processing_time_ms: int
    algorithm: str
    cache_hit: bool


class OptimizeResponse(CamelModel):
    solutions: list[ModuleCombination]
    metadata: OptimizeMetadata


# =============================================================================
# 모듈 관리
# =============================================================================


class ModulePartIn(CamelModel):
    part_id: int
    name: str
    value: int
    type: Optional[str] = None


class ModuleCreateRequest(CamelModel):
    uuid: str
    name: Optional[str] = None
    config_id: int
    quality: int
    category: Optional[str] = None
    parts: list[ModulePartIn]


class ModuleUpdateRequest(CamelModel):
    name: Optional[str] = None
    quality: Optional[int] = None
    parts: Optional[list[ModulePartIn]] = None


class ModuleImportRequest(CamelModel):
    modules: list[dict[str, Any]]
    """항목별로 검증하므로 원본 dict로 받음"""


class ImportErrorItem(CamelModel):
    index: int
    uuid: Optional[str] = None
    error: str


class ModuleImportResponse(CamelModel):
    added: int
    updated: int
    errors: int
    error_list: list[ImportErrorItem] = Field(default_factory=list)


class ModuleOut(CamelModel):
    id: int
    uuid: str
    name: str
    config_id: int
    quality: int
    category: str
    source: str
    parts: list[ModuleAttribute]

    @classmethod
    def from_model(cls, module) -> "ModuleOut":
        """parts가 로드된 Module에서 생성"""
        return cls(
            id=module.id,
            uuid=module.uuid,
            name=module.name,
            config_id=module.config_id,
            quality=module.quality,
            category=getattr(module.category, "value", module.category),
            source=getattr(module.source, "value", module.source),
            parts=[
                ModuleAttribute(
                    id=p.id,
                    part_id=p.part_id,
                    name=p.name,
                    value=p.value,
                    type=getattr(p.type, "value", p.type),
                )
                for p in module.parts
            ],
        )


class ModuleListResponse(CamelModel):
    modules: list[ModuleOut]
    total: int


# 내보내기 파일은 가져오기 형식과 같은 snake_case


class ExportedPart(BaseModel):
    part_id: int
    name: str
    value: int
    type: str


class ExportedModule(BaseModel):
    uuid: str
    name: str
    config_id: int
    quality: int
    category: str
    parts: list[ExportedPart]

    @classmethod
    def from_model(cls, module) -> "ExportedModule":
        return cls(
            uuid=module.uuid,
            name=module.name,
            config_id=module.config_id,
            quality=module.quality,
            category=getattr(module.category, "value", module.category),
            parts=[
                ExportedPart(
                    part_id=p.part_id,
                    name=p.name,
                    value=p.value,
                    type=getattr(p.type, "value", p.type),
                )
                for p in module.parts
            ],
        )


class ModuleExportResponse(BaseModel):
    version: str = "1.0"
    exported_at: datetime
    modules: list[ExportedModule]


class HistoryItem(CamelModel):
    """최적화 기록 목록 항목"""

    id: int
    category: str
    priority_attributes: Optional[list[str]] = None
    desired_levels: Optional[dict[str, int]] = None
    excluded_attributes: Optional[list[str]] = None
    sort_mode: str
    max_solutions: int
    processing_time_ms: int
    top_score: float
    created_at: datetime


class HistoryListResponse(CamelModel):
    history: list[HistoryItem]
    total: int


class HistoryMetadata(CamelModel):
    category: str
    sort_mode: str
    max_solutions: int
    total_modules: int
    processing_time_ms: int
    created_at: datetime


class HistoryDetailResponse(CamelModel):
    solutions: list[ModuleCombination]
    metadata: HistoryMetadata
