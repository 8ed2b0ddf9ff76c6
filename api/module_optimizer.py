"""모듈 최적화 / 모듈 관리 API"""
from typing import Optional

from fastapi import APIRouter, Depends, Response

from api.dependencies import get_current_user
from DTO.module_optimizer import (
    ExportedModule, HistoryDetailResponse, HistoryListResponse,
    ModuleCreateRequest, ModuleExportResponse, ModuleImportRequest, ModuleImportResponse,
    ModuleListResponse, ModuleOut, ModuleUpdateRequest,
    OptimizeRequest, OptimizeResponse,
)
from models import User
from service.module_optimizer.history_service import HistoryService
from service.module_optimizer.import_service import ModuleImportService
from service.module_optimizer.module_service import ModuleService
from service.module_optimizer.optimize_service import OptimizeService
from utils.time_util import utc_now

router = APIRouter(prefix="/module-optimizer", tags=["module-optimizer"])


@router.post("/optimize", response_model=OptimizeResponse)
async def optimize(
    body: OptimizeRequest,
    user: User = Depends(get_current_user),
) -> OptimizeResponse:
    return await OptimizeService.optimize(user.id, body)


@router.post("/modules/import", response_model=ModuleImportResponse)
async def import_modules(
    body: ModuleImportRequest,
    user: User = Depends(get_current_user),
) -> ModuleImportResponse:
    result = await ModuleImportService.import_modules(user.id, body.modules)
    return result.to_response()


@router.get("/modules", response_model=ModuleListResponse)
async def list_modules(
    category: Optional[str] = None,
    quality: Optional[int] = None,
    user: User = Depends(get_current_user),
) -> ModuleListResponse:
    modules = await ModuleService.get_user_modules(user.id, category, quality)
    return ModuleListResponse(
        modules=[ModuleOut.from_model(m) for m in modules],
        total=len(modules),
    )


@router.get("/modules/export", response_model=ModuleExportResponse)
async def export_modules(
    response: Response,
    category: Optional[str] = None,
    user: User = Depends(get_current_user),
) -> ModuleExportResponse:
    modules = await ModuleService.export_modules(user.id, category)
    response.headers["Content-Disposition"] = "attachment; filename=modules-export.json"
    return ModuleExportResponse(
        exported_at=utc_now(),
        modules=[ExportedModule.from_model(m) for m in modules],
    )


@router.get("/modules/{module_id}", response_model=ModuleOut)
async def get_module(
    module_id: int,
    user: User = Depends(get_current_user),
) -> ModuleOut:
    module = await ModuleService.get_module(user.id, module_id)
    return ModuleOut.from_model(module)


@router.post("/modules", response_model=ModuleOut, status_code=201)
async def create_module(
    body: ModuleCreateRequest,
    user: User = Depends(get_current_user),
) -> ModuleOut:
    module = await ModuleService.create_module(user.id, body)
    return ModuleOut.from_model(module)


@router.put("/modules/{module_id}", response_model=ModuleOut)
async def update_module(
    module_id: int,
    body: ModuleUpdateRequest,
    user: User = Depends(get_current_user),
) -> ModuleOut:
    module = await ModuleService.update_module(user.id, module_id, body)
    return ModuleOut.from_model(module)


@router.delete("/modules/{module_id}", status_code=204)
async def delete_module(
    module_id: int,
    user: User = Depends(get_current_user),
) -> Response:
    await ModuleService.delete_module(user.id, module_id)
    return Response(status_code=204)


@router.get("/history", response_model=HistoryListResponse)
async def list_history(
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    user: User = Depends(get_current_user),
) -> HistoryListResponse:
    return await HistoryService.get_history(user.id, limit, offset)


@router.get("/history/{result_id}", response_model=HistoryDetailResponse)
async def get_history_item(
    result_id: int,
    user: User = Depends(get_current_user),
) -> HistoryDetailResponse:
    return await HistoryService.get_history_item(user.id, result_id)


@router.delete("/history/{result_id}", status_code=204)
async def delete_history_item(
    result_id: int,
    user: User = Depends(get_current_user),
) -> Response:
    await HistoryService.delete_history_item(user.id, result_id)
    return Response(status_code=204)
