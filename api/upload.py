"""전투 기록 업로드 API"""
from fastapi import APIRouter, Depends

from api.dependencies import get_current_user
from DTO.upload import (
    CheckHashesRequest, CheckHashesResponse,
    UploadEncountersRequest, UploadEncountersResponse,
)
from models import User
from service.dedup.upload_service import UploadService

router = APIRouter(prefix="/upload", tags=["upload"])


@router.post("/encounters", response_model=UploadEncountersResponse)
async def upload_encounters(
    body: UploadEncountersRequest,
    user: User = Depends(get_current_user),
) -> UploadEncountersResponse:
    result = await UploadService.upload_encounters(user.id, body.encounters)
    return UploadEncountersResponse(ingested=result.ingested, created=result.created, ids=result.ids)


@router.post("/check", response_model=CheckHashesResponse)
async def check_hashes(
    body: CheckHashesRequest,
    user: User = Depends(get_current_user),
) -> CheckHashesResponse:
    return await UploadService.check_hashes(body.hashes)
