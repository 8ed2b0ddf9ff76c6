"""
예외 → HTTP 응답 변환

모든 오류는 {"error": {"code", "message"}} 형태로 내려갑니다.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from exceptions import EncounterHubError

logger = logging.getLogger(__name__)


def error_body(code: str, message: str) -> dict:
    return {"error": {"code": code, "message": message}}


async def handle_hub_error(request: Request, exc: EncounterHubError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} 실패: {exc.code}")
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.code, exc.message))


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.debug(f"{request.method} {request.url.path} 요청 검증 실패: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content=error_body("validation_error", "요청 형식이 올바르지 않습니다."),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(EncounterHubError, handle_hub_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
