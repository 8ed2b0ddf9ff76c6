# app.py
import asyncio
import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from tortoise.contrib.fastapi import register_tortoise

from api import module_optimizer_router, register_exception_handlers, upload_router
from service.module_optimizer.cache import optimization_cache

load_dotenv()

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """만료 캐시 정리 태스크 시작/종료"""
    prune_task = asyncio.create_task(optimization_cache.run_prune_loop())
    logger.info("Encounter hub 서버 준비 완료")
    try:
        yield
    finally:
        prune_task.cancel()
        await optimization_cache.drain()


def create_app(db_url: Optional[str] = None, generate_schemas: Optional[bool] = None) -> FastAPI:
    """
    FastAPI 앱 생성

    Args:
        db_url: Tortoise DSN (없으면 DATABASE_URL)
        generate_schemas: 시작 시 테이블 생성 여부 (없으면 GENERATE_SCHEMAS == "TRUE")
    """
    configure_logging()

    db_url = db_url or os.getenv("DATABASE_URL")
    if not db_url:
        raise RuntimeError("환경변수 DATABASE_URL을 .env에 설정해주세요")
    if generate_schemas is None:
        generate_schemas = os.getenv("GENERATE_SCHEMAS", "").upper() == "TRUE"

    app = FastAPI(title="Encounter Hub API", lifespan=lifespan)
    register_exception_handlers(app)
    app.include_router(upload_router)
    app.include_router(module_optimizer_router)

    @app.get("/ping")
    async def ping():
        return {"status": "ok"}

    register_tortoise(
        app,
        db_url=db_url,
        modules={"models": ["models"]},
        generate_schemas=generate_schemas,
    )
    return app


if __name__ == "__main__":
    import uvicorn

    app = create_app()
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT") or 8080)
    logger.info(f"서버 시작: {host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level=os.getenv("LOG_LEVEL", "info").lower())
