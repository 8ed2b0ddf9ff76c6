from api.errors import register_exception_handlers
from api.module_optimizer import router as module_optimizer_router
from api.upload import router as upload_router

__all__ = ["register_exception_handlers", "module_optimizer_router", "upload_router"]
