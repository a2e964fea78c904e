from fastapi import APIRouter
from loguru import logger

from hookified.routes.admin import router as admin_router
from hookified.routes.cron import router as cron_router
from hookified.routes.hooks import router as hooks_router
from hookified.routes.registry import router as registry_router
from hookified.routes.runs import router as runs_router
from hookified.routes.webhooks import router as webhooks_router

router = APIRouter(
    tags=["main"],
    responses={404: {"description": "Not found"}},
)

router.include_router(hooks_router)
router.include_router(runs_router)
router.include_router(webhooks_router)
router.include_router(cron_router)
router.include_router(registry_router)
router.include_router(admin_router)


@router.get("/health")
async def health():
    logger.debug("Health endpoint called")
    return {"message": "OK"}
