from fastapi import APIRouter, Depends, HTTPException, Query

from hookified.db.models import UserModel
from hookified.services.auth.depends import get_superuser
from hookified.services.cron.engine import cron_engine
from hookified.services.cron.setup_cache import SetupValidationCache
from hookified.services.dependencies import get_setup_cache
from hookified.services.hooks.errors import HookEngineError

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/cron-setup")
async def get_cron_setup(
    refresh: bool = Query(False),
    user: UserModel = Depends(get_superuser),
    cache: SetupValidationCache = Depends(get_setup_cache),
):
    """Itemized report of the cron scheduler prerequisites."""
    report = await cache.get(refresh=refresh)
    return report.to_dict()


@router.delete("/cron-setup/cache")
async def clear_cron_setup_cache(
    user: UserModel = Depends(get_superuser),
    cache: SetupValidationCache = Depends(get_setup_cache),
):
    cache.invalidate()
    return {"success": True}


@router.get("/cron-jobs")
async def get_cron_jobs(user: UserModel = Depends(get_superuser)):
    try:
        return await cron_engine.drift_report()
    except HookEngineError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
