"""Endpoints called by the cron scheduler.

These are not user-authenticated; every request must carry the shared
secret in ``x-cron-secret``. Error responses carry only the error message,
never internal detail.
"""

import hmac
from typing import Annotated

from fastapi import APIRouter, Header, HTTPException
from loguru import logger

from hookified.constants import CRON_SECRET
from hookified.db import db_client
from hookified.services.cron.engine import cron_engine
from hookified.services.cron.schedule import is_valid_expression
from hookified.services.execution.lifecycle import mark_hook_error
from hookified.services.hooks.errors import HookEngineError
from hookified.utils.time import isoformat

router = APIRouter(prefix="/cron", tags=["cron"])


def verify_cron_secret(x_cron_secret: str | None) -> None:
    if not CRON_SECRET:
        logger.error("CRON_SECRET is not configured, rejecting scheduler call")
        raise HTTPException(status_code=500, detail="Cron execution is not configured")
    if not x_cron_secret or not hmac.compare_digest(x_cron_secret, CRON_SECRET):
        raise HTTPException(status_code=401, detail="Unauthorized")


@router.post("/execute/{hook_id}")
async def execute_cron_hook(
    hook_id: str,
    x_cron_secret: Annotated[str | None, Header()] = None,
):
    verify_cron_secret(x_cron_secret)

    try:
        result = await cron_engine.execute_scheduled(hook_id)
    except HookEngineError as e:
        logger.warning(f"Scheduled execution of hook {hook_id} refused: {e}")
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.exception(f"Scheduled execution of hook {hook_id} failed")
        try:
            await mark_hook_error(hook_id, f"Execution endpoint failure: {e}")
        except Exception as mark_error:
            logger.error(f"Could not flag hook {hook_id} as ERROR: {mark_error}")
        raise HTTPException(status_code=500, detail="Hook execution failed")

    return {"run_id": result.run_id, "status": result.status.value}


@router.post("/check")
async def check_cron_hooks(x_cron_secret: Annotated[str | None, Header()] = None):
    verify_cron_secret(x_cron_secret)
    return await cron_engine.check_due_hooks()


@router.get("/execute/{hook_id}")
async def describe_cron_hook(
    hook_id: str,
    x_cron_secret: Annotated[str | None, Header()] = None,
):
    """Debug view of a CRON hook's schedule and its scheduler job."""
    verify_cron_secret(x_cron_secret)

    hook = await db_client.get_hook(hook_id)
    if hook is None:
        raise HTTPException(status_code=404, detail="Hook not found")

    config = hook.trigger_config or {}
    expression = config.get("cronExpression")
    job = await cron_engine.job_manager.get_job_status(hook_id)
    return {
        "hook_id": hook.id,
        "trigger_type": hook.trigger_type,
        "status": hook.status,
        "is_active": hook.is_active,
        "cron_expression": expression,
        "timezone": config.get("timezone") or "UTC",
        "expression_valid": is_valid_expression(expression),
        "last_executed_at": isoformat(hook.last_executed_at),
        "last_checked_at": isoformat(hook.last_checked_at),
        "job": job.to_dict(),
    }
