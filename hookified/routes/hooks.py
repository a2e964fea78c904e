from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from loguru import logger

from hookified.db import db_client
from hookified.db.models import UserModel
from hookified.schemas.hook import (
    CreateHookRequest,
    HookResponse,
    HookRunListResponse,
    HookRunResponse,
    RunResultResponse,
    ToggleHookRequest,
    UpdateHookRequest,
)
from hookified.services.auth.depends import get_user
from hookified.services.execution.hook_executor import hook_executor
from hookified.services.hooks.errors import HookEngineError
from hookified.services.hooks.hook_service import hook_service
from hookified.services.triggers.context_builder import build_manual_context
from hookified.utils.pagination import DEFAULT_PAGE_SIZE, clamp_limit, clamp_offset

router = APIRouter(prefix="/hooks", tags=["hooks"])


@router.post("", status_code=201)
async def create_hook(
    request: CreateHookRequest, user: UserModel = Depends(get_user)
) -> HookResponse:
    try:
        hook = await hook_service.create_hook(
            user_id=user.id,
            name=request.name,
            description=request.description,
            trigger_type=request.trigger_type,
            trigger_config=request.trigger_config,
            actions=request.actions,
        )
    except HookEngineError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
    return HookResponse.model_validate(hook)


@router.get("")
async def list_hooks(user: UserModel = Depends(get_user)) -> List[HookResponse]:
    hooks = await db_client.list_hooks_for_user(user.id)
    return [HookResponse.model_validate(hook) for hook in hooks]


@router.get("/{hook_id}")
async def get_hook(hook_id: str, user: UserModel = Depends(get_user)) -> HookResponse:
    try:
        hook = await hook_service.get_owned_hook(hook_id, user.id)
    except HookEngineError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
    return HookResponse.model_validate(hook)


@router.put("/{hook_id}")
async def update_hook(
    hook_id: str, request: UpdateHookRequest, user: UserModel = Depends(get_user)
) -> HookResponse:
    try:
        hook = await hook_service.update_hook(
            hook_id,
            user.id,
            name=request.name,
            description=request.description,
            trigger_type=request.trigger_type,
            trigger_config=request.trigger_config,
            actions=request.actions,
        )
    except HookEngineError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
    return HookResponse.model_validate(hook)


@router.delete("/{hook_id}")
async def delete_hook(hook_id: str, user: UserModel = Depends(get_user)):
    try:
        await hook_service.delete_hook(hook_id, user.id)
    except HookEngineError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
    return {"success": True}


@router.post("/{hook_id}/toggle")
async def toggle_hook(
    hook_id: str, request: ToggleHookRequest, user: UserModel = Depends(get_user)
) -> HookResponse:
    try:
        hook = await hook_service.toggle_hook(hook_id, user.id, request.is_active)
    except HookEngineError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
    return HookResponse.model_validate(hook)


@router.post("/{hook_id}/regenerate-secret")
async def regenerate_secret(hook_id: str, user: UserModel = Depends(get_user)):
    try:
        hook = await hook_service.regenerate_secret(hook_id, user.id)
    except HookEngineError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
    return {"secret": hook.trigger_config["secret"]}


@router.get("/{hook_id}/webhook-details")
async def webhook_details(hook_id: str, user: UserModel = Depends(get_user)):
    try:
        return await hook_service.webhook_details(hook_id, user.id)
    except HookEngineError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())


@router.post("/{hook_id}/run")
async def run_hook(
    hook_id: str,
    context: Optional[Dict[str, Any]] = Body(default=None),
    user: UserModel = Depends(get_user),
) -> RunResultResponse:
    """Run a hook now and wait for the result.

    Manual runs are accepted whatever the hook's status, so an owner can
    retry a paused or failed hook.
    """
    try:
        hook = await hook_service.get_owned_hook(hook_id, user.id)
        result = await hook_executor.execute_hook(
            hook, build_manual_context(user.id, context)
        )
    except HookEngineError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
    except Exception as e:
        logger.exception(f"Manual run of hook {hook_id} failed")
        raise HTTPException(status_code=500, detail=f"Hook execution failed: {e}")

    return RunResultResponse(
        run_id=result.run_id, status=result.status.value, error=result.error
    )


@router.get("/{hook_id}/runs")
async def list_hook_runs(
    hook_id: str,
    limit: int = Query(DEFAULT_PAGE_SIZE),
    offset: int = Query(0),
    user: UserModel = Depends(get_user),
) -> HookRunListResponse:
    try:
        await hook_service.get_owned_hook(hook_id, user.id)
    except HookEngineError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())

    limit = clamp_limit(limit)
    offset = clamp_offset(offset)
    runs, total = await db_client.list_hook_runs(hook_id, limit=limit, offset=offset)
    return HookRunListResponse(
        runs=[HookRunResponse.model_validate(run) for run in runs],
        total=total,
        limit=limit,
        offset=offset,
        has_more=offset + len(runs) < total,
    )
