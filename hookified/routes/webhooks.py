"""Inbound firing endpoints.

Both endpoints acknowledge with 202 once the firing is handed to the
dispatcher; execution results are recorded as hook runs, never returned
to the caller.
"""

import json

from fastapi import APIRouter, Depends, HTTPException, Request
from loguru import logger

from hookified.db import db_client
from hookified.enums import TriggerType
from hookified.schemas.hook import FiringAcceptedResponse
from hookified.services.dependencies import get_firing_dispatcher
from hookified.services.execution.dispatcher import DispatchQueueFull, FiringDispatcher
from hookified.services.execution.lifecycle import can_fire
from hookified.services.hooks.errors import HookEngineError
from hookified.services.onchain.engine import onchain_engine
from hookified.services.triggers.context_builder import build_webhook_context

PROVIDER_SIGNATURE_HEADER = "x-alchemy-signature"

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


def _client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


@router.post("/onchain/{hook_id}", status_code=202)
async def receive_onchain_notification(
    hook_id: str,
    request: Request,
    dispatcher: FiringDispatcher = Depends(get_firing_dispatcher),
) -> FiringAcceptedResponse:
    body = await request.body()

    try:
        onchain_engine.verify_notification(
            body, request.headers.get(PROVIDER_SIGNATURE_HEADER)
        )
        try:
            payload = json.loads(body)
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid JSON payload")
        if not isinstance(payload, dict):
            raise HTTPException(status_code=400, detail="Invalid notification payload")
        contexts = await onchain_engine.accept_notification(hook_id, payload)
    except HookEngineError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    try:
        for context in contexts:
            await dispatcher.submit(hook_id, context)
    except DispatchQueueFull:
        raise HTTPException(status_code=503, detail="Too many pending firings")

    return FiringAcceptedResponse(
        hook_id=hook_id,
        message="Notification accepted",
        accepted=len(contexts),
    )


@router.post("/{hook_id}", status_code=202)
async def receive_webhook(
    hook_id: str,
    request: Request,
    dispatcher: FiringDispatcher = Depends(get_firing_dispatcher),
) -> FiringAcceptedResponse:
    # The signature covers the raw bytes, so read them before any parsing
    body = await request.body()

    hook = await db_client.get_hook(hook_id)
    if hook is None:
        raise HTTPException(status_code=404, detail="Hook not found")
    if hook.trigger_type != TriggerType.WEBHOOK.value:
        raise HTTPException(
            status_code=400, detail="Hook is not configured for webhook triggers"
        )
    if not can_fire(hook, TriggerType.WEBHOOK):
        raise HTTPException(status_code=400, detail="Hook is not active")

    try:
        context = build_webhook_context(
            body,
            request.headers,
            (hook.trigger_config or {}).get("secret"),
            client_ip=_client_ip(request),
        )
    except HookEngineError as e:
        logger.warning(f"Rejected webhook for hook {hook_id}: {e}")
        raise HTTPException(status_code=e.status_code, detail=e.message)

    try:
        await dispatcher.submit(hook_id, context)
    except DispatchQueueFull:
        raise HTTPException(status_code=503, detail="Too many pending firings")

    logger.info(f"Accepted webhook firing for hook {hook_id}")
    return FiringAcceptedResponse(hook_id=hook_id, message="Webhook received")
