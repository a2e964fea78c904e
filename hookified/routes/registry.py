from typing import List

from fastapi import APIRouter

from hookified.services.plugins.registry import plugin_registry

router = APIRouter(prefix="/registry", tags=["registry"])


@router.get("/triggers")
async def list_triggers() -> List[dict]:
    return plugin_registry.list_triggers()


@router.get("/actions")
async def list_actions() -> List[dict]:
    return plugin_registry.list_actions()
