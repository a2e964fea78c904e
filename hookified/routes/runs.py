from fastapi import APIRouter, Depends, HTTPException

from hookified.db import db_client
from hookified.db.models import UserModel
from hookified.schemas.hook import HookRunResponse
from hookified.services.auth.depends import get_user

router = APIRouter(prefix="/runs", tags=["runs"])


@router.get("/{run_id}")
async def get_run(run_id: str, user: UserModel = Depends(get_user)) -> HookRunResponse:
    run = await db_client.get_hook_run_for_user(run_id, user.id)
    if run is None:
        raise HTTPException(status_code=404, detail="Run not found")
    return HookRunResponse.model_validate(run)
