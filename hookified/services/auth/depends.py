from typing import Annotated

from fastapi import Header, HTTPException
from loguru import logger

from hookified.constants import DEPLOYMENT_MODE
from hookified.db import db_client
from hookified.db.models import UserModel


async def get_user(
    authorization: Annotated[str | None, Header()] = None,
) -> UserModel:
    # Session handling lives in the identity provider. Only the OSS token
    # mode is served by this process.
    if DEPLOYMENT_MODE != "oss":
        logger.error(f"Unsupported deployment mode {DEPLOYMENT_MODE}")
        raise HTTPException(status_code=500, detail="Authentication is not configured")

    return await _handle_oss_auth(authorization)


async def _handle_oss_auth(authorization: str | None) -> UserModel:
    """
    Handle authentication for OSS deployment mode.
    Uses the authorization token as provider_id and creates the user if needed.
    """
    if not authorization:
        raise HTTPException(status_code=401, detail="Authorization header required")

    # Remove "Bearer " prefix if present
    token = (
        authorization.replace("Bearer ", "")
        if authorization.startswith("Bearer ")
        else authorization
    )

    if not token:
        raise HTTPException(status_code=401, detail="Invalid authorization token")

    try:
        return await db_client.get_or_create_user_by_provider_id(provider_id=token)
    except Exception as e:
        raise HTTPException(
            status_code=500, detail=f"Error while creating user from database {e}"
        )


async def get_superuser(
    authorization: Annotated[str | None, Header()] = None,
) -> UserModel:
    """
    Dependency to check if the authenticated user is a superuser.
    Raises HTTPException if user is not authenticated or not a superuser.
    """
    user = await get_user(authorization)

    if not user.is_superuser:
        raise HTTPException(
            status_code=403, detail="Access denied. Superuser privileges required."
        )

    return user
