from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class CreateHookRequest(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    trigger_type: str
    # Stored as-is; keys are camelCase (cronExpression, chainId, ...)
    trigger_config: Dict[str, Any] = Field(default_factory=dict)
    actions: List[Dict[str, Any]]


class UpdateHookRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    trigger_type: Optional[str] = None
    trigger_config: Optional[Dict[str, Any]] = None
    actions: Optional[List[Dict[str, Any]]] = None


class ToggleHookRequest(BaseModel):
    is_active: bool


class HookResponse(BaseModel):
    id: str
    user_id: int
    name: str
    description: Optional[str]
    trigger_type: str
    trigger_config: Dict[str, Any]
    actions: List[Dict[str, Any]]
    status: str
    is_active: bool
    last_executed_at: Optional[datetime]
    last_checked_at: Optional[datetime]
    alchemy_webhook_id: Optional[str]
    created_at: datetime
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class HookRunResponse(BaseModel):
    id: str
    hook_id: str
    status: str
    triggered_at: datetime
    completed_at: Optional[datetime]
    error: Optional[str]
    meta: Dict[str, Any]

    class Config:
        from_attributes = True


class HookRunListResponse(BaseModel):
    runs: List[HookRunResponse]
    total: int
    limit: int
    offset: int
    has_more: bool


class RunResultResponse(BaseModel):
    run_id: str
    status: str
    error: Optional[str] = None


class FiringAcceptedResponse(BaseModel):
    hook_id: str
    message: str
    accepted: int = 1
