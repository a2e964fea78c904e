"""Value types passed between trigger sources, the executor and action executors."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional

from hookified.enums import ActionStatus, HookRunStatus, TriggerType
from hookified.utils.time import isoformat, utc_now


@dataclass
class TriggerContext:
    """Normalized description of one firing event.

    `timestamp` is when the context was built, which is distinct from when
    the underlying event happened (block time, webhook receipt time).
    """

    type: TriggerType
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: str = field(default_factory=lambda: isoformat(utc_now()))

    @property
    def payload(self) -> Any:
        """The event body an outbound action forwards by default.

        For webhook firings this is the parsed request body, without the
        request metadata collected alongside it.
        """
        if self.type == TriggerType.WEBHOOK and "webhookPayload" in self.data:
            return self.data["webhookPayload"]
        return self.data

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "data": self.data, "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "TriggerContext":
        return cls(
            type=TriggerType(payload["type"]),
            data=payload.get("data") or {},
            timestamp=payload.get("timestamp") or isoformat(utc_now()),
        )


@dataclass
class ActionExecutionResult:
    action_id: str
    action_type: str
    status: ActionStatus
    started_at: datetime
    completed_at: datetime
    result: Any = None
    error: Optional[str] = None
    retry_count: int = 0
    order: Optional[int] = None

    @property
    def duration_ms(self) -> int:
        return int((self.completed_at - self.started_at).total_seconds() * 1000)

    @property
    def succeeded(self) -> bool:
        return self.status == ActionStatus.SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "actionId": self.action_id,
            "actionType": self.action_type,
            "order": self.order,
            "status": self.status.value,
            "startedAt": isoformat(self.started_at),
            "completedAt": isoformat(self.completed_at),
            "durationMs": self.duration_ms,
            "result": self.result,
            "error": self.error,
            "retryCount": self.retry_count,
        }


# Executes another hook on behalf of a CHAIN action:
# (target hook id, trigger context, chain depth) -> HookExecutionResult
RunHookCallable = Callable[[str, TriggerContext, int], Awaitable["HookExecutionResult"]]


@dataclass
class ExecutionContext:
    """Everything an action executor may use besides its own config."""

    hook_id: str
    user_id: int
    run_id: str
    trigger: TriggerContext
    variables: Dict[str, Any]
    chain_depth: int = 0
    run_hook: Optional[RunHookCallable] = None


@dataclass
class HookExecutionResult:
    run_id: str
    status: HookRunStatus
    total_duration_ms: int
    actions: List[ActionExecutionResult] = field(default_factory=list)
    failed_at: Optional[int] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == HookRunStatus.SUCCESS
