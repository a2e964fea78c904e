"""Resolution scope for placeholders in action configs.

The scope exposes:
- ``trigger``: trigger data, addressable both by nested path and by
  flattened dot-keys (``trigger.event.args.value``)
- ``actions[N]``, ``actionN`` and ``action_<id>``: outputs of actions that
  already ran in the current run
- builtins ``hookId``, ``runId`` and ``timestamp``
"""

import re
from typing import Any, Dict

from hookified.services.execution.types import ActionExecutionResult
from hookified.utils.time import isoformat, utc_now

_ALIASABLE_ID = re.compile(r"^[a-zA-Z0-9_-]+$")

# Arrays longer than this are only reachable as a whole
_MAX_FLATTENED_ARRAY = 10


class VariableContextBuilder:
    def __init__(self, trigger_data: Dict[str, Any] | None, hook_id: str, run_id: str):
        self._context: Dict[str, Any] = {
            "trigger": flatten(trigger_data or {}),
            "actions": [],
            "hookId": hook_id,
            "runId": run_id,
            "timestamp": isoformat(utc_now()),
        }

    def add_action_result(self, index: int, result: ActionExecutionResult) -> None:
        """Record a finished action so later actions can reference it."""
        action_data = {
            "id": result.action_id,
            "type": result.action_type,
            "result": result.result,
            "error": result.error,
            "timestamp": isoformat(result.completed_at),
        }

        actions = self._context["actions"]
        while len(actions) <= index:
            actions.append({"id": "", "type": "", "result": None, "error": None})
        actions[index] = action_data

        self._context[f"action{index}"] = action_data
        if result.action_id and _ALIASABLE_ID.match(result.action_id):
            self._context[f"action_{result.action_id}"] = action_data

    def get_context(self) -> Dict[str, Any]:
        return self._context


def flatten(obj: Any, prefix: str = "", result: Dict[str, Any] | None = None) -> Dict[str, Any]:
    """Flatten nested data into dot-notation keys, keeping every level.

    {"event": {"args": {"value": 100}}} becomes
    {"event": {...}, "event.args": {...}, "event.args.value": 100}
    """
    if result is None:
        result = {}

    if isinstance(obj, list):
        if prefix:
            result[prefix] = obj
        if len(obj) <= _MAX_FLATTENED_ARRAY:
            for index, item in enumerate(obj):
                item_key = f"{prefix}[{index}]"
                if isinstance(item, dict):
                    result[item_key] = item
                    flatten(item, item_key, result)
                else:
                    result[item_key] = item
        return result

    if not isinstance(obj, dict):
        if prefix:
            result[prefix] = obj
        return result

    for key, value in obj.items():
        new_key = f"{prefix}.{key}" if prefix else str(key)
        result[new_key] = value
        if isinstance(value, (dict, list)):
            flatten(value, new_key, result)

    return result
