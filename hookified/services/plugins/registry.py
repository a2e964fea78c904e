"""Static registry of the built-in trigger and action kinds.

The registry is populated once at import time from a closed set of kinds
and is not extensible at runtime.
"""

from typing import Any, Dict, List, Union, assert_never

from pydantic import TypeAdapter, ValidationError

from hookified.enums import ActionType, TriggerType
from hookified.schemas.configs import (
    ACTION_CONFIG_MODELS,
    TRIGGER_CONFIG_MODELS,
    ActionBlock,
    TriggerConfig,
)
from hookified.services.execution.executors.base import BaseActionExecutor
from hookified.services.execution.executors.chain import ChainExecutor
from hookified.services.execution.executors.contract_call import ContractCallExecutor
from hookified.services.execution.executors.telegram import TelegramExecutor
from hookified.services.execution.executors.webhook import WebhookExecutor
from hookified.services.hooks.errors import InvalidActionConfig, InvalidTriggerConfig
from hookified.services.plugins.actions import (
    ChainAction,
    ContractCallAction,
    TelegramAction,
    WebhookAction,
)
from hookified.services.plugins.base import (
    ActionDefinition,
    TriggerDefinition,
    ValidationResult,
)
from hookified.services.plugins.triggers import (
    CronTrigger,
    ManualTrigger,
    OnchainTrigger,
    WebhookTrigger,
)

_trigger_config_adapter = TypeAdapter(TriggerConfig)
_action_block_adapter = TypeAdapter(ActionBlock)


def _trigger_definition(trigger_type: TriggerType) -> TriggerDefinition:
    match trigger_type:
        case TriggerType.CRON:
            return CronTrigger()
        case TriggerType.WEBHOOK:
            return WebhookTrigger()
        case TriggerType.ONCHAIN:
            return OnchainTrigger()
        case TriggerType.MANUAL:
            return ManualTrigger()
        case _:
            assert_never(trigger_type)


def _action_definition(action_type: ActionType) -> ActionDefinition:
    match action_type:
        case ActionType.TELEGRAM:
            return TelegramAction()
        case ActionType.WEBHOOK:
            return WebhookAction()
        case ActionType.CONTRACT_CALL:
            return ContractCallAction()
        case ActionType.CHAIN:
            return ChainAction()
        case _:
            assert_never(action_type)


def _action_executor(action_type: ActionType) -> BaseActionExecutor:
    match action_type:
        case ActionType.TELEGRAM:
            return TelegramExecutor()
        case ActionType.WEBHOOK:
            return WebhookExecutor()
        case ActionType.CONTRACT_CALL:
            return ContractCallExecutor()
        case ActionType.CHAIN:
            return ChainExecutor()
        case _:
            assert_never(action_type)


def _coerce(enum_cls, value):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return None


class PluginRegistry:
    def __init__(self):
        self._triggers: Dict[TriggerType, TriggerDefinition] = {
            t: _trigger_definition(t) for t in TriggerType
        }
        self._actions: Dict[ActionType, ActionDefinition] = {
            a: _action_definition(a) for a in ActionType
        }
        self._executors: Dict[ActionType, BaseActionExecutor] = {
            a: _action_executor(a) for a in ActionType
        }

        # Every kind must have a typed config model as well
        missing = [t for t in TriggerType if t not in TRIGGER_CONFIG_MODELS] + [
            a for a in ActionType if a not in ACTION_CONFIG_MODELS
        ]
        if missing:
            raise RuntimeError(f"No config model registered for {missing}")

    # -- validation ---------------------------------------------------------

    def validate_trigger(
        self, trigger_type: Union[TriggerType, str], config: Any
    ) -> ValidationResult:
        kind = _coerce(TriggerType, trigger_type)
        if kind is None:
            return ValidationResult.from_errors([f"Unknown trigger type: {trigger_type}"])
        if not isinstance(config, dict):
            return ValidationResult.from_errors(["Trigger configuration must be an object"])
        return self._triggers[kind].validate_config(config)

    def validate_action(
        self, action_type: Union[ActionType, str], config: Any
    ) -> ValidationResult:
        kind = _coerce(ActionType, action_type)
        if kind is None:
            return ValidationResult.from_errors([f"Unknown action type: {action_type}"])
        if not isinstance(config, dict):
            return ValidationResult.from_errors(["Action configuration must be an object"])
        return self._actions[kind].validate_config(config)

    def validate_hook(
        self, trigger_type: Union[TriggerType, str], trigger_config: Any, actions: List[dict]
    ) -> ValidationResult:
        """Validate a trigger and every action, collecting all errors."""
        trigger_result = self.validate_trigger(trigger_type, trigger_config)
        errors = list(trigger_result.errors)
        warnings = list(trigger_result.warnings)

        if not actions:
            errors.append("At least one action is required")

        for index, action in enumerate(actions or [], start=1):
            if not isinstance(action, dict):
                errors.append(f"Action {index}: Invalid action block")
                continue
            result = self.validate_action(action.get("type"), action.get("config"))
            errors.extend(f"Action {index}: {e}" for e in result.errors)
            warnings.extend(f"Action {index}: {w}" for w in result.warnings)

        return ValidationResult.from_errors(errors, warnings)

    # -- typed parsing ------------------------------------------------------

    def parse_trigger_config(self, trigger_type: TriggerType, config: dict):
        """Parse a stored trigger config into its typed model.

        Raises:
            InvalidTriggerConfig: if the config does not fit its kind
        """
        try:
            return _trigger_config_adapter.validate_python(
                {**(config or {}), "type": trigger_type.value}
            )
        except ValidationError as e:
            raise InvalidTriggerConfig(
                f"Invalid {trigger_type.value} trigger configuration",
                errors=[err["msg"] for err in e.errors()],
            ) from e

    def parse_action_block(self, block: dict):
        """Parse a stored action block into its typed model.

        Raises:
            InvalidActionConfig: if the block does not fit its kind
        """
        try:
            return _action_block_adapter.validate_python(block)
        except ValidationError as e:
            raise InvalidActionConfig(
                f"Invalid {block.get('type')} action configuration",
                errors=[err["msg"] for err in e.errors()],
            ) from e

    # -- lookup -------------------------------------------------------------

    def get_executor(self, action_type: Union[ActionType, str]) -> BaseActionExecutor:
        kind = _coerce(ActionType, action_type)
        if kind is None:
            raise InvalidActionConfig(f"Unknown action type: {action_type}")
        return self._executors[kind]

    def get_trigger(self, trigger_type: TriggerType) -> TriggerDefinition:
        return self._triggers[trigger_type]

    def get_action(self, action_type: ActionType) -> ActionDefinition:
        return self._actions[action_type]

    def list_triggers(self) -> List[dict]:
        return [definition.describe() for definition in self._triggers.values()]

    def list_actions(self) -> List[dict]:
        return [definition.describe() for definition in self._actions.values()]


plugin_registry = PluginRegistry()
