"""Typed trigger and action configurations.

Hook rows store trigger configs and action blocks as JSON. At the registry
boundary they are parsed into these models, one per kind. Unknown fields
are kept (forward compatible); required fields are enforced by the plugin
validators before parsing.
"""

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from hookified.enums import ActionType, TriggerType


class _ConfigModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


# ---------------------------------------------------------------------------
# Triggers
# ---------------------------------------------------------------------------


class CronTriggerConfig(_ConfigModel):
    type: Literal["CRON"] = "CRON"
    cron_expression: str = Field(alias="cronExpression")
    timezone: str = "UTC"


class WebhookTriggerConfig(_ConfigModel):
    type: Literal["WEBHOOK"] = "WEBHOOK"
    secret: Optional[str] = None


class EventFilter(_ConfigModel):
    parameter: str
    operator: str
    value: Any = None


class OnchainEventConfig(_ConfigModel):
    contract_address: str = Field(alias="contractAddress")
    event_name: str = Field(alias="eventName")
    # topic0 of the event, 0x-prefixed 32-byte hex
    event_signature: Optional[str] = Field(default=None, alias="eventSignature")
    filters: List[EventFilter] = Field(default_factory=list)


class OnchainTriggerConfig(_ConfigModel):
    type: Literal["ONCHAIN"] = "ONCHAIN"
    chain_id: int = Field(alias="chainId")
    contract_address: Optional[str] = Field(default=None, alias="contractAddress")
    event_name: Optional[str] = Field(default=None, alias="eventName")
    event_signature: Optional[str] = Field(default=None, alias="eventSignature")
    events: List[OnchainEventConfig] = Field(default_factory=list)

    def monitored_events(self) -> List[OnchainEventConfig]:
        """Events to monitor, accepting both the single-event and list forms."""
        if self.events:
            return list(self.events)
        if self.contract_address and self.event_name:
            return [
                OnchainEventConfig(
                    contractAddress=self.contract_address,
                    eventName=self.event_name,
                    eventSignature=self.event_signature,
                )
            ]
        return []


class ManualTriggerConfig(_ConfigModel):
    type: Literal["MANUAL"] = "MANUAL"


TriggerConfig = Annotated[
    Union[
        CronTriggerConfig,
        WebhookTriggerConfig,
        OnchainTriggerConfig,
        ManualTriggerConfig,
    ],
    Field(discriminator="type"),
]

TRIGGER_CONFIG_MODELS: Dict[TriggerType, type[_ConfigModel]] = {
    TriggerType.CRON: CronTriggerConfig,
    TriggerType.WEBHOOK: WebhookTriggerConfig,
    TriggerType.ONCHAIN: OnchainTriggerConfig,
    TriggerType.MANUAL: ManualTriggerConfig,
}


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

DEFAULT_TELEGRAM_MESSAGE = "🚨 Hook executed successfully!"


class TelegramActionConfig(_ConfigModel):
    chat_id: Union[int, str] = Field(alias="chatId")
    message_template: Optional[str] = Field(default=None, alias="messageTemplate")


class WebhookActionConfig(_ConfigModel):
    webhook_url: str = Field(alias="webhookUrl")
    method: str = "POST"
    headers: Dict[str, str] = Field(default_factory=dict)
    body_template: Optional[Union[str, Dict[str, Any], List[Any]]] = Field(
        default=None, alias="bodyTemplate"
    )


class ContractCallActionConfig(_ConfigModel):
    contract_address: str = Field(alias="contractAddress")
    function_name: Optional[str] = Field(default=None, alias="functionName")
    parameters: List[Any] = Field(default_factory=list)
    chain_id: int = Field(alias="chainId")
    is_native_transfer: bool = Field(default=False, alias="isNativeTransfer")


class ChainActionConfig(_ConfigModel):
    target_hook_id: str = Field(alias="targetHookId")


class _ActionBlockBase(_ConfigModel):
    id: str
    order: int


class TelegramActionBlock(_ActionBlockBase):
    type: Literal["TELEGRAM"]
    config: TelegramActionConfig


class WebhookActionBlock(_ActionBlockBase):
    type: Literal["WEBHOOK"]
    config: WebhookActionConfig


class ContractCallActionBlock(_ActionBlockBase):
    type: Literal["CONTRACT_CALL"]
    config: ContractCallActionConfig


class ChainActionBlock(_ActionBlockBase):
    type: Literal["CHAIN"]
    config: ChainActionConfig


ActionBlock = Annotated[
    Union[
        TelegramActionBlock,
        WebhookActionBlock,
        ContractCallActionBlock,
        ChainActionBlock,
    ],
    Field(discriminator="type"),
]

ACTION_CONFIG_MODELS: Dict[ActionType, type[_ConfigModel]] = {
    ActionType.TELEGRAM: TelegramActionConfig,
    ActionType.WEBHOOK: WebhookActionConfig,
    ActionType.CONTRACT_CALL: ContractCallActionConfig,
    ActionType.CHAIN: ChainActionConfig,
}
