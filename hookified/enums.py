from enum import Enum


class Environment(Enum):
    LOCAL = "local"
    PRODUCTION = "production"
    TEST = "test"


class TriggerType(Enum):
    ONCHAIN = "ONCHAIN"
    CRON = "CRON"
    WEBHOOK = "WEBHOOK"
    MANUAL = "MANUAL"


class ActionType(Enum):
    TELEGRAM = "TELEGRAM"
    WEBHOOK = "WEBHOOK"
    CONTRACT_CALL = "CONTRACT_CALL"
    CHAIN = "CHAIN"


class HookStatus(Enum):
    """Lifecycle status of a hook.

    ACTIVE and PAUSED are only entered through an explicit user toggle.
    ERROR is set by the system when the hook's own configuration can no
    longer fire unattended, and is only left through a user toggle.
    """

    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    ERROR = "ERROR"


class HookRunStatus(Enum):
    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class ActionStatus(Enum):
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class FiringDispatchBackend(Enum):
    LOCAL = "local"
    ARQ = "arq"
