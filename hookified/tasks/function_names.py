from enum import Enum


class FunctionNames(str, Enum):
    EXECUTE_HOOK_FIRING = "execute_hook_firing"
    CHECK_CRON_HOOKS = "check_cron_hooks"
