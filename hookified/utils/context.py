"""Context variables shared between the executor and the logging setup."""

from contextvars import ContextVar, Token
from typing import Optional, Tuple

hook_id_var: ContextVar[str] = ContextVar("hook_id", default="-")
run_id_var: ContextVar[str] = ContextVar("run_id", default="-")

RunContextTokens = Tuple[Token, Token]


def set_run_context(hook_id: Optional[str], run_id: Optional[str]) -> RunContextTokens:
    """Tag log lines emitted in this task with the hook and run being executed.

    Returns the tokens so callers can restore the previous values; chained
    runs nest inside their parent's context.
    """
    return hook_id_var.set(hook_id or "-"), run_id_var.set(run_id or "-")


def reset_run_context(tokens: RunContextTokens) -> None:
    hook_token, run_token = tokens
    run_id_var.reset(run_token)
    hook_id_var.reset(hook_token)
