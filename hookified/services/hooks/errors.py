# hookified/services/hooks/errors.py
from typing import List, Optional


class HookEngineError(Exception):
    """Base class for errors raised by the hook engine.

    Each subclass carries the HTTP status the outermost request handler
    should answer with, and a stable machine-readable code.
    """

    status_code: int = 500
    error_code: str = "HOOK_ENGINE_ERROR"

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []

    def to_detail(self) -> dict:
        detail = {"message": self.message, "code": self.error_code}
        if self.errors:
            detail["errors"] = self.errors
        return detail


class ConfigurationError(HookEngineError):
    status_code = 400
    error_code = "INVALID_CONFIGURATION"


class InvalidTriggerConfig(ConfigurationError):
    error_code = "INVALID_TRIGGER_CONFIG"


class InvalidActionConfig(ConfigurationError):
    error_code = "INVALID_ACTION_CONFIG"


class Unauthorized(HookEngineError):
    status_code = 401
    error_code = "UNAUTHORIZED"


class HookAccessDenied(HookEngineError):
    status_code = 403
    error_code = "FORBIDDEN"


class HookNotFound(HookEngineError):
    status_code = 404
    error_code = "HOOK_NOT_FOUND"


class HookNotFireable(HookEngineError):
    """The lifecycle gate refused an automated firing."""

    status_code = 400
    error_code = "HOOK_NOT_ACTIVE"


class InvalidLifecycleTransition(HookEngineError):
    status_code = 409
    error_code = "INVALID_LIFECYCLE_TRANSITION"


class ExternalRegistrationError(HookEngineError):
    """Registration with an external provider failed."""

    status_code = 502
    error_code = "EXTERNAL_REGISTRATION_FAILED"


class SchedulerError(HookEngineError):
    status_code = 502
    error_code = "SCHEDULER_ERROR"
