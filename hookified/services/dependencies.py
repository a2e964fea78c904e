"""Process-wide collaborators owned by the application state."""

from fastapi import Request

from hookified.services.cron.setup_cache import SetupValidationCache
from hookified.services.execution.dispatcher import FiringDispatcher


def get_firing_dispatcher(request: Request) -> FiringDispatcher:
    return request.app.state.firing_dispatcher


def get_setup_cache(request: Request) -> SetupValidationCache:
    return request.app.state.setup_cache
