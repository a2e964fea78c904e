import os
import sys

import loguru

from hookified.enums import Environment
from hookified.utils.context import hook_id_var, run_id_var

ENVIRONMENT = os.getenv("ENVIRONMENT", Environment.LOCAL.value)

# When set, logs are written as JSON lines to this file instead of stdout
LOG_FILE_PATH = os.getenv("LOG_FILE_PATH", None)

LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | <level>{level}</level> | "
    "[hook={extra[hook_id]} run={extra[run_id]}] | {file.name}:{line} | {message}"
)

# Track if logging has been initialized
_logging_initialized = False


def inject_run_context(record):
    """Tag the record with the hook and run currently executing, if any"""
    record["extra"]["hook_id"] = hook_id_var.get()
    record["extra"]["run_id"] = run_id_var.get()


def setup_logging():
    """Set up logging for the API process and the arq worker"""
    global _logging_initialized

    if _logging_initialized:
        return

    # Don't setup logging in test environment
    if ENVIRONMENT == Environment.TEST.value:
        return

    log_level = os.getenv("LOG_LEVEL", "DEBUG").upper()

    try:
        loguru.logger.remove(0)
    except ValueError:
        # Handler might already be removed
        pass

    patched = loguru.logger.patch(inject_run_context)

    if LOG_FILE_PATH:
        patched.add(
            LOG_FILE_PATH,
            level=log_level,
            serialize=True,
            enqueue=True,
            backtrace=True,
            diagnose=False,  # Action configs may carry credentials
        )
    else:
        patched.add(sys.stdout, format=LOG_FORMAT, level=log_level, colorize=True)

    loguru.logger = patched
    _logging_initialized = True
