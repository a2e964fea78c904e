"""ARQ worker configuration - setup logging before importing tasks"""

import ssl
from urllib.parse import urlparse

from hookified.constants import CRON_POLLING_ENABLED, REDIS_URL

# Setup logging - this is idempotent and safe to call multiple times
from hookified.logging_config import setup_logging
from hookified.tasks.function_names import FunctionNames

setup_logging()

# Now import ARQ and task dependencies
from arq import create_pool, cron
from arq.connections import ArqRedis, RedisSettings

from hookified.tasks.hook_firing import check_cron_hooks, execute_hook_firing

parsed_url = urlparse(REDIS_URL)

# Check if we're using TLS (rediss://)
use_ssl = parsed_url.scheme == "rediss"

REDIS_SETTINGS = RedisSettings(
    host=parsed_url.hostname or "localhost",
    port=parsed_url.port or 6379,
    password=parsed_url.password,
    conn_timeout=10,
    ssl=use_ssl,
    ssl_check_hostname=False if use_ssl else None,
)


class WorkerSettings:
    functions = [
        execute_hook_firing,
        check_cron_hooks,
    ]
    # Polling fallback for deployments without the database scheduler
    cron_jobs = [cron(check_cron_hooks, second=0)] if CRON_POLLING_ENABLED else []
    redis_settings = REDIS_SETTINGS
    max_jobs = 10


_redis_pool: ArqRedis | None = None


async def get_arq_redis() -> ArqRedis:
    global _redis_pool
    if _redis_pool is None:
        _redis_pool = await create_pool(REDIS_SETTINGS)
    return _redis_pool


async def enqueue_job(function_name: FunctionNames, *args):
    redis = await get_arq_redis()
    return await redis.enqueue_job(function_name.value, *args)
