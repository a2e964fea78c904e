import os
from pathlib import Path

# Absolute path to the package directory (i.e. the directory containing
# app.py). Used when constructing file-system paths elsewhere.
APP_ROOT_DIR: Path = Path(__file__).resolve().parent

DATABASE_URL = os.environ["DATABASE_URL"]
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379")

DEPLOYMENT_MODE = os.getenv("DEPLOYMENT_MODE", "oss")

# Public base URL of this service, used for scheduler callbacks,
# provider webhook registration and webhook details.
APP_URL = os.getenv("APP_URL", "http://localhost:8000").rstrip("/")
API_PREFIX = "/api/v1"

# Cron scheduler
CRON_SECRET = os.getenv("CRON_SECRET")
CRON_JOB_PREFIX = "hook_"
CRON_SETUP_CACHE_TTL_SECONDS = float(os.getenv("CRON_SETUP_CACHE_TTL_SECONDS", "300"))
CRON_POLLING_ENABLED = os.getenv("CRON_POLLING_ENABLED", "false").lower() == "true"

# Telegram action
TELEGRAM_BOT_TOKEN = os.getenv("TELEGRAM_BOT_TOKEN")
TELEGRAM_API_BASE_URL = os.getenv(
    "TELEGRAM_API_BASE_URL", "https://api.telegram.org"
).rstrip("/")

# Contract call action
ADMIN_WALLET_PRIVATE_KEY = os.getenv("ADMIN_WALLET_PRIVATE_KEY")
CONTRACT_RPC_URL = os.getenv("CONTRACT_RPC_URL")

# Onchain notification provider (Alchemy Notify)
ALCHEMY_AUTH_TOKEN = os.getenv("ALCHEMY_AUTH_TOKEN")
ALCHEMY_DASHBOARD_API_URL = os.getenv(
    "ALCHEMY_DASHBOARD_API_URL", "https://dashboard.alchemy.com/api"
).rstrip("/")
ALCHEMY_WEBHOOK_SECRET = os.getenv("ALCHEMY_WEBHOOK_SECRET")

# Inbound firing handoff
FIRING_DISPATCH_BACKEND = os.getenv("FIRING_DISPATCH_BACKEND", "local")
FIRING_WORKER_CONCURRENCY = int(os.getenv("FIRING_WORKER_CONCURRENCY", "10"))
FIRING_QUEUE_SIZE = int(os.getenv("FIRING_QUEUE_SIZE", "1000"))
FIRING_SHUTDOWN_TIMEOUT = float(os.getenv("FIRING_SHUTDOWN_TIMEOUT", "30"))

# Sentry configuration
SENTRY_DSN = os.getenv("SENTRY_DSN")
ENABLE_TELEMETRY = os.getenv("ENABLE_TELEMETRY", "false").lower() == "true"
