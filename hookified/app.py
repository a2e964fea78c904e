"""Set up logging before importing anything else"""

import sentry_sdk

from hookified.constants import DEPLOYMENT_MODE, ENABLE_TELEMETRY, SENTRY_DSN
from hookified.logging_config import ENVIRONMENT, setup_logging

setup_logging()


if SENTRY_DSN and (
    DEPLOYMENT_MODE != "oss" or (DEPLOYMENT_MODE == "oss" and ENABLE_TELEMETRY)
):
    sentry_sdk.init(
        dsn=SENTRY_DSN,
        send_default_pii=True,
        environment=ENVIRONMENT,
    )
    print(f"Sentry initialized in environment: {ENVIRONMENT}")


from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from hookified.constants import API_PREFIX
from hookified.routes.main import router as main_router
from hookified.services.cron.setup_cache import SetupValidationCache
from hookified.services.execution.dispatcher import build_firing_dispatcher
from hookified.services.hooks.errors import HookEngineError


@asynccontextmanager
async def lifespan(app: FastAPI):
    dispatcher = build_firing_dispatcher()
    await dispatcher.start()

    app.state.firing_dispatcher = dispatcher
    app.state.setup_cache = SetupValidationCache()

    yield  # Run app

    logger.info("Starting graceful shutdown...")
    try:
        await dispatcher.shutdown()
    except Exception as e:
        logger.error(f"Error while stopping the firing dispatcher: {e}")


app = FastAPI(
    title="Hookified API",
    description="API for the Hookified automation engine",
    version="1.0.0",
    openapi_url=f"{API_PREFIX}/openapi.json",
    lifespan=lifespan,
)


# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(HookEngineError)
async def hook_engine_error_handler(request: Request, exc: HookEngineError):
    logger.warning(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.error_code},
    )


api_router = APIRouter()

# include subrouters here
api_router.include_router(main_router)

# main router with api prefix
app.include_router(api_router, prefix=API_PREFIX)
