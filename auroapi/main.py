import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from mangum import Mangum
from starlette.middleware.cors import CORSMiddleware

from auroapi import containers
from auroapi.core.exception_handlers import register_exception_handlers
from auroapi.core.logging_middleware import LoggingMiddleware
from auroapi.logging_config import setup_logging
from auroapi.routers import (
    account_router,
    auth_router,
    health_router,
    mining_router,
    price_router,
    referral_router,
    system_router,
    transaction_router,
)

logger = logging.getLogger("auroapi")


@asynccontextmanager
async def lifespan(app: FastAPI):
    database = app.container.repositories.database()  # type: ignore[attr-defined]
    database.create_tables()
    logger.info("Auro ledger API started")
    yield
    database.dispose()


def create_app() -> FastAPI:
    load_dotenv("auroapi/.env")

    container = containers.Container()
    settings = container.config.config()

    setup_logging(
        log_level=settings.LOG_LEVEL,
        json_logs=settings.ENVIRONMENT != "development",
    )

    app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG, lifespan=lifespan)
    app.container = container  # type: ignore

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)

    register_exception_handlers(app)

    app.include_router(health_router.router)
    for router_module in (
        auth_router,
        account_router,
        price_router,
        transaction_router,
        referral_router,
        mining_router,
        system_router,
    ):
        app.include_router(router_module.router, prefix=settings.API_V1_STR)

    return app


app = create_app()

handler = Mangum(app)
