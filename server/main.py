# server/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api import auth, tasks, users
from config import Settings
from core.context import ServiceContext, build_context
from core.errors import TaskValidatorError
from logging_setup import setup_logging


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    ctx: ServiceContext = app.state.ctx
    logger.info("Starting Task Validator API...")
    ctx.database.init_db()

    yield

    logger.info("Shutting down...")
    ctx.database.dispose()


def create_app(settings: Settings | None = None, ctx: ServiceContext | None = None) -> FastAPI:
    """
    Build the API around an explicit service context.
    Tests pass their own context; `uvicorn main:app` builds one from the environment.
    """
    if ctx is None:
        ctx = build_context(settings or Settings.from_env())
    settings = ctx.settings

    if settings.configure_logging:
        setup_logging(log_dir=settings.log_dir, console_level=settings.log_level)

    app = FastAPI(title="Task Validator API", lifespan=lifespan)
    app.state.ctx = ctx

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(TaskValidatorError)
    async def domain_error_handler(request: Request, exc: TaskValidatorError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.__class__.__name__)
        else:
            logger.info("%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Unexpected error: %s", exc)
        return JSONResponse(status_code=500, content={"detail": "Internal server error."})

    app.include_router(auth.router)
    app.include_router(tasks.router)
    app.include_router(users.router)

    return app


app = create_app()
