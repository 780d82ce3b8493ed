from __future__ import annotations

import logging
import os

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from habits_api.db import dispose_engine
from habits_api.db_init import init_db
from habits_api.repositories import ForbiddenError, NotFoundError
from habits_api.routes import categories, habits, records, session, settings

logger = logging.getLogger("habits_api")


def create_app() -> FastAPI:
    logging.basicConfig(
        level=os.getenv("BACKEND_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    app = FastAPI(title="Habit Tracker API", version="0.1.0")

    app.include_router(session.router)
    app.include_router(habits.router)
    app.include_router(categories.router)
    app.include_router(records.router)
    app.include_router(settings.router)

    @app.on_event("startup")
    async def _startup():
        await init_db()

    @app.on_event("shutdown")
    async def _shutdown():
        await dispose_engine()

    @app.exception_handler(RequestValidationError)
    async def _request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})

    @app.exception_handler(ValueError)
    async def _validation_error_handler(request: Request, exc: ValueError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ForbiddenError)
    async def _forbidden_handler(request: Request, exc: ForbiddenError):
        return JSONResponse(status_code=403, content={"detail": str(exc)})

    @app.exception_handler(NotFoundError)
    async def _not_found_handler(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(SQLAlchemyError)
    async def _storage_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception("Storage failure on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": "Internal error"})

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception: %s", exc)
        return JSONResponse(status_code=500, content={"detail": "Internal error"})

    @app.get("/health")
    async def health():
        return {"ok": True}

    return app


app = create_app()
