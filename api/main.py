import logging
from contextlib import asynccontextmanager

import asyncpg
import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core import db, logs, settings
from leaderboards import router as leaderboards_router
from profiles import resource as profiles_resource
from profiles import router as profiles_router
from steps import resource as steps_resource
from steps import router as steps_router

load_dotenv(".env.local")

logger = logging.getLogger(__name__)

SCHEMA = (steps_resource.DDL, profiles_resource.DDL)


async def sync_schema() -> None:
    # Creates missing tables only; existing tables are left untouched.
    for statement in SCHEMA:
        await db.execute(statement)
    logger.info("schema_synced tables=%s", len(SCHEMA))


@asynccontextmanager
async def lifespan(_: FastAPI):
    logs.configure_logging()
    # Initialize the DB pool once per process.
    await db.init_pool()
    try:
        if settings.database_sync():
            await sync_schema()
        yield
    finally:
        await db.close_pool()


async def database_error_handler(request: Request, exc: asyncpg.PostgresError) -> JSONResponse:
    logger.error("database_error method=%s path=%s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Database error."})


def create_app() -> FastAPI:
    app = FastAPI(title="Charity Steps API", version="0.1.0", lifespan=lifespan)

    origins = settings.cors_origins()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Credentials cannot be combined with a wildcard origin.
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Range", "Location"],
    )
    app.add_exception_handler(asyncpg.PostgresError, database_error_handler)

    app.include_router(leaderboards_router.router, tags=["leaderboards"])
    app.include_router(steps_router.router, tags=["steps"])
    app.include_router(profiles_router.router, tags=["profiles"])

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.get("/")
    def root() -> dict:
        return {"message": "charity steps api"}

    return app


app = create_app()


def run() -> None:
    logs.configure_logging()
    host, port = settings.server_host(), settings.server_port()
    logger.info("Listening on port %s", port)
    uvicorn.run(app, host=host, port=port, log_level=settings.log_level().lower())


if __name__ == "__main__":
    run()
