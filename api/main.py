import logging
import os
from contextlib import asynccontextmanager

import asyncpg
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from approval import router as approval_router
from auth import router as auth_router
from core import db, storage
from media import router as media_router
from submissions import router as submissions_router

def log_level() -> int:
    level = logging.getLevelName(os.environ.get("LOG_LEVEL", "INFO").strip().upper())
    # getLevelName returns "Level X" for names it does not know.
    return level if isinstance(level, int) else logging.INFO


logging.basicConfig(
    level=log_level(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

DEFAULT_CORS_ORIGINS = "http://localhost:5501,http://127.0.0.1:5501"


def cors_origins() -> list[str]:
    raw = os.environ.get("CORS_ORIGINS", "").strip() or DEFAULT_CORS_ORIGINS
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Bad storage settings should stop the process before it takes traffic.
    storage.init_storage()
    await db.init_pool()
    try:
        yield
    finally:
        await db.close_pool()
        storage.reset_storage()


app = FastAPI(title="OrbitFund API", lifespan=lifespan)

# Allow the local frontend dev server to call this API from the browser.
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(asyncpg.PostgresError)
async def database_error_handler(request: Request, exc: asyncpg.PostgresError) -> JSONResponse:
    logger.exception("database_error path=%s", request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Database error."})


app.include_router(auth_router.router, tags=["auth"])
app.include_router(submissions_router.router, tags=["submissions"])
app.include_router(approval_router.router, tags=["approval"])
app.include_router(media_router.router, tags=["media"])


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/api/test/alive")
def alive() -> dict:
    return {"message": "The API breathes! All systems nominal."}


@app.get("/api/test/ping")
def ping() -> dict:
    return {"message": "Pong!"}


@app.get("/")
def root() -> dict:
    return {"message": "orbitfund api"}
