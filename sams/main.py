# sams/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlmodel import Session

from . import config
from .accounts import ensure_admin
from .db import engine, init_db
from .errors import SamsError
from .routers import (
    appointments_routes,
    auth_routes,
    companies_routes,
    services_routes,
    staff_routes,
    users_routes,
)

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    if config.ADMIN_EMAIL and config.ADMIN_PASSWORD:
        with Session(engine) as session:
            ensure_admin(session, config.ADMIN_EMAIL, config.ADMIN_PASSWORD)
    logger.info("Application started")
    yield


app = FastAPI(title="S-AMS", lifespan=lifespan)


@app.exception_handler(SamsError)
async def sams_error_handler(request: Request, exc: SamsError):
    if exc.status_code >= 403:
        logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"success": False, "message": exc.message})


@app.get("/health")
def health_check():
    return {"status": "ok"}


app.include_router(auth_routes.router)
app.include_router(users_routes.router)
app.include_router(companies_routes.router)
app.include_router(services_routes.router)
app.include_router(staff_routes.router)
app.include_router(appointments_routes.router)
