import logging
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from boxoffice.core.exceptions import BookingEngineError, ValidationError
from boxoffice.db.init_db import create_database, seed_rooms
from boxoffice.db.base import Base
from boxoffice.db.session import engine, SessionLocal
from boxoffice.core.config import settings
from boxoffice.api.v1.router import api_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: Ensure DB exists, create tables, seed the default rooms
    create_database()
    Base.metadata.create_all(bind=engine)
    if settings.SEED_ROOMS:
        db = SessionLocal()
        try:
            seed_rooms(db)
        finally:
            db.close()
    logger.info(
        "Rules: turnaround %d min, %d tickets per person, duration %d-%d min",
        settings.BUFFER_MINUTES,
        settings.MAX_TICKETS_PER_PERSON,
        settings.MIN_SHOWING_DURATION,
        settings.MAX_SHOWING_DURATION,
    )
    yield


from fastapi.middleware.cors import CORSMiddleware

app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

# Set all CORS enabled origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "%s %s -> %d (%.1f ms)",
        request.method,
        request.url.path,
        response.status_code,
        (time.perf_counter() - started) * 1000,
    )
    return response


@app.exception_handler(BookingEngineError)
async def booking_engine_error_handler(request: Request, exc: BookingEngineError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    # Malformed input is a badField like any other; report the first offending field
    first = exc.errors()[0]
    field = str(first["loc"][-1]) if first.get("loc") else "body"
    error = ValidationError(field, first.get("msg", "Invalid value"))
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


app.include_router(api_router, prefix=settings.API_V1_STR)

@app.get("/")
def read_root():
    return {"Hello": "Box Office"}
