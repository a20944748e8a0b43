import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pjmotors import models  # noqa: F401  (registers tables on Base.metadata)
from pjmotors.config import CORS_ORIGINS, LOG_LEVEL
from pjmotors.database import Base, engine
from pjmotors.errors import RecordError
from pjmotors.logging_config import setup_logging
from pjmotors.routers import car, documents

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(LOG_LEVEL)
    Base.metadata.create_all(bind=engine)
    logger.info("PJ Motors API started")
    yield
    logger.info("PJ Motors API shutting down")


app = FastAPI(title="PJ Motors", version="0.1.0", lifespan=lifespan)

# CORS: the desktop shell and local dev frontends
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RecordError)
async def record_error_handler(request: Request, exc: RecordError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"loc": [str(part) for part in error.get("loc", ())], "msg": error.get("msg", "")}
        for error in exc.errors()
    ]
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": errors})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"{request.method} {request.url.path} raised {type(exc).__name__}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# Register routers
app.include_router(car.router)
app.include_router(documents.router)


# Health check, also polled by the desktop launcher
@app.get("/")
async def root():
    return {"status": "healthy", "message": "PJ Motors vehicle records API"}
