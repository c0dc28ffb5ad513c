# tutorbook/main.py
import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from tutorbook.api.v1.endpoints import (
    admin,
    auth,
    bookings,
    health,
    payments,
    students,
    subjects,
    teachers,
    upload,
    users,
)
from tutorbook.core.config import settings
from tutorbook.core.exceptions import AppError
from tutorbook.core.logging_config import setup_logging
from tutorbook.db.init_db import init_db
from tutorbook.db.session import engine
from tutorbook.schemas.common import fail

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.PROJECT_NAME)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup():
    init_db(seed=settings.SEED_DEFAULT_DATA)
    logger.info(f"{settings.PROJECT_NAME} started")


@app.on_event("shutdown")
def on_shutdown():
    engine.dispose()


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(fail(exc.message, exc.errors)),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=fail(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(p) for p in err.get("loc", ())), "message": err.get("msg")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder(fail("Validation failed", errors)),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=fail("Internal server error"),
    )


api = settings.API_PREFIX
app.include_router(auth.router, prefix=f"{api}/auth")
app.include_router(users.router, prefix=f"{api}/users")
app.include_router(subjects.router, prefix=f"{api}/subjects")
app.include_router(teachers.router, prefix=f"{api}/teachers")
app.include_router(students.router, prefix=f"{api}/students")
app.include_router(bookings.router, prefix=f"{api}/bookings")
app.include_router(payments.router, prefix=f"{api}/payments")
app.include_router(upload.router, prefix=f"{api}/upload")
app.include_router(admin.router, prefix=f"{api}/admin")
app.include_router(health.router, prefix=f"{api}/health")
