import logging
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from app.core.database import Base, engine, SessionLocal
from app.core.config import settings
from app.core.exceptions import AppException
from app.api.v1.main import api_router
from app.services import check_in_service
from app import models  # noqa: F401

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Create all database tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
)

# Parse CORS origins from comma-separated string in settings
cors_origins = [origin.strip() for origin in settings.CORS_ORIGINS.split(",")]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Flatten pydantic errors into {field: message}, first message per field wins."""
    errors = {}
    for error in exc.errors():
        location = [str(part) for part in error["loc"][1:]] or [str(error["loc"][0])]
        message = error["msg"]
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.setdefault(".".join(location), message)
    return JSONResponse(
        status_code=HTTPStatus.UNPROCESSABLE_ENTITY,
        content={"detail": "The given data was invalid.", "errors": errors},
    )


app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/")
async def read_root():
    return {"message": f"{settings.PROJECT_NAME} backend is running"}


scheduler = AsyncIOScheduler()


def run_overdue_reconciliation():
    """Persist OVERDUE on open check-ins past their date, with a fresh DB session"""
    db = SessionLocal()
    try:
        check_in_service.reconcile_overdue_check_ins(db)
    finally:
        db.close()


@app.on_event("startup")
async def on_startup():
    if settings.ENABLE_OVERDUE_SCHEDULER:
        scheduler.add_job(
            run_overdue_reconciliation,
            'interval',
            minutes=settings.OVERDUE_CHECK_INTERVAL_MINUTES,
            id='overdue_check_ins',
            replace_existing=True
        )
        if not scheduler.running:
            scheduler.start()
        logger.info("Overdue check-in scheduler started (interval: %sm)", settings.OVERDUE_CHECK_INTERVAL_MINUTES)


@app.on_event("shutdown")
async def on_shutdown():
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")


if __name__ == "__main__":
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
