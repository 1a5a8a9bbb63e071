import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from create_tables import create_tables
from logging_config import configure_logging
from modules.common.errors import AppError, AuthError, InternalError
from modules.common.timeutils import utcnow
from modules.documents.job import start_orphan_sweep_job
from modules.auth.controllers.auth_controller import router as auth_router
from modules.auth.controllers.user_controller import router as user_router
from modules.documents.controllers.document_controller import router as document_router
from modules.documents.controllers.signature_controller import router as signature_router
from modules.documents.controllers.report_controller import router as report_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # --- Startup ---
    configure_logging(settings.LOG_LEVEL)
    logger.info("Starting application")
    create_tables()
    scheduler = start_orphan_sweep_job() if settings.ORPHAN_SWEEP_ENABLED else None
    yield
    # --- Shutdown ---
    if scheduler is not None:
        scheduler.shutdown(wait=False)
    logger.info("Application stopped")


app = FastAPI(
    title="Document Flow API",
    description="Document management with user acknowledgements and signature reports",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["Accept", "Accept-Language", "Content-Language", "Content-Type", "Authorization"],
    expose_headers=["Content-Disposition", "X-Export-Kind", "X-Export-Skipped"],
    max_age=86400,
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if isinstance(exc, InternalError):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.kind, "message": exc.message},
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = [
        {"field": ".".join(str(part) for part in err["loc"][1:]), "message": err["msg"]}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"error": "validation_error", "message": "Validation failed", "details": details},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": InternalError.kind, "message": InternalError.default_message},
    )


# Routers
app.include_router(auth_router)
app.include_router(user_router)
app.include_router(signature_router)
app.include_router(document_router)
app.include_router(report_router)


@app.get("/health", tags=["health"])
def health():
    return {"status": "OK", "timestamp": utcnow().isoformat()}


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
