# student_invoice/main.py - Local API behind the Student Invoice desktop shell
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging
import traceback
import time

from student_invoice.core.config import settings
from student_invoice.core.db import db_manager, health_check as db_health_check
from student_invoice.api.routers import gmail, invoices, templates, terms
from student_invoice.api.routers import settings as settings_router


# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format=settings.log_format_string()
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Starting Student Invoice API...")
    logger.info(f"Environment: {settings.ENV}")

    logger.info("Creating database tables...")
    db_manager.create_tables()

    yield

    logger.info("Shutting down Student Invoice API...")
    db_manager.close()


app = FastAPI(
    title=settings.API_TITLE,
    description="Half-term invoices for recurring music lessons",
    version=settings.API_VERSION,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log each request with its status and timing"""
    start_time = time.time()
    logger.debug(f"Incoming {request.method} {request.url.path}")

    response = await call_next(request)

    process_time = time.time() - start_time
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({process_time:.3f}s)")
    return response


app.add_middleware(CORSMiddleware, **settings.get_cors_config())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions"""
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
    logger.error(traceback.format_exc())

    if settings.is_development:
        return JSONResponse(
            status_code=500,
            content={
                "detail": str(exc),
                "traceback": traceback.format_exc()
            }
        )
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/health")
async def health():
    return {
        "status": "healthy",
        "environment": settings.ENV,
        "version": settings.API_VERSION,
        "database": db_health_check(),
    }


# Include routers
app.include_router(terms.router, prefix="/api/terms", tags=["Terms"])
app.include_router(templates.router, prefix="/api/templates", tags=["Templates"])
app.include_router(settings_router.router, prefix="/api/settings", tags=["Settings"])
app.include_router(invoices.router, prefix="/api/invoices", tags=["Invoices"])
app.include_router(gmail.router, prefix="/api/gmail", tags=["Gmail"])


def run():
    """Console entry point"""
    import uvicorn

    uvicorn.run(
        "student_invoice.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    run()
