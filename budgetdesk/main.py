"""budgetdesk FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from budgetdesk.api.routes import (
    admin_applications,
    admin_expenses,
    budgets,
    categories,
    expenses,
    notifications,
    startup_calls,
)
from budgetdesk.config import settings
from budgetdesk.database import Base, engine
from budgetdesk.errors import AppError, error_response
from budgetdesk.logging import setup_server_logging

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle (startup and shutdown)."""
    setup_server_logging()
    # Startup: Initialize database tables
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables initialized")
    yield
    logger.info("Application shutting down")


app = FastAPI(
    title=settings.api_title,
    description="Startup-call budget allocation and expense approval",
    version=settings.api_version,
    lifespan=lifespan,
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render domain errors as {error, code, details?}."""
    if exc.http_status >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.http_status} {exc.code}")
    return JSONResponse(status_code=exc.http_status, content=error_response(exc))


# Include routers
app.include_router(startup_calls.router)
app.include_router(budgets.router)
app.include_router(categories.router)
app.include_router(expenses.router)
app.include_router(admin_expenses.router)
app.include_router(admin_applications.router)
app.include_router(notifications.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="budgetdesk API server")
    parser.add_argument("--host", default="0.0.0.0", help="Host to bind to")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind to")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    args = parser.parse_args()

    uvicorn.run("budgetdesk.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
