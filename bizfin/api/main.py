"""
FastAPI Main Application

Entry point for the business finance tracker API.
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .database import init_db
from .routes import (
    capital_router,
    cashflow_router,
    dashboard_router,
    employees_router,
    expenses_router,
    liabilities_router,
    pdc_router,
    profile_router,
    salaries_router,
)

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logger.info("Starting Business Finance Tracker API...")
    if os.getenv("DB_CREATE_TABLES", "true").lower() == "true":
        init_db()
    yield
    # Shutdown
    logger.info("Shutting down Business Finance Tracker API...")


app = FastAPI(
    title="Business Finance Tracker API",
    description="Expenses, liabilities, salaries, cashflow, PDC and capital injections",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS configuration
cors_origins = os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(dashboard_router, prefix="/api")
app.include_router(expenses_router, prefix="/api")
app.include_router(liabilities_router, prefix="/api")
app.include_router(employees_router, prefix="/api")
app.include_router(salaries_router, prefix="/api")
app.include_router(cashflow_router, prefix="/api")
app.include_router(pdc_router, prefix="/api")
app.include_router(capital_router, prefix="/api")
app.include_router(profile_router, prefix="/api")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors as {"error": ...} bodies."""
    if isinstance(exc.detail, dict):
        content = exc.detail
    else:
        content = {"error": exc.detail}

    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


def _error_field(loc: tuple) -> str:
    if len(loc) < 2 or loc[0] == "body":
        return "body"
    return ".".join(str(part) for part in loc[1:])


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed JSON or query parameters of the wrong type."""
    details = [
        {
            "field": _error_field(error.get("loc", ())),
            "message": error.get("msg", "Invalid value"),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "details": details},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything else is a generic server error."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Business Finance Tracker API",
        "version": "1.0.0",
        "status": "running",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/api")
async def api_info():
    """API information endpoint."""
    return {
        "endpoints": {
            "dashboard": "/api/dashboard",
            "expenses": "/api/expenses",
            "liabilities": "/api/liabilities",
            "employees": "/api/employees",
            "salaries": "/api/salaries",
            "cashflow": "/api/cashflow",
            "pdc": "/api/pdc",
            "capital": "/api/capital",
            "profile": "/api/profile",
        },
        "authentication": "Authorization: Bearer <token> or session_token cookie",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "bizfin.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=os.getenv("ENVIRONMENT", "production") == "development",
    )
