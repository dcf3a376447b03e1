"""
FastAPI application - Main entry point
"""

from dotenv import load_dotenv

load_dotenv()

import asyncio
import logging
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import src.api.endpoints.mock_mpesa as mock_mpesa_module
from src.api.endpoints.checkout import (
    get_checkout_config,
    router as checkout_router,
    session_store,
    sweep_idle_sessions,
)
from src.error_handler import ErrorHandler

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="M-Pesa Checkout API",
    description="STK push checkout: initiate a payment and follow it to completion",
    version="1.0.0",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

error_handler = ErrorHandler()
config = get_checkout_config()
_background_tasks = []

app.include_router(checkout_router)

# Fake backend for local development; the real client can target this app.
if config.integrations_mode != "real":
    mock_mpesa_module.pending_checks = config.mock_pending_checks
    app.include_router(mock_mpesa_module.router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    payload = error_handler.handle_exception(exc, context={"path": request.url.path})
    return JSONResponse(status_code=500, content=payload)


# ============================================================================
# ENDPOINTS
# ============================================================================
@app.get("/", tags=["Health"])
async def root():
    """Health check endpoint."""
    return {"service": "M-Pesa Checkout API", "status": "healthy", "version": "1.0.0", "timestamp": datetime.now().isoformat()}


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check (gateway mode)."""
    return {
        "status": "healthy",
        "gateway": "real" if config.use_real_gateway() else "mock",
        "timestamp": datetime.now().isoformat(),
    }


# ============================================================================
# STARTUP/SHUTDOWN EVENTS
# ============================================================================
@app.on_event("startup")
async def startup_event():
    """Initialize on startup"""
    logger.info("Starting M-Pesa Checkout API...")
    if config.use_real_gateway() and not config.api_base_url:
        logger.warning("INTEGRATIONS_MODE=real but CHECKOUT_API_BASE_URL is not set; submissions will fail")
    _background_tasks.append(
        asyncio.create_task(sweep_idle_sessions(session_store, config.session_sweep_interval_seconds))
    )


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown"""
    logger.info("Shutting down M-Pesa Checkout API...")
    for task in _background_tasks:
        task.cancel()
    _background_tasks.clear()
    session_store.close_all()

