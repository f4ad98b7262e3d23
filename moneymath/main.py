"""
Main FastAPI application entry point.
"""

import logging

from fastapi import FastAPI

from moneymath.config import get_settings
from moneymath.api import router as api_router

settings = get_settings()

logging.basicConfig(level=settings.log_level, format=settings.log_format)

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Personal finance calculators: loans, savings, retirement and returns",
    version="0.1.0",
    debug=settings.debug,
)

# Include API routes
app.include_router(api_router, prefix=settings.api_prefix)


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {"status": "healthy", "version": "0.1.0"}
