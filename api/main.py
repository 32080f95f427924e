"""
Dealer Operations Dashboard API - Main Application.

FastAPI application with CORS enabled for frontend communication.
"""

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from api import __version__

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Create FastAPI application
app = FastAPI(
    title="Dealer Operations Dashboard API",
    description="REST API for dealer yard overviews, the campervan schedule and dealer reallocations",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Configure CORS - Allow all origins for development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", tags=["Health"])
def health_check():
    """
    Health check endpoint.

    Returns the API status and version.
    """
    return {
        "status": "healthy",
        "version": __version__,
        "service": "dealer-dashboard-api"
    }


@app.get("/", tags=["Root"])
def root():
    """
    Root endpoint with API information.
    """
    return {
        "message": "Dealer Operations Dashboard API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health"
    }


# Import and include routers
from api.routers import dates, dealers, reallocations, schedule

app.include_router(dealers.router, prefix="/api/v1", tags=["Dealers"])
app.include_router(schedule.router, prefix="/api/v1", tags=["Schedule"])
app.include_router(reallocations.router, prefix="/api/v1", tags=["Reallocations"])
app.include_router(dates.router, prefix="/api/v1", tags=["Dates"])


if __name__ == "__main__":
    host = os.getenv("API_HOST", "0.0.0.0")
    port = int(os.getenv("API_PORT", "8000"))
    logging.getLogger(__name__).info(f"Starting dashboard API on {host}:{port}")
    uvicorn.run(app, host=host, port=port)
