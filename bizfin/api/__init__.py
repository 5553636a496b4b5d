"""
FastAPI Backend for the Business Finance Tracker

Provides REST API endpoints for the tracker frontend.
"""

from .main import app

__all__ = ["app"]
