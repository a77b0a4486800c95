"""
API Module — FastAPI Rating Service

Public API:
- app: FastAPI application instance
- router: API routes
"""

from .main import app
from .routes import router

__all__ = [
    "app",
    "router",
]
