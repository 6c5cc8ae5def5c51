"""
Web UI Module - FastAPI-based web interface
===========================================

This module provides a web front end for the ELIZA responder:
- Chat page
- JSON reply endpoint
- Rule listing and reload endpoints
"""

from .app import create_app, run_app
from .routes import router

__all__ = [
    "create_app",
    "run_app",
    "router",
]
