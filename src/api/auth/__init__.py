"""
Auth API package.

Contains the registration, verification and session routes.
"""

from src.api.auth.routes import router

__all__ = ["router"]
