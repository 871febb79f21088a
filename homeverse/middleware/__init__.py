"""
Middleware package for the HomeVerse Listings API.
"""

from .logging import RequestLoggingMiddleware

__all__ = ["RequestLoggingMiddleware"]
