"""
Middleware package for the Property Portal API.
"""

from .timing import RequestTimingMiddleware

__all__ = ["RequestTimingMiddleware"]
