"""
Routers package for FastAPI endpoints.

Organized by domain:
- classify: PDF upload and document classification
"""

from . import classify

__all__ = ["classify"]
