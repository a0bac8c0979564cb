"""
Routers package for FastAPI endpoints.

- conversion: PDF upload, CSV download and artifact listing
"""

from . import conversion

__all__ = ["conversion"]
