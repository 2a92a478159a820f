"""
Database Models Package
=======================
Exports all SQLAlchemy models.

Usage:
    from app.models import Base, ParaphrasingSession, UploadedFile
"""

from .base import Base, utcnow

from .session import ParaphrasingSession
from .file import UploadedFile

__all__ = [
    # Base
    "Base",
    "utcnow",
    # Models
    "ParaphrasingSession",
    "UploadedFile",
]
