"""
Package Listings Module

Sellers and guides publish tour packages with an itinerary and images.
New listings start `pending` until an admin approves them; edits keep the
current moderation status.

Key Components:
- service.py: Package persistence and ownership checks
- storage.py: Image files on local disk under the uploads directory
- router.py: FastAPI endpoints (multipart create/edit, delete, listing)
- schemas.py: Pydantic models for package data
"""

from .router import router
from .service import PackageService
from .storage import ImageStorage, get_image_storage

__all__ = [
    "router",
    "PackageService",
    "ImageStorage",
    "get_image_storage",
]
