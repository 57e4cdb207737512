"""
Admin Moderation Module

Everything here requires the admin principal, either the configured admin
login (fixed admin token) or an account whose role is `admin`.

- Platform statistics and the top-booked packages
- Package approval and rejection
- Account listing, block/unblock, approval and deletion
"""

from . import router, schemas, admin_service

__all__ = [
    "router",
    "schemas",
    "admin_service"
]
