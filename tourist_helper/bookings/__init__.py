"""
Booking Module

Tourists book approved packages; the owning seller approves or rejects
each request and the tourist may cancel it.

Lifecycle:
- pending -> approved | rejected (seller)
- pending | approved -> cancelled (tourist)

Key Components:
- booking_service.py: Booking creation, queries and status transitions
- router.py: FastAPI endpoints, email notifications on every change
- schemas.py: Pydantic models for booking data
"""

from .router import router
from .booking_service import BookingService, TRANSITIONS
from .schemas import BookingCreateRequest, Booking, BookingResponse, BookingList

__all__ = [
    "router",
    "BookingService",
    "TRANSITIONS",
    "BookingCreateRequest",
    "Booking",
    "BookingResponse",
    "BookingList"
]
