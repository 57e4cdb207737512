from pydantic import Field
from typing import List, Optional
from datetime import datetime

from tourist_helper.models import BookingStatus
from tourist_helper.schemas import CamelModel

class BookingCreateRequest(CamelModel):
    """Booking request sent by a tourist; totalPrice is price x guests as computed by the client"""
    package_id: int
    tourist_id: int
    seller_id: int
    travel_date: Optional[datetime] = Field(None, description="Defaults to now when omitted")
    guests: int = Field(1, ge=1)
    total_price: float = Field(..., gt=0)

class BookingPackageSummary(CamelModel):
    id: int
    title: str
    price: float
    duration: str
    images: List[str] = []

class BookingPartySummary(CamelModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    agency_name: Optional[str] = None

class Booking(CamelModel):
    id: int
    package_id: Optional[int] = None
    tourist_id: Optional[int] = None
    seller_id: Optional[int] = None
    package: Optional[BookingPackageSummary] = None
    tourist: Optional[BookingPartySummary] = None
    seller: Optional[BookingPartySummary] = None
    status: BookingStatus
    travel_date: datetime
    guests: int
    total_price: float
    booking_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class BookingResponse(CamelModel):
    message: str
    booking: Booking

class BookingList(CamelModel):
    bookings: List[Booking]
