from pydantic import Field
from typing import List, Optional
from datetime import datetime

from tourist_helper.schemas import CamelModel

class ItineraryDay(CamelModel):
    day: Optional[int] = Field(None, ge=1)
    title: Optional[str] = None
    activities: Optional[str] = None
    meals: Optional[str] = None
    accommodation: Optional[str] = None

class CreatorSummary(CamelModel):
    id: int
    name: str
    email: str
    role: Optional[str] = None

class PackageBase(CamelModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    price: float = Field(..., gt=0)
    duration: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    highlights: List[str] = []
    includes: List[str] = []
    itinerary: List[ItineraryDay] = []

class PackageCreate(PackageBase):
    pass

class PackageUpdate(CamelModel):
    """Omitted fields keep their stored value"""
    title: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(None, gt=0)
    duration: Optional[str] = None
    location: Optional[str] = None
    highlights: Optional[List[str]] = None
    includes: Optional[List[str]] = None
    itinerary: Optional[List[ItineraryDay]] = None

class Package(PackageBase):
    id: int
    images: List[str] = []
    status: str
    created_by: Optional[int] = None
    creator: Optional[CreatorSummary] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class PackageResponse(CamelModel):
    message: str
    package: Package
