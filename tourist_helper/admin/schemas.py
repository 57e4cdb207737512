from typing import List, Optional
from datetime import datetime

from tourist_helper.auth.schemas import UserOut
from tourist_helper.packages.schemas import Package
from tourist_helper.schemas import CamelModel

# Dashboard
class PlatformStats(CamelModel):
    """Platform-wide counters; revenue only counts approved bookings"""
    total_users: int
    tourists: int
    sellers: int
    guides: int
    active_packages: int
    pending_packages: int
    total_bookings: int
    total_revenue: float

class PendingPackage(CamelModel):
    id: int
    title: str
    seller_name: Optional[str] = None
    created_at: Optional[datetime] = None

class PendingAccount(CamelModel):
    id: int
    name: str
    email: str
    role: str
    agency_name: Optional[str] = None
    created_at: Optional[datetime] = None

class PendingApprovals(CamelModel):
    packages: List[PendingPackage]
    sellers: List[PendingAccount]
    guides: List[PendingAccount]

class TopPackage(CamelModel):
    id: int
    title: str
    image: Optional[str] = None
    seller_name: Optional[str] = None
    bookings: int
    revenue: float

# User management
class AdminUserRow(CamelModel):
    id: int
    name: str
    email: str
    role: str
    status: str
    approved: bool
    created_at: Optional[datetime] = None

class PackageModerationResponse(CamelModel):
    message: str
    package: Package
    rejected_bookings: int = 0

class UserModerationResponse(CamelModel):
    message: str
    user: UserOut
