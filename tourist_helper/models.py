from enum import Enum

from sqlalchemy import Column, Integer, BigInteger, String, Boolean, DateTime, Text, ForeignKey, Numeric, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from tourist_helper.database import Base

# SQLite only autoincrements plain INTEGER primary keys
IdType = BigInteger().with_variant(Integer, "sqlite")

# Prices come back as floats so JSON responses carry plain numbers
Money = Numeric(12, 2, asdecimal=False)


class UserRole(str, Enum):
    TOURIST = "tourist"
    SELLER = "seller"
    GUIDE = "guide"
    ADMIN = "admin"


class UserStatus(str, Enum):
    ACTIVE = "active"
    BLOCKED = "blocked"


class PackageStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class BookingStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


# ================================
# Accounts
# ================================
class User(Base):
    __tablename__ = "users"

    id = Column(IdType, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    phone = Column(String(50), nullable=False)
    password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.TOURIST.value, index=True)
    status = Column(String(20), nullable=False, default=UserStatus.ACTIVE.value)

    # Seller / guide profile
    agency_name = Column(String(255))
    license = Column(String(255))
    location = Column(String(255))
    languages = Column(String(255))
    experience = Column(Integer)

    approved = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    packages = relationship("Package", back_populates="creator")
    tourist_bookings = relationship("Booking", foreign_keys="Booking.tourist_id", back_populates="tourist")
    seller_bookings = relationship("Booking", foreign_keys="Booking.seller_id", back_populates="seller")

    @property
    def is_blocked(self) -> bool:
        return self.status == UserStatus.BLOCKED.value


# ================================
# Packages
# ================================
class Package(Base):
    __tablename__ = "packages"

    id = Column(IdType, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Money, nullable=False)
    duration = Column(String(100), nullable=False)
    location = Column(String(255), nullable=False)
    highlights = Column(JSON, nullable=False, default=list)
    includes = Column(JSON, nullable=False, default=list)
    images = Column(JSON, nullable=False, default=list)
    created_by = Column(IdType, ForeignKey("users.id"), nullable=True, index=True)
    status = Column(String(20), nullable=False, default=PackageStatus.PENDING.value, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    creator = relationship("User", back_populates="packages")
    itinerary = relationship(
        "ItineraryDay",
        back_populates="package",
        order_by="ItineraryDay.position",
        cascade="all, delete-orphan",
    )
    bookings = relationship("Booking", back_populates="package")


class ItineraryDay(Base):
    __tablename__ = "package_itinerary_days"

    id = Column(IdType, primary_key=True, index=True)
    package_id = Column(IdType, ForeignKey("packages.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    day = Column(Integer)
    title = Column(String(255))
    activities = Column(Text)
    meals = Column(String(255))
    accommodation = Column(String(255))

    # Relationships
    package = relationship("Package", back_populates="itinerary")


# ================================
# Bookings
# ================================
class Booking(Base):
    __tablename__ = "bookings"

    id = Column(IdType, primary_key=True, index=True)
    package_id = Column(IdType, ForeignKey("packages.id"), nullable=True, index=True)
    tourist_id = Column(IdType, ForeignKey("users.id"), nullable=True, index=True)
    seller_id = Column(IdType, ForeignKey("users.id"), nullable=True, index=True)
    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value, index=True)
    travel_date = Column(DateTime(timezone=True), nullable=False)
    guests = Column(Integer, nullable=False, default=1)
    total_price = Column(Money, nullable=False)
    booking_date = Column(DateTime(timezone=True), server_default=func.now())
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    package = relationship("Package", back_populates="bookings")
    tourist = relationship("User", foreign_keys=[tourist_id], back_populates="tourist_bookings")
    seller = relationship("User", foreign_keys=[seller_id], back_populates="seller_bookings")
