#!/usr/bin/env python3
"""
Demo Seed Data Script

Creates demo accounts, packages and bookings for local development.

Usage:
    python seed_data.py
"""

from datetime import datetime, timedelta, timezone

from tourist_helper.auth.utils import get_password_hash
from tourist_helper.database import Base, SessionLocal, engine
from tourist_helper.models import (
    User, Package, ItineraryDay, Booking, UserRole, PackageStatus, BookingStatus
)

DEMO_PASSWORD = "password123"

def create_seed_data():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    try:
        print("🚀 Creating seed data for Tourist Helper...")

        # Clear existing data (in reverse dependency order)
        print("Clearing existing data...")
        db.query(Booking).delete()
        db.query(ItineraryDay).delete()
        db.query(Package).delete()
        db.query(User).delete()

        # 1. Accounts
        print("Creating accounts...")
        password = get_password_hash(DEMO_PASSWORD)
        admin = User(
            name="Platform Admin", email="admin@touristhelper.local", phone="9000000000",
            password=password, role=UserRole.ADMIN.value, approved=True
        )
        seller = User(
            name="Asha Menon", email="seller@touristhelper.local", phone="9000000001",
            password=password, role=UserRole.SELLER.value, agency_name="Backwater Journeys",
            license="KTDC-2291", location="Kochi", approved=True
        )
        guide = User(
            name="Ravi Kumar", email="guide@touristhelper.local", phone="9000000002",
            password=password, role=UserRole.GUIDE.value, location="Jaipur",
            languages="English, Hindi", experience=6
        )
        tourists = [
            User(name="Lena Fischer", email="lena@touristhelper.local", phone="9000000003",
                 password=password, role=UserRole.TOURIST.value),
            User(name="Tom Okafor", email="tom@touristhelper.local", phone="9000000004",
                 password=password, role=UserRole.TOURIST.value),
        ]
        db.add_all([admin, seller, guide] + tourists)
        db.flush()

        # 2. Packages
        print("Creating packages...")
        packages = [
            Package(
                title="Kerala Backwaters Houseboat",
                description="Three days drifting through Alleppey's canals on a private houseboat.",
                price=5000, duration="3 Days / 2 Nights", location="Alleppey, Kerala",
                highlights=["Private houseboat", "Village walk", "Sunset cruise"],
                includes=["Meals", "Accommodation", "Transfers"],
                images=[], created_by=seller.id, status=PackageStatus.APPROVED.value,
                itinerary=[
                    ItineraryDay(position=0, day=1, title="Boarding at Alleppey",
                                 activities="Check-in, canal cruise", meals="Lunch, Dinner",
                                 accommodation="Houseboat"),
                    ItineraryDay(position=1, day=2, title="Kuttanad villages",
                                 activities="Village walk, toddy shop visit", meals="All meals",
                                 accommodation="Houseboat"),
                    ItineraryDay(position=2, day=3, title="Return",
                                 activities="Breakfast on deck, checkout", meals="Breakfast",
                                 accommodation=None),
                ]
            ),
            Package(
                title="Munnar Tea Trails",
                description="Tea estates, Eravikulam National Park and misty viewpoints.",
                price=7500, duration="4 Days / 3 Nights", location="Munnar, Kerala",
                highlights=["Tea factory tour", "Eravikulam National Park"],
                includes=["Breakfast", "Hotel", "Local cab"],
                images=[], created_by=seller.id, status=PackageStatus.APPROVED.value
            ),
            Package(
                title="Pink City Heritage Walk",
                description="A guided day through Jaipur's forts and bazaars.",
                price=1500, duration="1 Day", location="Jaipur, Rajasthan",
                highlights=["Amber Fort", "Hawa Mahal", "Johari Bazaar"],
                includes=["Guide", "Entry tickets"],
                images=[], created_by=guide.id, status=PackageStatus.PENDING.value
            ),
        ]
        db.add_all(packages)
        db.flush()

        # 3. Bookings
        print("Creating bookings...")
        now = datetime.now(timezone.utc)
        bookings = [
            Booking(package_id=packages[0].id, tourist_id=tourists[0].id, seller_id=seller.id,
                    status=BookingStatus.APPROVED.value, travel_date=now + timedelta(days=30),
                    guests=2, total_price=10000, booking_date=now),
            Booking(package_id=packages[1].id, tourist_id=tourists[1].id, seller_id=seller.id,
                    status=BookingStatus.PENDING.value, travel_date=now + timedelta(days=45),
                    guests=1, total_price=7500, booking_date=now),
        ]
        db.add_all(bookings)

        # Commit all changes
        db.commit()
        print("✅ Successfully created seed data for Tourist Helper!")
        print(f"Created:")
        print(f"  - {3 + len(tourists)} accounts (password: {DEMO_PASSWORD})")
        print(f"  - {len(packages)} packages")
        print(f"  - {len(bookings)} bookings")

    except Exception as e:
        print(f"❌ Error creating seed data: {e}")
        db.rollback()
        raise
    finally:
        db.close()

if __name__ == "__main__":
    create_seed_data()
