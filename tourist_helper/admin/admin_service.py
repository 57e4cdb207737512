import logging
from typing import Dict, List, Tuple

from sqlalchemy import func, case
from sqlalchemy.orm import Session, joinedload

from tourist_helper.admin.schemas import (
    PlatformStats, PendingApprovals, PendingPackage, PendingAccount, TopPackage
)
from tourist_helper.bookings.booking_service import BookingService
from tourist_helper.exceptions import NotFoundError
from tourist_helper.models import (
    User, Package, Booking, UserRole, UserStatus, PackageStatus, BookingStatus
)
from tourist_helper.packages.service import PackageService

logger = logging.getLogger(__name__)

TOP_PACKAGES_LIMIT = 3

class AdminManagementService:
    """Service for platform statistics and moderation of packages and accounts"""

    def __init__(self, db: Session):
        self.db = db
        self.booking_service = BookingService(db)

    # Dashboard
    def get_stats(self) -> PlatformStats:
        """Counts by role and package status plus approved-booking revenue"""
        role_counts: Dict[str, int] = dict(
            self.db.query(User.role, func.count(User.id)).group_by(User.role).all()
        )
        package_counts: Dict[str, int] = dict(
            self.db.query(Package.status, func.count(Package.id)).group_by(Package.status).all()
        )

        total_revenue = self.db.query(
            func.coalesce(func.sum(Booking.total_price), 0)
        ).filter(Booking.status == BookingStatus.APPROVED.value).scalar()

        return PlatformStats(
            total_users=sum(role_counts.values()),
            tourists=role_counts.get(UserRole.TOURIST.value, 0),
            sellers=role_counts.get(UserRole.SELLER.value, 0),
            guides=role_counts.get(UserRole.GUIDE.value, 0),
            active_packages=package_counts.get(PackageStatus.APPROVED.value, 0),
            pending_packages=package_counts.get(PackageStatus.PENDING.value, 0),
            total_bookings=self.db.query(Booking).count(),
            total_revenue=float(total_revenue or 0)
        )

    def get_pending_approvals(self) -> PendingApprovals:
        packages = self.db.query(Package).options(
            joinedload(Package.creator)
        ).filter(
            Package.status == PackageStatus.PENDING.value
        ).order_by(Package.created_at, Package.id).all()

        accounts = self.db.query(User).filter(
            User.role.in_([UserRole.SELLER.value, UserRole.GUIDE.value]),
            User.approved == False
        ).order_by(User.created_at, User.id).all()

        return PendingApprovals(
            packages=[
                PendingPackage(
                    id=p.id,
                    title=p.title,
                    seller_name=p.creator.name if p.creator else None,
                    created_at=p.created_at
                )
                for p in packages
            ],
            sellers=[PendingAccount.model_validate(u) for u in accounts if u.role == UserRole.SELLER.value],
            guides=[PendingAccount.model_validate(u) for u in accounts if u.role == UserRole.GUIDE.value]
        )

    def get_top_packages(self, limit: int = TOP_PACKAGES_LIMIT) -> List[TopPackage]:
        """Most-booked packages; ties go to the lower package id"""
        booking_count = func.count(Booking.id).label("bookings")
        revenue = func.coalesce(
            func.sum(
                case(
                    (Booking.status == BookingStatus.APPROVED.value, Booking.total_price),
                    else_=0
                )
            ),
            0
        ).label("revenue")

        rows = self.db.query(
            Booking.package_id, booking_count, revenue
        ).filter(
            Booking.package_id.isnot(None)
        ).group_by(
            Booking.package_id
        ).order_by(
            booking_count.desc(), Booking.package_id.asc()
        ).limit(limit).all()

        packages = {
            p.id: p for p in self.db.query(Package).options(
                joinedload(Package.creator)
            ).filter(Package.id.in_([row.package_id for row in rows])).all()
        }

        top = []
        for row in rows:
            package = packages.get(row.package_id)
            if package is None:
                continue
            top.append(TopPackage(
                id=package.id,
                title=package.title,
                image=package.images[0] if package.images else None,
                seller_name=package.creator.name if package.creator else None,
                bookings=row.bookings,
                revenue=float(row.revenue or 0)
            ))
        return top

    # Package moderation
    def approve_package(self, package_id: int) -> Package:
        return PackageService.set_status(self.db, package_id, PackageStatus.APPROVED)

    def reject_package(self, package_id: int) -> Tuple[Package, List[Booking]]:
        """Reject a package and every booking still waiting on it"""
        package = PackageService.set_status(self.db, package_id, PackageStatus.REJECTED)
        rejected = self.booking_service.reject_pending_for_package(package_id)
        return package, rejected

    # Account moderation
    def list_users(self) -> List[User]:
        return self.db.query(User).order_by(User.id).all()

    def _get_user(self, user_id: int) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User not found")
        return user

    def set_user_status(self, user_id: int, status: UserStatus) -> User:
        user = self._get_user(user_id)
        user.status = status.value
        self.db.commit()
        self.db.refresh(user)
        logger.info("User %s marked %s", user_id, status.value)
        return user

    def approve_user(self, user_id: int) -> User:
        user = self._get_user(user_id)
        user.approved = True
        self.db.commit()
        self.db.refresh(user)
        logger.info("User %s approved", user_id)
        return user

    def delete_user(self, user_id: int) -> None:
        """Physically delete an account; its packages and bookings stay with a null reference"""
        user = self._get_user(user_id)
        self.db.delete(user)
        self.db.commit()
        logger.info("User %s deleted", user_id)
