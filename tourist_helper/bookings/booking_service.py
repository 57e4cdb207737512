import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Set

from sqlalchemy.orm import Session, joinedload

from tourist_helper.auth.schemas import CurrentUser
from tourist_helper.bookings.schemas import BookingCreateRequest
from tourist_helper.exceptions import (
    NotFoundError, PermissionDeniedError, ValidationError, InvalidTransitionError
)
from tourist_helper.models import Booking, BookingStatus, Package, PackageStatus, User, UserRole

logger = logging.getLogger(__name__)

# Allowed status changes; `completed` is kept for records but nothing moves a booking there
TRANSITIONS: Dict[BookingStatus, Set[BookingStatus]] = {
    BookingStatus.PENDING: {BookingStatus.APPROVED, BookingStatus.REJECTED, BookingStatus.CANCELLED},
    BookingStatus.APPROVED: {BookingStatus.CANCELLED},
    BookingStatus.REJECTED: set(),
    BookingStatus.CANCELLED: set(),
    BookingStatus.COMPLETED: set(),
}

class BookingService:
    """Service for creating bookings and moving them through their lifecycle"""

    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        # Every read path carries the package, tourist and seller along
        return self.db.query(Booking).options(
            joinedload(Booking.package),
            joinedload(Booking.tourist),
            joinedload(Booking.seller)
        )

    # Queries
    def get_booking(self, booking_id: int) -> Booking:
        booking = self._query().filter(Booking.id == booking_id).first()
        if not booking:
            raise NotFoundError("Booking not found")
        return booking

    def list_bookings(self) -> List[Booking]:
        return self._query().order_by(Booking.id.desc()).all()

    def list_by_seller(self, seller_id: int, status: Optional[BookingStatus] = None) -> List[Booking]:
        query = self._query().filter(Booking.seller_id == seller_id)
        if status is not None:
            query = query.filter(Booking.status == status.value)
        return query.order_by(Booking.id.desc()).all()

    def list_by_tourist(self, tourist_id: int) -> List[Booking]:
        return self._query().filter(
            Booking.tourist_id == tourist_id
        ).order_by(Booking.id.desc()).all()

    def list_pending_by_seller(self, seller_id: int) -> List[Booking]:
        return self.list_by_seller(seller_id, status=BookingStatus.PENDING)

    @staticmethod
    def ensure_can_view(booking: Booking, current_user: CurrentUser) -> None:
        if current_user.is_admin:
            return
        if current_user.id not in (booking.tourist_id, booking.seller_id):
            raise PermissionDeniedError("You are not a party to this booking")

    # Creation
    def create_booking(self, request: BookingCreateRequest, current_user: CurrentUser) -> Booking:
        """Create a pending booking for a tourist against an approved package"""
        if not current_user.is_admin and current_user.id != request.tourist_id:
            raise PermissionDeniedError("Bookings can only be made for your own account")

        package = self.db.query(Package).filter(Package.id == request.package_id).first()
        if not package:
            raise NotFoundError("Package not found")
        if package.status != PackageStatus.APPROVED.value:
            raise ValidationError("Package is not open for booking")
        if package.created_by != request.seller_id:
            raise ValidationError("Seller does not own this package")

        tourist = self.db.query(User).filter(User.id == request.tourist_id).first()
        if not tourist:
            raise NotFoundError("Tourist not found")
        if tourist.role != UserRole.TOURIST.value:
            raise ValidationError("Only tourist accounts can book packages")

        now = datetime.now(timezone.utc)
        booking = Booking(
            package_id=package.id,
            tourist_id=tourist.id,
            seller_id=request.seller_id,
            status=BookingStatus.PENDING.value,
            travel_date=request.travel_date or now,
            guests=request.guests,
            total_price=request.total_price,
            booking_date=now
        )

        self.db.add(booking)
        self.db.commit()
        logger.info(
            "Booking %s created: package=%s tourist=%s guests=%s total=%s",
            booking.id, package.id, tourist.id, booking.guests, booking.total_price
        )
        return self.get_booking(booking.id)

    # Status transitions
    def _transition(self, booking: Booking, target: BookingStatus) -> Booking:
        current = BookingStatus(booking.status)
        if target not in TRANSITIONS[current]:
            raise InvalidTransitionError(
                f"Booking cannot be {target.value}. Status: {current.value}"
            )
        # Guarded update: a row already moved by another request stays as it is
        sources = [s.value for s, targets in TRANSITIONS.items() if target in targets]
        updated = self.db.query(Booking).filter(
            Booking.id == booking.id,
            Booking.status.in_(sources)
        ).update({Booking.status: target.value}, synchronize_session=False)
        if updated == 0:
            self.db.rollback()
            raise InvalidTransitionError(
                f"Booking cannot be {target.value}. Status changed concurrently"
            )
        self.db.commit()
        logger.info("Booking %s moved %s -> %s", booking.id, current.value, target.value)
        return self.get_booking(booking.id)

    def _decide(self, booking_id: int, target: BookingStatus, current_user: CurrentUser) -> Booking:
        booking = self.get_booking(booking_id)
        if not current_user.is_admin and current_user.id != booking.seller_id:
            raise PermissionDeniedError("Only the seller can decide on this booking")
        return self._transition(booking, target)

    def approve_booking(self, booking_id: int, current_user: CurrentUser) -> Booking:
        return self._decide(booking_id, BookingStatus.APPROVED, current_user)

    def reject_booking(self, booking_id: int, current_user: CurrentUser) -> Booking:
        return self._decide(booking_id, BookingStatus.REJECTED, current_user)

    def cancel_booking(self, booking_id: int, current_user: CurrentUser) -> Booking:
        booking = self.get_booking(booking_id)
        if not current_user.is_admin and current_user.id != booking.tourist_id:
            raise PermissionDeniedError("Only the tourist can cancel this booking")
        return self._transition(booking, BookingStatus.CANCELLED)

    def reject_pending_for_package(self, package_id: int) -> List[Booking]:
        """Reject every pending booking on a package that is no longer listed"""
        bookings = self._query().filter(
            Booking.package_id == package_id,
            Booking.status == BookingStatus.PENDING.value
        ).all()
        for booking in bookings:
            booking.status = BookingStatus.REJECTED.value
        self.db.commit()
        if bookings:
            logger.info("Rejected %d pending bookings for package %s", len(bookings), package_id)
        return [self.get_booking(b.id) for b in bookings]
