from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.orm import Session

from tourist_helper.auth.dependencies import get_current_user, require_admin
from tourist_helper.auth.schemas import CurrentUser
from tourist_helper.bookings.booking_service import BookingService
from tourist_helper.bookings.schemas import BookingCreateRequest, Booking, BookingResponse, BookingList
from tourist_helper.database import get_db
from tourist_helper.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from tourist_helper.notifications import (
    Mailer, get_mailer, queue_emails, booking_created_emails,
    booking_approved_email, booking_rejected_email, booking_cancelled_email
)

router = APIRouter()

def _http_error(error: Exception) -> HTTPException:
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, PermissionDeniedError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(error))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))

def _to_schema(bookings) -> list:
    return [Booking.model_validate(b) for b in bookings]

def _ensure_self_or_admin(current_user: CurrentUser, account_id: int) -> None:
    if not current_user.is_admin and current_user.id != account_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions"
        )

@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    request: BookingCreateRequest,
    background_tasks: BackgroundTasks,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer)
):
    """Book a package; the tourist and the seller are both emailed"""
    booking_service = BookingService(db)

    try:
        booking = booking_service.create_booking(request, current_user)
    except (NotFoundError, PermissionDeniedError, ValidationError) as e:
        raise _http_error(e)

    queue_emails(background_tasks, mailer, booking_created_emails(booking))
    return BookingResponse(message="Booking created successfully", booking=Booking.model_validate(booking))

@router.get("", response_model=BookingList)
def list_bookings(
    admin_user: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """All bookings"""
    return BookingList(bookings=_to_schema(BookingService(db).list_bookings()))

@router.get("/seller/{seller_id}", response_model=BookingList)
def get_seller_bookings(
    seller_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Bookings received by a seller"""
    _ensure_self_or_admin(current_user, seller_id)
    return BookingList(bookings=_to_schema(BookingService(db).list_by_seller(seller_id)))

@router.get("/seller/{seller_id}/pending", response_model=BookingList)
def get_seller_pending_bookings(
    seller_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Bookings still waiting for the seller's decision"""
    _ensure_self_or_admin(current_user, seller_id)
    return BookingList(bookings=_to_schema(BookingService(db).list_pending_by_seller(seller_id)))

@router.get("/tourist/{tourist_id}", response_model=BookingList)
def get_tourist_bookings(
    tourist_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Bookings made by a tourist"""
    _ensure_self_or_admin(current_user, tourist_id)
    return BookingList(bookings=_to_schema(BookingService(db).list_by_tourist(tourist_id)))

@router.patch("/approve/{booking_id}", response_model=BookingResponse)
def approve_booking(
    booking_id: int,
    background_tasks: BackgroundTasks,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer)
):
    """Seller approves a pending booking"""
    try:
        booking = BookingService(db).approve_booking(booking_id, current_user)
    except (NotFoundError, PermissionDeniedError, ValidationError) as e:
        raise _http_error(e)

    queue_emails(background_tasks, mailer, [booking_approved_email(booking)])
    return BookingResponse(message="Booking approved", booking=Booking.model_validate(booking))

@router.patch("/reject/{booking_id}", response_model=BookingResponse)
def reject_booking(
    booking_id: int,
    background_tasks: BackgroundTasks,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer)
):
    """Seller rejects a pending booking"""
    try:
        booking = BookingService(db).reject_booking(booking_id, current_user)
    except (NotFoundError, PermissionDeniedError, ValidationError) as e:
        raise _http_error(e)

    queue_emails(background_tasks, mailer, [booking_rejected_email(booking)])
    return BookingResponse(message="Booking rejected", booking=Booking.model_validate(booking))

@router.patch("/cancel/{booking_id}", response_model=BookingResponse)
def cancel_booking(
    booking_id: int,
    background_tasks: BackgroundTasks,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer)
):
    """Tourist cancels a pending or approved booking"""
    try:
        booking = BookingService(db).cancel_booking(booking_id, current_user)
    except (NotFoundError, PermissionDeniedError, ValidationError) as e:
        raise _http_error(e)

    queue_emails(background_tasks, mailer, [booking_cancelled_email(booking)])
    return BookingResponse(message="Booking cancelled", booking=Booking.model_validate(booking))

@router.get("/{booking_id}", response_model=Booking)
def get_booking(
    booking_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get a booking by ID"""
    booking_service = BookingService(db)

    try:
        booking = booking_service.get_booking(booking_id)
        booking_service.ensure_can_view(booking, current_user)
    except (NotFoundError, PermissionDeniedError) as e:
        raise _http_error(e)

    return Booking.model_validate(booking)
