from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List

from tourist_helper.admin.admin_service import AdminManagementService
from tourist_helper.admin.schemas import (
    PlatformStats, PendingApprovals, TopPackage, AdminUserRow,
    PackageModerationResponse, UserModerationResponse
)
from tourist_helper.auth.dependencies import require_admin
from tourist_helper.auth.schemas import CurrentUser, UserOut
from tourist_helper.database import get_db
from tourist_helper.exceptions import NotFoundError
from tourist_helper.models import UserStatus
from tourist_helper.notifications import Mailer, get_mailer, queue_emails, booking_rejected_email
from tourist_helper.packages.schemas import Package
from tourist_helper.schemas import MessageResponse

router = APIRouter(dependencies=[Depends(require_admin)])

def _not_found(error: NotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))

@router.get("/stats", response_model=PlatformStats)
def get_stats(db: Session = Depends(get_db)):
    """Platform counters and approved-booking revenue"""
    return AdminManagementService(db).get_stats()

@router.get("/pending-approvals", response_model=PendingApprovals)
def get_pending_approvals(db: Session = Depends(get_db)):
    """Packages and seller/guide accounts awaiting approval"""
    return AdminManagementService(db).get_pending_approvals()

@router.get("/top-packages", response_model=List[TopPackage])
def get_top_packages(db: Session = Depends(get_db)):
    """Three most-booked packages"""
    return AdminManagementService(db).get_top_packages()

# Package moderation
@router.put("/approve-package/{package_id}", response_model=PackageModerationResponse)
def approve_package(package_id: int, db: Session = Depends(get_db)):
    try:
        package = AdminManagementService(db).approve_package(package_id)
    except NotFoundError as e:
        raise _not_found(e)

    return PackageModerationResponse(
        message="Package approved successfully",
        package=Package.model_validate(package)
    )

@router.put("/reject-package/{package_id}", response_model=PackageModerationResponse)
def reject_package(
    package_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer)
):
    """Reject a package; its pending bookings are rejected too and the tourists told"""
    try:
        package, rejected = AdminManagementService(db).reject_package(package_id)
    except NotFoundError as e:
        raise _not_found(e)

    queue_emails(background_tasks, mailer, [booking_rejected_email(b) for b in rejected])
    return PackageModerationResponse(
        message="Package rejected successfully",
        package=Package.model_validate(package),
        rejected_bookings=len(rejected)
    )

# Account moderation
@router.get("/users", response_model=List[AdminUserRow])
def get_users(db: Session = Depends(get_db)):
    """All accounts with their role and status"""
    return [AdminUserRow.model_validate(u) for u in AdminManagementService(db).list_users()]

def _set_status(db: Session, user_id: int, new_status: UserStatus):
    try:
        return AdminManagementService(db).set_user_status(user_id, new_status)
    except NotFoundError as e:
        raise _not_found(e)

@router.put("/block-user/{user_id}", response_model=UserModerationResponse)
def block_user(user_id: int, db: Session = Depends(get_db)):
    user = _set_status(db, user_id, UserStatus.BLOCKED)
    return UserModerationResponse(message="User blocked successfully", user=UserOut.model_validate(user))

@router.put("/unblock-user/{user_id}", response_model=UserModerationResponse)
def unblock_user(user_id: int, db: Session = Depends(get_db)):
    user = _set_status(db, user_id, UserStatus.ACTIVE)
    return UserModerationResponse(message="User unblocked successfully", user=UserOut.model_validate(user))

@router.put("/approve-user/{user_id}", response_model=UserModerationResponse)
def approve_user(user_id: int, db: Session = Depends(get_db)):
    """Mark a seller or guide account as vetted"""
    try:
        user = AdminManagementService(db).approve_user(user_id)
    except NotFoundError as e:
        raise _not_found(e)
    return UserModerationResponse(message="User approved successfully", user=UserOut.model_validate(user))

@router.delete("/delete-user/{user_id}", response_model=MessageResponse)
def delete_user(user_id: int, db: Session = Depends(get_db)):
    try:
        AdminManagementService(db).delete_user(user_id)
    except NotFoundError as e:
        raise _not_found(e)
    return MessageResponse(message="User deleted successfully")
