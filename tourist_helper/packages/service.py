import logging
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload, selectinload

from tourist_helper.auth.schemas import CurrentUser
from tourist_helper.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from tourist_helper.models import Package, ItineraryDay, PackageStatus
from tourist_helper.packages.schemas import PackageCreate, PackageUpdate

logger = logging.getLogger(__name__)

class PackageService:
    @staticmethod
    def _query(db: Session):
        return db.query(Package).options(
            joinedload(Package.creator),
            selectinload(Package.itinerary)
        )

    @staticmethod
    def list_packages(db: Session, status: Optional[PackageStatus] = None) -> List[Package]:
        """All packages, newest first, optionally filtered by moderation status"""
        query = PackageService._query(db)
        if status is not None:
            query = query.filter(Package.status == status.value)
        return query.order_by(Package.created_at.desc(), Package.id.desc()).all()

    @staticmethod
    def get_packages_by_seller(db: Session, seller_id: int) -> List[Package]:
        return PackageService._query(db).filter(
            Package.created_by == seller_id
        ).order_by(Package.id).all()

    @staticmethod
    def get_package(db: Session, package_id: int) -> Package:
        package = PackageService._query(db).filter(Package.id == package_id).first()
        if not package:
            raise NotFoundError("Package not found")
        return package

    @staticmethod
    def ensure_can_manage(package: Package, current_user: CurrentUser) -> None:
        if current_user.is_admin:
            return
        if package.created_by is None or package.created_by != current_user.id:
            raise PermissionDeniedError("Only the package owner can change this package")

    @staticmethod
    def _build_itinerary(days) -> List[ItineraryDay]:
        return [
            ItineraryDay(
                position=position,
                day=day.day if day.day is not None else position + 1,
                title=day.title,
                activities=day.activities,
                meals=day.meals,
                accommodation=day.accommodation
            )
            for position, day in enumerate(days)
        ]

    @staticmethod
    def create_package(
        db: Session,
        data: PackageCreate,
        owner_id: int,
        image_paths: List[str]
    ) -> Package:
        """Create a listing awaiting admin approval"""
        package = Package(
            title=data.title,
            description=data.description,
            price=data.price,
            duration=data.duration,
            location=data.location,
            highlights=list(data.highlights),
            includes=list(data.includes),
            images=list(image_paths),
            itinerary=PackageService._build_itinerary(data.itinerary),
            created_by=owner_id,
            status=PackageStatus.PENDING.value
        )

        db.add(package)
        db.commit()
        logger.info("Package %s created by user %s with %d images", package.id, owner_id, len(image_paths))
        return PackageService.get_package(db, package.id)

    @staticmethod
    def update_package(
        db: Session,
        package: Package,
        update: PackageUpdate,
        new_image_paths: List[str]
    ) -> Package:
        """Apply provided fields and append newly uploaded images"""
        update_data = update.model_dump(exclude_unset=True, exclude_none=True)

        for field in ("title", "description", "duration", "location"):
            value = update_data.get(field)
            if value is not None:
                if not str(value).strip():
                    raise ValidationError(f"{field} cannot be empty")
                setattr(package, field, value)

        if "price" in update_data:
            package.price = update_data["price"]
        if update.highlights is not None:
            package.highlights = list(update.highlights)
        if update.includes is not None:
            package.includes = list(update.includes)
        if update.itinerary is not None:
            package.itinerary = PackageService._build_itinerary(update.itinerary)
        if new_image_paths:
            package.images = list(package.images or []) + list(new_image_paths)

        db.commit()
        logger.info("Package %s updated (%d new images)", package.id, len(new_image_paths))
        return PackageService.get_package(db, package.id)

    @staticmethod
    def delete_package(db: Session, package: Package) -> List[str]:
        """Delete the package row and return the image paths it owned"""
        image_paths = list(package.images or [])
        package_id = package.id
        db.delete(package)
        db.commit()
        logger.info("Package %s deleted", package_id)
        return image_paths

    @staticmethod
    def set_status(db: Session, package_id: int, status: PackageStatus) -> Package:
        package = PackageService.get_package(db, package_id)
        package.status = status.value
        db.commit()
        logger.info("Package %s marked %s", package_id, status.value)
        return PackageService.get_package(db, package_id)
