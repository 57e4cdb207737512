import json
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status, Query, Form, File, UploadFile
from pydantic import ValidationError as SchemaError
from sqlalchemy.orm import Session

from tourist_helper.auth.dependencies import require_roles
from tourist_helper.auth.schemas import CurrentUser
from tourist_helper.database import get_db
from tourist_helper.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from tourist_helper.models import PackageStatus, UserRole
from tourist_helper.packages.schemas import Package, PackageCreate, PackageUpdate, PackageResponse
from tourist_helper.packages.service import PackageService
from tourist_helper.packages.storage import ImageStorage, get_image_storage
from tourist_helper.schemas import MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter()

require_package_owner_role = require_roles(UserRole.SELLER, UserRole.GUIDE, UserRole.ADMIN)

def _bad_request(detail) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)

def _schema_error_detail(error: SchemaError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in error.errors()
    )

def _parse_json_list(values: Optional[List[str]], field: str) -> Optional[list]:
    """Accept either repeated form fields or a single JSON-encoded array"""
    if values is None:
        return None
    if len(values) == 1 and values[0].strip().startswith("["):
        try:
            parsed = json.loads(values[0])
        except json.JSONDecodeError:
            raise _bad_request(f"{field} must be a JSON array")
        if not isinstance(parsed, list):
            raise _bad_request(f"{field} must be a JSON array")
        return parsed
    return [v for v in values if v != ""]

def _parse_itinerary(raw: Optional[str]) -> Optional[list]:
    if raw is None or raw.strip() == "":
        return None
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        raise _bad_request("itinerary must be a JSON array")
    if not isinstance(parsed, list):
        raise _bad_request("itinerary must be a JSON array")
    return parsed

def _load_package(db: Session, package_id: int):
    try:
        return PackageService.get_package(db, package_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

def _ensure_can_manage(package, current_user: CurrentUser) -> None:
    try:
        PackageService.ensure_can_manage(package, current_user)
    except PermissionDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))

@router.get("", response_model=List[Package])
def list_packages(
    status_filter: Optional[PackageStatus] = Query(None, alias="status", description="Filter by moderation status"),
    db: Session = Depends(get_db)
):
    """List packages with their creator"""
    return [Package.model_validate(p) for p in PackageService.list_packages(db, status=status_filter)]

@router.post("", response_model=PackageResponse, status_code=status.HTTP_201_CREATED)
@router.post("/add", response_model=PackageResponse, status_code=status.HTTP_201_CREATED)
def create_package(
    title: str = Form(...),
    description: str = Form(...),
    price: float = Form(...),
    duration: str = Form(...),
    location: str = Form(...),
    highlights: Optional[List[str]] = Form(None),
    includes: Optional[List[str]] = Form(None),
    itinerary: Optional[str] = Form(None),
    images: Optional[List[UploadFile]] = File(None),
    current_user: CurrentUser = Depends(require_roles(UserRole.SELLER, UserRole.GUIDE)),
    db: Session = Depends(get_db),
    storage: ImageStorage = Depends(get_image_storage)
):
    """Create a package listing; it stays pending until an admin approves it"""
    try:
        data = PackageCreate(
            title=title,
            description=description,
            price=price,
            duration=duration,
            location=location,
            highlights=_parse_json_list(highlights, "highlights") or [],
            includes=_parse_json_list(includes, "includes") or [],
            itinerary=_parse_itinerary(itinerary) or []
        )
    except SchemaError as e:
        raise _bad_request(_schema_error_detail(e))

    try:
        image_paths = storage.save_all(images or [])
    except ValidationError as e:
        raise _bad_request(str(e))

    try:
        package = PackageService.create_package(db, data, current_user.id, image_paths)
    except Exception:
        # The listing was never stored, so its files must not linger
        storage.delete_all(image_paths)
        raise

    return PackageResponse(message="Package added successfully", package=Package.model_validate(package))

@router.put("/edit/{package_id}", response_model=PackageResponse)
def edit_package(
    package_id: int,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[float] = Form(None),
    duration: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    highlights: Optional[List[str]] = Form(None),
    includes: Optional[List[str]] = Form(None),
    itinerary: Optional[str] = Form(None),
    images: Optional[List[UploadFile]] = File(None),
    current_user: CurrentUser = Depends(require_package_owner_role),
    db: Session = Depends(get_db),
    storage: ImageStorage = Depends(get_image_storage)
):
    """Update a package; new images are appended to the existing ones"""
    package = _load_package(db, package_id)
    _ensure_can_manage(package, current_user)

    try:
        update = PackageUpdate(
            title=title or None,
            description=description or None,
            price=price,
            duration=duration or None,
            location=location or None,
            highlights=_parse_json_list(highlights, "highlights"),
            includes=_parse_json_list(includes, "includes"),
            itinerary=_parse_itinerary(itinerary)
        )
    except SchemaError as e:
        raise _bad_request(_schema_error_detail(e))

    try:
        new_images = storage.save_all(images or [])
    except ValidationError as e:
        raise _bad_request(str(e))

    try:
        package = PackageService.update_package(db, package, update, new_images)
    except ValidationError as e:
        storage.delete_all(new_images)
        raise _bad_request(str(e))
    except Exception:
        storage.delete_all(new_images)
        raise

    return PackageResponse(message="Package updated successfully", package=Package.model_validate(package))

@router.delete("/delete/{package_id}", response_model=MessageResponse)
def delete_package(
    package_id: int,
    current_user: CurrentUser = Depends(require_package_owner_role),
    db: Session = Depends(get_db),
    storage: ImageStorage = Depends(get_image_storage)
):
    """Delete a package together with its image files"""
    package = _load_package(db, package_id)
    _ensure_can_manage(package, current_user)

    image_paths = PackageService.delete_package(db, package)
    removed = storage.delete_all(image_paths)
    logger.info("Removed %d of %d images for package %s", removed, len(image_paths), package_id)

    return MessageResponse(message="Package deleted successfully")

@router.get("/seller/{seller_id}", response_model=List[Package])
def get_seller_packages(seller_id: int, db: Session = Depends(get_db)):
    """Packages created by one seller or guide"""
    return [Package.model_validate(p) for p in PackageService.get_packages_by_seller(db, seller_id)]

@router.get("/{package_id}", response_model=Package)
def get_package(package_id: int, db: Session = Depends(get_db)):
    """Get a single package"""
    return Package.model_validate(_load_package(db, package_id))
