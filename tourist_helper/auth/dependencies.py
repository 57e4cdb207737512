import secrets

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from tourist_helper.auth.schemas import CurrentUser
from tourist_helper.auth.service import UserService
from tourist_helper.auth.utils import verify_token
from tourist_helper.config import settings
from tourist_helper.database import get_db
from tourist_helper.models import UserRole

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/users/login")

def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> CurrentUser:
    """Resolve the bearer token to the calling account"""
    if settings.admin_login_enabled and secrets.compare_digest(token, settings.ADMIN_TOKEN):
        return CurrentUser(
            email=settings.ADMIN_EMAIL,
            name=settings.ADMIN_NAME,
            role=UserRole.ADMIN.value,
        )

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    token_data = verify_token(token, credentials_exception)

    user = UserService.get_user_by_id(db, user_id=token_data["user_id"])
    if user is None:
        raise credentials_exception

    if user.is_blocked:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Your account has been blocked. Contact admin."
        )

    return CurrentUser(id=user.id, email=user.email, name=user.name, role=user.role)

def require_roles(*roles: str):
    """Build a dependency that only lets the listed roles through"""
    allowed = {r.value if isinstance(r, UserRole) else r for r in roles}

    def checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not enough permissions"
            )
        return current_user

    return checker

require_admin = require_roles(UserRole.ADMIN)
