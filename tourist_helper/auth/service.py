import logging
from typing import Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from tourist_helper.auth.captcha import CaptchaVerifier
from tourist_helper.auth.schemas import SignupRequest, LoginRequest, UserOut
from tourist_helper.auth.utils import get_password_hash, verify_password, create_access_token
from tourist_helper.config import settings
from tourist_helper.exceptions import AuthenticationError, AccountBlockedError, ValidationError
from tourist_helper.models import User, UserRole

logger = logging.getLogger(__name__)

class UserService:
    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        """Get user by email, ignoring case"""
        return db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()

    @staticmethod
    def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
        """Get user by ID"""
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def issue_token(user: User) -> str:
        return create_access_token({"sub": str(user.id), "role": user.role})

    @staticmethod
    def signup(db: Session, request: SignupRequest, captcha: CaptchaVerifier) -> Tuple[User, str]:
        """Register an account and sign it in"""
        if not captcha.verify(request.captcha_token):
            raise AuthenticationError("CAPTCHA verification failed")

        if UserService.get_user_by_email(db, request.email):
            raise ValidationError("Email already registered")

        role = request.role
        is_seller = role == UserRole.SELLER.value
        is_guide = role == UserRole.GUIDE.value

        db_user = User(
            name=request.name,
            email=request.email,
            phone=request.phone,
            password=get_password_hash(request.password),
            role=role,
            agency_name=request.agency_name if is_seller else None,
            license=request.license if is_seller else None,
            location=request.location if is_seller or is_guide else None,
            languages=request.languages if is_guide else None,
            experience=request.experience if is_guide else None,
        )

        try:
            db.add(db_user)
            db.commit()
            db.refresh(db_user)
        except IntegrityError:
            # Lost a race against a concurrent signup with the same email
            db.rollback()
            raise ValidationError("Email already registered")

        logger.info("Registered %s account %s (id=%s)", db_user.role, db_user.email, db_user.id)
        return db_user, UserService.issue_token(db_user)

    @staticmethod
    def is_admin_login(email: str, password: str) -> bool:
        return (
            settings.admin_login_enabled
            and email.lower() == settings.ADMIN_EMAIL.lower()
            and password == settings.ADMIN_PASSWORD
        )

    @staticmethod
    def admin_profile() -> UserOut:
        return UserOut(
            name=settings.ADMIN_NAME,
            email=settings.ADMIN_EMAIL,
            role=UserRole.ADMIN.value,
            approved=True,
        )

    @staticmethod
    def login(db: Session, request: LoginRequest, captcha: CaptchaVerifier) -> Tuple[UserOut, str]:
        """Authenticate by email and password.

        The configured admin credentials short-circuit everything else and
        receive the fixed admin token without a CAPTCHA check.
        """
        if UserService.is_admin_login(request.email, request.password):
            logger.info("Admin login for %s", request.email)
            return UserService.admin_profile(), settings.ADMIN_TOKEN

        if not captcha.verify(request.captcha_token):
            raise AuthenticationError("CAPTCHA verification failed")

        user = UserService.get_user_by_email(db, request.email)
        if not user:
            raise AuthenticationError("Invalid email or password")

        if user.is_blocked:
            logger.info("Refused login for blocked account %s", user.email)
            raise AccountBlockedError("Your account has been blocked. Contact admin.")

        if not verify_password(request.password, user.password):
            raise AuthenticationError("Invalid email or password")

        logger.info("Login for %s (id=%s)", user.email, user.id)
        return UserOut.model_validate(user), UserService.issue_token(user)
