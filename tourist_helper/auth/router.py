from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from tourist_helper.auth.captcha import CaptchaVerifier, get_captcha_verifier
from tourist_helper.auth.dependencies import get_current_user
from tourist_helper.auth.schemas import SignupRequest, LoginRequest, AuthResponse, UserOut, CurrentUser
from tourist_helper.auth.service import UserService
from tourist_helper.database import get_db
from tourist_helper.exceptions import AuthenticationError, AccountBlockedError, ValidationError

router = APIRouter()

@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def signup(
    request: SignupRequest,
    db: Session = Depends(get_db),
    captcha: CaptchaVerifier = Depends(get_captcha_verifier)
):
    """Register a new tourist, seller or guide"""
    try:
        user, token = UserService.signup(db, request, captcha)
    except (AuthenticationError, ValidationError) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    return AuthResponse(
        message="User registered successfully",
        user=UserOut.model_validate(user),
        token=token
    )

@router.post("/login", response_model=AuthResponse)
def login(
    request: LoginRequest,
    db: Session = Depends(get_db),
    captcha: CaptchaVerifier = Depends(get_captcha_verifier)
):
    """Log in with email and password"""
    try:
        user, token = UserService.login(db, request, captcha)
    except AccountBlockedError as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=str(e)
        )
    except AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    message = "Admin login successful" if user.role == "admin" and user.id is None else "Login successful"
    return AuthResponse(message=message, user=user, token=token)

@router.get("/me", response_model=UserOut)
def read_users_me(current_user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    """Get current user profile"""
    if current_user.id is None:
        return UserService.admin_profile()

    user = UserService.get_user_by_id(db, current_user.id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    return UserOut.model_validate(user)
