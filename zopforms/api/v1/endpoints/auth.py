from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from zopforms.core.auth import get_current_user
from zopforms.core.config import settings
from zopforms.core.database import get_db
from zopforms.models.user import User
from zopforms.schemas.auth import (
    AuthResponse,
    LoginRequest,
    MessageResponse,
    ProfileUpdateRequest,
    RegisterRequest,
    UserProfileResponse,
)
from zopforms.services.auth import (
    EmailAlreadyRegisteredError,
    InvalidPasswordError,
    authenticate_user,
    create_access_token,
    create_user,
    get_user_by_email,
    update_profile,
)

router = APIRouter()


def _set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=not settings.DEBUG,
        samesite="lax",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        path="/",
    )


@router.post("/register", response_model=AuthResponse, status_code=201)
def register(body: RegisterRequest, response: Response, db: Session = Depends(get_db)):
    if get_user_by_email(db, body.email):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )
    user = create_user(db, name=body.name, email=body.email, password=body.password)

    token = create_access_token(user.id, user.email)
    _set_auth_cookie(response, token)
    return AuthResponse(
        access_token=token,
        user=UserProfileResponse.model_validate(user),
        message="Account created successfully",
    )


@router.post("/login", response_model=AuthResponse)
def login(body: LoginRequest, response: Response, db: Session = Depends(get_db)):
    user = authenticate_user(db, body.email, body.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is deactivated",
        )

    token = create_access_token(user.id, user.email)
    _set_auth_cookie(response, token)
    return AuthResponse(
        access_token=token,
        user=UserProfileResponse.model_validate(user),
        message="Login successful",
    )


@router.post("/logout", response_model=MessageResponse)
def logout(response: Response):
    response.delete_cookie(key=settings.AUTH_COOKIE_NAME, path="/")
    return MessageResponse(message="Logged out")


@router.get("/profile", response_model=UserProfileResponse)
def get_profile(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/profile", response_model=UserProfileResponse)
def put_profile(
    body: ProfileUpdateRequest,
    response: Response,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    previous_email = current_user.email
    try:
        user = update_profile(
            db,
            current_user,
            name=body.name,
            email=body.email,
            current_password=body.current_password,
            new_password=body.new_password,
        )
    except EmailAlreadyRegisteredError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )
    except InvalidPasswordError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    if user.email != previous_email:
        # The session token carries the email claim
        _set_auth_cookie(response, create_access_token(user.id, user.email))
    return user
