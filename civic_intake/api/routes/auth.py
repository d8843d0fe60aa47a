import logging
from datetime import datetime, timezone
from typing import Optional
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from civic_intake.api.dependencies import get_db, require_session
from civic_intake.api.schemas import CamelModel
from civic_intake.api.session import clear_session_cookie, store_session_cookie
from civic_intake.core.errors import AuthenticationError, ConflictError, ValidationError
from civic_intake.core.policy import Role
from civic_intake.core.security import (
    SessionClaims,
    create_access_token,
    get_password_hash,
    simulate_password_check,
    verify_password,
)
from civic_intake.models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

MIN_PASSWORD_LENGTH = 8
# Same message for unknown email and wrong password so callers can't probe for accounts
INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


class LoginRequest(CamelModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class SignupRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)
    full_name: str = Field(min_length=1)
    phone: Optional[str] = None
    role: Role = Role.CITIZEN


class UserResponse(CamelModel):
    id: str
    email: str
    full_name: str
    role: Role

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    user: UserResponse


class LogoutResponse(BaseModel):
    success: bool


def _start_session(response: Response, user: User) -> None:
    token = create_access_token(SessionClaims(user_id=user.id, email=user.email, role=Role(user.role)))
    store_session_cookie(response, token)


@router.post("/login", response_model=AuthResponse)
async def login(credentials: LoginRequest, response: Response, db: Session = Depends(get_db)):
    """Login with email and password, sets the session cookie"""
    email = credentials.email.strip().lower()
    user = db.query(User).filter(User.email == email).first()

    if user is None:
        # Keep response timing close to the wrong-password path
        simulate_password_check()
        logger.info("Failed login attempt for unknown email")
        raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

    if not verify_password(credentials.password, user.password_hash):
        logger.info(f"Failed login attempt for user {user.id}")
        raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

    user.last_login = datetime.now(timezone.utc)
    db.commit()
    db.refresh(user)

    _start_session(response, user)
    logger.info(f"User {user.id} logged in")
    return {"user": UserResponse.model_validate(user)}


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(user_data: SignupRequest, response: Response, db: Session = Depends(get_db)):
    """Register a new user and sign them in"""
    if len(user_data.password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    email = str(user_data.email).lower()

    # Explicit check gives a clear 409 before paying for a bcrypt hash
    existing_user = db.query(User.id).filter(User.email == email).first()
    if existing_user:
        raise ConflictError("User already exists")

    db_user = User(
        email=email,
        password_hash=get_password_hash(user_data.password),
        full_name=user_data.full_name,
        phone=user_data.phone or None,
        role=user_data.role,
        # No email verification flow yet, accounts start verified
        is_verified=True,
    )
    db.add(db_user)
    try:
        db.commit()
    except IntegrityError:
        # Two signups for the same email raced past the check above
        db.rollback()
        raise ConflictError("User already exists")
    # Refresh to load server-generated fields
    db.refresh(db_user)

    _start_session(response, db_user)
    logger.info(f"User {db_user.id} signed up with role {db_user.role.value}")
    return {"user": UserResponse.model_validate(db_user)}


@router.post("/logout", response_model=LogoutResponse)
async def logout(response: Response):
    """Clear the session cookie"""
    clear_session_cookie(response)
    return {"success": True}


@router.get("/me", response_model=AuthResponse)
async def get_current_user_info(claims: SessionClaims = Depends(require_session), db: Session = Depends(get_db)):
    """Get current user information"""
    user = db.query(User).filter(User.id == claims.user_id).first()
    # Token outlived the account
    if user is None:
        raise AuthenticationError()
    return {"user": UserResponse.model_validate(user)}
