"""Authentication endpoints"""

import logging
from datetime import datetime
from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from atelier.config import settings
from atelier.database import get_db
from atelier.models import User, UserRole
from atelier.schemas.auth import (
    RegisterRequest,
    RegisterResponse,
    LoginRequest,
    FirebaseLoginRequest,
    ResendVerificationRequest,
    ProfileUpdate,
    PasswordChangeRequest,
    UserResponse,
    MessageResponse,
)
from atelier.services.auth_service import AuthService
from atelier.services.email_service import EmailService, get_email_service
from atelier.services.firebase_auth_service import FirebaseAuthService
from atelier.services.notification_service import NotificationService
from atelier.services.redis_service import RedisService, get_redis_service
from atelier.services.session_service import SessionService
from atelier.api.dependencies import get_current_user
from atelier.api.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    TooManyRequestsError,
    ValidationError,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Authentication"])


async def ensure_unique_account(db: AsyncSession, username: str, email: str) -> None:
    """Raise ConflictError if the username or email is already taken"""
    result = await db.execute(select(User.id).where(User.username == username))
    if result.scalar_one_or_none() is not None:
        raise ConflictError("Username already exists")

    result = await db.execute(select(User.id).where(User.email == email))
    if result.scalar_one_or_none() is not None:
        raise ConflictError("Email already registered")


async def open_session(db: AsyncSession, user: User, response: Response) -> UserResponse:
    """Stamp the login, create a session and attach its cookie"""
    user.last_login = datetime.utcnow()
    session = await SessionService.create_session(db, user)
    await db.refresh(user)
    SessionService.set_cookie(response, session)
    return UserResponse.model_validate(user)


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    data: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    """
    Register a new client account

    The account stays unverified until the link sent by email is opened;
    no session is created here.

    Raises:
        ConflictError: If the username or email is taken (400)
    """
    await ensure_unique_account(db, data.username, data.email)

    token, expires = AuthService.generate_verification_token()
    user = User(
        username=data.username,
        email=data.email,
        password_hash=AuthService.hash_password(data.password),
        name=data.name,
        company=data.company,
        role=UserRole.CLIENT.value,
        verified=False,
        verification_token=token,
        verification_expires=expires,
        preferences={},
    )
    await AuthService.save_new_user(db, user)
    logger.info(f"Registered user {user.id} ({user.username})")

    payload = RegisterResponse(
        message="Registration successful. Please check your email to verify your account.",
        user=UserResponse.model_validate(user),
    )

    await email_service.send_verification_email(user.email, user.username, token)
    await NotificationService(db).notify(
        user.id,
        "Welcome to Digitaal Atelier",
        "Your account has been created. Confirm your email address to get started.",
        type="success",
    )
    return payload


@router.post("/login", response_model=UserResponse)
async def login(
    data: LoginRequest,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
    redis_service: RedisService = Depends(get_redis_service),
):
    """
    Log in with username (or email) and password

    Sets the session cookie on success.

    Raises:
        TooManyRequestsError: After too many failed attempts from this IP
        AuthenticationError: If the credentials are wrong
        AuthorizationError: If the email address has not been confirmed
    """
    # Get client IP for rate limiting
    client_ip = request.client.host if request.client else "unknown"

    attempts = await redis_service.get_login_attempts(client_ip)
    if attempts >= settings.login_max_attempts:
        minutes = settings.login_attempt_window_seconds // 60
        raise TooManyRequestsError(
            f"Maximum login attempts exceeded. Please try again in {minutes} minutes."
        )

    user = await AuthService.get_user_by_login(db, data.username)

    if not user or not AuthService.verify_password(data.password, user.password_hash):
        await redis_service.increment_login_attempts(client_ip)
        logger.warning(f"Failed login for '{data.username}' from {client_ip}")
        # Don't reveal which field failed
        raise AuthenticationError("Invalid username or password")

    if not user.verified:
        raise AuthorizationError("Please verify your email address before logging in")

    await redis_service.reset_login_attempts(client_ip)
    logger.info(f"User {user.id} logged in")
    return await open_session(db, user, response)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """Destroy the current session. Succeeds without a session too."""
    session_id = request.cookies.get(settings.session_cookie_name)
    if session_id:
        await SessionService.destroy_session(db, session_id)
    SessionService.clear_cookie(response)
    return MessageResponse(message="Logged out")


@router.get("/user", response_model=UserResponse)
async def get_user(current_user: User = Depends(get_current_user)):
    """Return the logged-in user"""
    return UserResponse.model_validate(current_user)


@router.put("/user", response_model=UserResponse)
async def update_user(
    data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update the logged-in user's profile"""
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(current_user, field, value)
    current_user.updated_at = datetime.utcnow()

    await db.commit()
    await db.refresh(current_user)
    return UserResponse.model_validate(current_user)


@router.put("/user/password", response_model=MessageResponse)
async def change_password(
    data: PasswordChangeRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Change the logged-in user's password

    Raises:
        AuthenticationError: If the current password is wrong
    """
    if not AuthService.verify_password(data.current_password, current_user.password_hash):
        raise AuthenticationError("Current password is incorrect")

    current_user.password_hash = AuthService.hash_password(data.new_password)
    current_user.updated_at = datetime.utcnow()
    await db.commit()
    logger.info(f"User {current_user.id} changed their password")
    return MessageResponse(message="Password updated")


@router.get("/verify-email", response_model=MessageResponse)
async def verify_email(
    token: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
):
    """
    Confirm an email address with the token from the verification mail

    Raises:
        ValidationError: If the token is unknown or expired
    """
    result = await db.execute(select(User).where(User.verification_token == token))
    user = result.scalar_one_or_none()

    if not user:
        raise ValidationError("Invalid verification token")

    if user.verification_expires and user.verification_expires < datetime.utcnow():
        raise ValidationError("Verification token has expired, please request a new one")

    user.verified = True
    user.verification_token = None
    user.verification_expires = None
    await db.commit()
    logger.info(f"User {user.id} verified their email")
    return MessageResponse(message="Email verified. You can now log in.")


@router.post("/resend-verification", response_model=MessageResponse)
async def resend_verification(
    data: ResendVerificationRequest,
    db: AsyncSession = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    """
    Issue a fresh verification token and mail it

    Raises:
        NotFoundError: If no account uses the email address
        ValidationError: If the account is already verified
    """
    result = await db.execute(select(User).where(User.email == data.email))
    user = result.scalar_one_or_none()

    if not user:
        raise NotFoundError("No account found with this email address")
    if user.verified:
        raise ValidationError("This account is already verified")

    token, expires = AuthService.generate_verification_token()
    user.verification_token = token
    user.verification_expires = expires
    await db.commit()

    await email_service.send_verification_email(user.email, user.username, token)
    return MessageResponse(message="Verification email sent")


@router.post("/auth/firebase", response_model=UserResponse)
async def firebase_login(
    data: FirebaseLoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """
    Sign in with a Firebase ID token (Google or GitHub)

    Existing accounts with the same email are linked; otherwise a new
    verified client account is created.

    Raises:
        ValidationError: If the identity has no email address
        AuthenticationError: If the token is invalid
        UpstreamError: If the identity provider can't be reached
    """
    firebase = FirebaseAuthService(db)
    identity = await firebase.verify_token(data.id_token)
    user = await firebase.get_or_create_user(identity)
    logger.info(f"User {user.id} signed in with federated identity")
    return await open_session(db, user, response)
