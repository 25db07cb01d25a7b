# app/routes/auth.py
"""
Taste Palette API - Authentication Routes.

Signup, email verification, login, session and password reset endpoints.
"""

from datetime import timedelta
from typing import Optional
import logging

from fastapi import APIRouter, Depends, Query, Request
from pymongo.errors import DuplicateKeyError

from app.dependencies import get_current_session, get_current_user, get_email_service, get_optional_user
from app.middleware.auth import CurrentSession, parse_object_id
from app.middleware.rate_limit import auth_limit, limiter
from app.models.mongodb import SessionDocument, UserDocument, utcnow
from app.schemas.auth import (
    EmailRequest,
    GoogleSignInRequest,
    LoginRequest,
    RefreshRequest,
    ResetPasswordConfirmRequest,
    SessionCheckResponse,
    SessionUser,
    SignupRequest,
    TokenResponse,
)
from app.schemas.base import SuccessResponse
from app.schemas.user import UserProfile, UserProfileResponse
from app.services.auth import (
    create_access_token,
    create_refresh_token,
    create_verification_token,
    decode_verification_token,
    generate_reset_token,
    hash_password,
    reset_token_expiry,
    session_claims,
    verify_password,
    verify_refresh_token,
)
from app.services.email_service import EmailService
from app.services.oauth_service import oauth_service
from app.utils.errors import (
    AuthenticationError,
    ConflictError,
    EmailNotVerifiedError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from app.utils.security import validate_password_strength
from settings import settings

logger = logging.getLogger(__name__)
router = APIRouter()


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def _check_password(password: str) -> None:
    is_valid, error = validate_password_strength(password)
    if not is_valid:
        raise ValidationError(error)


async def _issue_tokens(user: UserDocument, request: Request) -> TokenResponse:
    """Create a session row and the token pair bound to it."""
    session = SessionDocument(
        user_id=user.id,
        expires_at=utcnow() + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        user_agent=request.headers.get("user-agent")
    )
    await session.insert()

    claims = session_claims(user, str(session.id))
    return TokenResponse(
        access_token=create_access_token(claims),
        refresh_token=create_refresh_token({"sub": claims["sub"], "sid": claims["sid"]}),
        user=SessionUser(
            id=str(user.id),
            email=user.email,
            name=user.name,
            onboarding_status=user.onboarding_status
        )
    )


@router.post("/signup", response_model=SuccessResponse)
@limiter.limit(auth_limit)
async def signup(
    request: Request,
    payload: SignupRequest,
    mailer: EmailService = Depends(get_email_service)
):
    """
    Register a new user and send the verification email.

    A failed email does not fail signup; the user can ask for a new link.

    Raises:
        ConflictError 400: Email already registered
        ValidationError 400: Weak password
    """
    email = _normalize_email(payload.email)
    if await UserDocument.find_one(UserDocument.email == email):
        raise ConflictError()
    _check_password(payload.password)

    token = create_verification_token(email)
    user = UserDocument(
        email=email,
        password_hash=hash_password(payload.password),
        name=payload.name.strip(),
        verification_token=token,
        free_scan_count=settings.FREE_SCAN_SIGNUP_BONUS
    )
    try:
        await user.insert()
    except DuplicateKeyError:
        raise ConflictError()
    logger.info(f"New user registered: {user.email}")

    if not await mailer.send_verification_email(user.email, user.name, token):
        logger.warning(f"Verification email not sent to {user.email}; user can resend")

    return SuccessResponse(message="User created successfully. Please check your email to verify your account.")


@router.get("/verify", response_model=SuccessResponse)
async def verify_email(token: str = Query(..., min_length=1)):
    """
    Confirm an email address from the emailed link.

    Verifying an already verified account is a no-op success.

    Raises:
        ValidationError 400: Invalid, expired or superseded token
    """
    email = decode_verification_token(token)
    if not email:
        raise ValidationError("Invalid or expired verification token")

    user = await UserDocument.find_one(UserDocument.email == email)
    if not user:
        raise ValidationError("Invalid or expired verification token")

    if user.email_verified:
        return SuccessResponse(message="Email already verified")

    if user.verification_token != token:
        raise ValidationError("Invalid or expired verification token")

    user.email_verified_at = utcnow()
    user.verification_token = None
    user.updated_at = utcnow()
    await user.save()
    logger.info(f"Email verified: {user.email}")

    return SuccessResponse(message="Email verified successfully")


@router.post("/resend-verification", response_model=SuccessResponse)
@limiter.limit(auth_limit)
async def resend_verification(
    request: Request,
    payload: EmailRequest,
    mailer: EmailService = Depends(get_email_service)
):
    """
    Issue a fresh verification link; the previous one stops working.

    Raises:
        NotFoundError 404: Unknown email
        ValidationError 400: Already verified
    """
    user = await UserDocument.find_one(UserDocument.email == _normalize_email(payload.email))
    if not user:
        raise NotFoundError("User not found")
    if user.email_verified:
        raise ValidationError("Email is already verified")

    user.verification_token = create_verification_token(user.email)
    user.updated_at = utcnow()
    await user.save()

    if not await mailer.send_verification_email(user.email, user.name, user.verification_token):
        logger.warning(f"Verification email resend failed for {user.email}")

    return SuccessResponse(message="Verification email sent")


@router.post("/login", response_model=TokenResponse)
@limiter.limit(auth_limit)
async def login(request: Request, payload: LoginRequest):
    """
    Login user and return session tokens.

    Raises:
        InvalidCredentialsError 401: Unknown email or wrong password
        EmailNotVerifiedError 403: Email not verified yet
    """
    user = await UserDocument.find_one(UserDocument.email == _normalize_email(payload.email))
    if not user:
        raise InvalidCredentialsError()
    if not user.email_verified:
        raise EmailNotVerifiedError()
    if not verify_password(payload.password, user.password_hash):
        raise InvalidCredentialsError()

    user.last_login_at = utcnow()
    await user.save()
    logger.info(f"User logged in: {user.email}")

    return await _issue_tokens(user, request)


@router.post("/google", response_model=TokenResponse)
@limiter.limit(auth_limit)
async def google_sign_in(request: Request, payload: GoogleSignInRequest):
    """
    Sign in with a Google ID token, creating or linking the account.

    Raises:
        AuthenticationError 401: Token rejected by Google
    """
    profile = await oauth_service.verify_google_token(payload.token)
    if not profile or not profile.get("email") or not profile.get("sub"):
        raise AuthenticationError("Invalid Google token")

    user = await oauth_service.sign_in(profile)
    user.last_login_at = utcnow()
    await user.save()

    return await _issue_tokens(user, request)


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(request: Request, payload: RefreshRequest):
    """
    Exchange a refresh token for a new token pair on the same session.

    Raises:
        AuthenticationError 401: Invalid token, revoked session or deleted user
    """
    claims = verify_refresh_token(payload.refresh_token)
    if not claims:
        raise AuthenticationError("Invalid or expired refresh token")

    session_id = parse_object_id(claims.get("sid"))
    user_id = parse_object_id(claims.get("sub"))
    session = await SessionDocument.get(session_id) if session_id else None
    user = await UserDocument.get(user_id) if user_id else None
    if not session or not user or session.user_id != user.id or session.expires_at <= utcnow():
        raise AuthenticationError("Session expired")

    # Rotate: the old session row is replaced by a fresh one
    await session.delete()
    return await _issue_tokens(user, request)


@router.post("/logout", response_model=SuccessResponse)
async def logout(current: CurrentSession = Depends(get_current_session)):
    """End the current session."""
    await current.session.delete()
    logger.info(f"User logged out: {current.user.email}")
    return SuccessResponse(message="Successfully logged out")


@router.get("/check-session", response_model=SessionCheckResponse)
async def check_session(user: Optional[UserDocument] = Depends(get_optional_user)):
    """Report whether the caller's session still maps to an existing user."""
    if user is None:
        return SessionCheckResponse(valid=False)
    return SessionCheckResponse(valid=True, onboarding_status=user.onboarding_status)


@router.get("/me", response_model=UserProfileResponse)
async def me(user: UserDocument = Depends(get_current_user)):
    return UserProfileResponse(user=UserProfile.from_document(user))


@router.post("/reset-password", response_model=SuccessResponse)
@limiter.limit(auth_limit)
async def reset_password(
    request: Request,
    payload: EmailRequest,
    mailer: EmailService = Depends(get_email_service)
):
    """
    Email a password reset link.

    Always succeeds so the response never reveals whether an account exists.
    """
    user = await UserDocument.find_one(UserDocument.email == _normalize_email(payload.email))
    if user:
        user.reset_token = generate_reset_token()
        user.reset_token_expires_at = reset_token_expiry(utcnow())
        user.updated_at = utcnow()
        await user.save()

        if not await mailer.send_password_reset_email(user.email, user.name, user.reset_token):
            logger.warning(f"Password reset email not sent to {user.email}")
    else:
        logger.info("Password reset requested for unknown email")

    return SuccessResponse(message="If an account exists with this email, you will receive a password reset link.")


@router.post("/reset-password/confirm", response_model=SuccessResponse)
@limiter.limit(auth_limit)
async def reset_password_confirm(request: Request, payload: ResetPasswordConfirmRequest):
    """
    Set a new password with a reset token.

    Tokens are single use and expire at ``reset_token_expires_at``.

    Raises:
        ValidationError 400: Unknown, used or expired token, or weak password
    """
    user = await UserDocument.find_one(UserDocument.reset_token == payload.token)
    if not user or not user.reset_token_expires_at or user.reset_token_expires_at <= utcnow():
        raise ValidationError("Invalid or expired reset token")
    _check_password(payload.password)

    user.password_hash = hash_password(payload.password)
    user.reset_token = None
    user.reset_token_expires_at = None
    user.updated_at = utcnow()
    await user.save()

    # Sign out every device
    await SessionDocument.find(SessionDocument.user_id == user.id).delete()
    logger.info(f"Password reset for {user.email}")

    return SuccessResponse(message="Password has been reset successfully")
