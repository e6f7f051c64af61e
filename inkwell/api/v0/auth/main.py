import os

from sqlalchemy.orm import Session
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from fastapi import APIRouter, Depends, HTTPException, status, Request, Response

from inkwell.core.security import new_sk, hash_key, verify_key, extract_key_id
from inkwell.core.rate_limit import limiter
from inkwell.core.db.tables.sessionkey import SessionKey
from inkwell.core.db.tables.user import User, UserRole
from inkwell.core.db.session import get_db, get_current_user, SESSION_COOKIE
from inkwell.core.logger import get_logger
from inkwell.api.v0.auth.models import (
    RegisterRequest,
    RegisterResponse,
    UserResponse,
    VerifyLoginRequest,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/auth")

SESSION_MAX_AGE = 365 * 24 * 60 * 60  # 1 year in seconds


def admin_emails() -> set[str]:
    """E-mail addresses listed in INKWELL_ADMIN_EMAILS (comma separated)"""
    raw = os.getenv("INKWELL_ADMIN_EMAILS", "")
    return {email.strip().lower() for email in raw.split(",") if email.strip()}


def set_session_cookie(response: Response, session_key: str) -> None:
    # HttpOnly keeps the key away from scripts; SameSite=Strict stops cross-site posts
    response.set_cookie(
        key=SESSION_COOKIE,
        value=session_key,
        httponly=True,
        secure=os.getenv("INKWELL_COOKIE_SECURE", "false").lower() == "true",
        samesite="strict",
        max_age=SESSION_MAX_AGE,
        path="/",
    )


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("5/minute")
def register(
    request: Request,
    response: Response,
    register_request: RegisterRequest,
    session: Session = Depends(get_db),
):
    """
    Create a user and an initial session key.

    The plaintext key is returned once and set as an HttpOnly cookie; only
    its bcrypt hash is stored.
    """
    email = register_request.email
    logger.info(f"New user registration attempt: {email}")

    existing = session.execute(select(User).where(User.email == email)).scalar()
    if existing:
        logger.warning(f"Registration failed - e-mail already registered: {email}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="E-mail already registered",
        )

    user = User(
        email=email,
        full_name=register_request.full_name,
        avatar_url=register_request.avatar_url,
        role=UserRole.ADMIN if email in admin_emails() else UserRole.USER,
    )
    session_key = new_sk()

    try:
        session.add(user)
        session.flush()
        session.add(SessionKey(sk_id=extract_key_id(session_key), sk_hash=hash_key(session_key), user_id=user.id))
        session.commit()
    except IntegrityError:
        session.rollback()
        logger.error(f"Database integrity error during user creation: {email}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="E-mail already registered",
        )
    session.refresh(user)

    set_session_cookie(response, session_key)
    logger.info(f"User created successfully: {user.id} ({user.role.value})")

    return RegisterResponse(sk=session_key, user=UserResponse.model_validate(user))


@router.post("/verify", response_model=UserResponse)
@limiter.limit("10/minute")
def verify_login(
    request: Request,
    response: Response,
    verify_request: VerifyLoginRequest,
    session: Session = Depends(get_db),
):
    """Verify a session key, set it as cookie and return its user"""
    sk_object = session.execute(
        select(SessionKey).where(SessionKey.sk_id == extract_key_id(verify_request.sk))
    ).scalar()

    if not sk_object or not verify_key(verify_request.sk, sk_object.sk_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    set_session_cookie(response, verify_request.sk)
    logger.info(f"Login verified for user: {sk_object.user_id}")

    return sk_object.user


@router.post("/logout")
def logout(response: Response):
    """Clear the session cookie (HttpOnly cookies cannot be removed by scripts)"""
    response.delete_cookie(key=SESSION_COOKIE, path="/")
    logger.info("User logged out")
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user
