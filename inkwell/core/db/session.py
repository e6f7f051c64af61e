from sqlalchemy import select
from fastapi import Depends, HTTPException, status, Request
from typing import Callable, Generator
from sqlalchemy.orm import sessionmaker, Session
from inkwell.core.db.engine import engine
from inkwell.core.db.tables.sessionkey import SessionKey
from inkwell.core.db.tables.user import User, UserRole
from inkwell.core.security import verify_key, extract_key_id

SESSION_COOKIE = "session_key"

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def resolve_session_user(session: Session, session_key: str) -> User | None:
    """Return the user owning session_key, or None if the key is unknown or wrong"""
    sk_object = session.execute(
        select(SessionKey).where(SessionKey.sk_id == extract_key_id(session_key))
    ).scalar()

    if not sk_object:
        return None

    # Verify the full key against the hash
    if not verify_key(session_key, sk_object.sk_hash):
        return None

    return sk_object.user


def get_current_user(
    request: Request,
    session: Session = Depends(get_db),
) -> User:
    """Dependency to authenticate user via session key from HttpOnly cookie"""
    session_key = request.cookies.get(SESSION_COOKIE)

    if not session_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required. Please sign in to comment.",
        )

    user = resolve_session_user(session, session_key)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid session"
        )

    return user


def get_current_user_optional(
    request: Request,
    session: Session = Depends(get_db),
) -> User | None:
    """Get current user from cookie if available"""
    session_key = request.cookies.get(SESSION_COOKIE)
    if not session_key:
        return None
    return resolve_session_user(session, session_key)


def require_roles(*roles: UserRole) -> Callable[..., User]:
    """Build a dependency that lets only users with one of the given roles through"""

    def dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return current_user

    return dependency
