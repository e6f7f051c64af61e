from sqlalchemy import String, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from inkwell.core.db.tables.base import Base
from inkwell.core.db.tables.user import User
from datetime import datetime, timezone


class SessionKey(Base):
    """
    Stores hashed session keys for user authentication.

    Security design:
    - sk_id: First 16 chars of the original key used as a lookup identifier
    - sk_hash: Bcrypt hash of the full session key
    - user_id: Owner of the key
    - created_at: Timestamp for key rotation tracking
    """
    __tablename__ = "session_keys"

    sk_id: Mapped[str] = mapped_column(String(16), primary_key=True)
    sk_hash: Mapped[str] = mapped_column(String(256))
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc)
    )

    user: Mapped[User] = relationship(User, lazy="joined")
