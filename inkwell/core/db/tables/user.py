import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, Enum
from sqlalchemy.orm import Mapped, mapped_column

from inkwell.core.db.tables.base import Base


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    EDITOR = "editor"
    AUTHOR = "author"
    USER = "user"


# Roles allowed to moderate comments
MODERATOR_ROLES = (UserRole.ADMIN, UserRole.EDITOR)


class User(Base):
    """
    Identity record for anyone who can sign in.

    full_name and avatar_url are profile metadata; both are optional and
    only used to present the user (e.g. as a comment author).
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True, default=None)
    avatar_url: Mapped[str | None] = mapped_column(String(512), nullable=True, default=None)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, native_enum=False, length=20, values_callable=lambda e: [m.value for m in e]),
        default=UserRole.USER,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc)
    )

    @property
    def display_name(self) -> str:
        """Full name from the profile, else the e-mail local part, else 'Anonymous'"""
        if self.full_name and self.full_name.strip():
            return self.full_name.strip()
        if self.email:
            local_part = self.email.split("@")[0]
            if local_part:
                return local_part
        return "Anonymous"

    @property
    def is_moderator(self) -> bool:
        return self.role in MODERATOR_ROLES
