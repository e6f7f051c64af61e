"""
Moderation audit log table for tracking all comment moderation actions.
"""
import json

from sqlalchemy import String, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func
from datetime import datetime

from inkwell.core.db.tables.base import Base


class ModerationLog(Base):
    """
    Audit log for all moderation actions.

    Rows are never updated or deleted by the application, so the history
    outlives the comments it refers to.
    """

    __tablename__ = "moderation_log"

    id: Mapped[int] = mapped_column(primary_key=True)
    action: Mapped[str] = mapped_column(String(50))  # "set_status", "update", "delete", "bulk_approve", ...
    actor_id: Mapped[str] = mapped_column(String(36), index=True)
    target_id: Mapped[str | None] = mapped_column(Text, nullable=True)  # Comment ID, or several for bulk actions
    target_type: Mapped[str | None] = mapped_column(String(50), nullable=True)  # "comment", "post"
    details: Mapped[str | None] = mapped_column(Text, nullable=True)  # JSON details of the action
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)  # IPv6 max length
    user_agent: Mapped[str | None] = mapped_column(String(512), nullable=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), index=True)


def log_moderation_action(
    session,
    action: str,
    actor_id: str,
    target_id: str | None = None,
    target_type: str | None = None,
    details: dict | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> ModerationLog:
    """
    Add a moderation action to the audit trail.

    The entry is only added to the session; it is committed together with
    the moderated change.

    Args:
        session: Database session
        action: Type of action (set_status, update, delete, bulk_approve, bulk_reject, bulk_delete)
        actor_id: ID of the moderating user
        target_id: ID of the target (comment id, or a comma separated list for bulk actions)
        target_type: Type of target (comment, post)
        details: Additional details, stored as JSON
        ip_address: IP address of the requester
        user_agent: User agent of the requester

    Returns:
        The pending ModerationLog entry
    """
    log_entry = ModerationLog(
        action=action,
        actor_id=actor_id,
        target_id=target_id,
        target_type=target_type,
        details=json.dumps(details) if details is not None else None,
        ip_address=ip_address,
        user_agent=user_agent[:512] if user_agent else None,
    )
    session.add(log_entry)
    return log_entry
