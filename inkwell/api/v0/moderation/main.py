"""
Comment moderation endpoints for the admin dashboard.

Every route requires an admin or editor session. Mutations are recorded in
the moderation log in the same transaction as the change itself.
"""
import math
from datetime import datetime, timezone

from sqlalchemy import select, func, or_, update, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from inkwell.core.db.tables.comment import Comment, CommentStatus
from inkwell.core.db.tables.moderation_log import log_moderation_action
from inkwell.core.db.tables.user import User, MODERATOR_ROLES
from inkwell.core.db.session import get_db, require_roles
from inkwell.core.logger import get_logger
from inkwell.core.rate_limit import get_real_client_ip
from inkwell.core.text import escape_like, strip_html
from inkwell.api.v0.comment.main import get_comment_or_404, store_error_message
from inkwell.api.v0.comment.models import (
    BULK_CHUNK_SIZE,
    CommentBulkAction,
    CommentBulkResult,
    CommentPage,
    CommentResponse,
    CommentStatusUpdate,
    CommentUpdate,
)

router = APIRouter(prefix="/comments")
logger = get_logger(__name__)

require_moderator = require_roles(*MODERATOR_ROLES)

BULK_STATUS = {
    "approve": CommentStatus.APPROVED,
    "reject": CommentStatus.REJECTED,
}


def audit(
    session: Session,
    request: Request,
    moderator: User,
    action: str,
    target_id: str,
    details: dict | None = None,
) -> None:
    log_moderation_action(
        session,
        action=action,
        actor_id=moderator.id,
        target_id=target_id,
        target_type="comment",
        details=details,
        ip_address=get_real_client_ip(request),
        user_agent=request.headers.get("User-Agent"),
    )


def commit_or_500(session: Session, what: str) -> None:
    try:
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error(f"Failed to {what}: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to {what}: {store_error_message(exc)}",
        )


@router.get("/admin", response_model=CommentPage)
def list_comments_for_admin(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status_filter: str = Query("all", alias="status", pattern="^(all|pending|approved|rejected)$"),
    search: str | None = Query(None, max_length=200),
    moderator: User = Depends(require_moderator),
    session: Session = Depends(get_db),
):
    """All comments, newest first, optionally filtered by status and a search term"""
    query = select(Comment)

    if status_filter != "all":
        query = query.where(Comment.status == CommentStatus(status_filter))

    if search:
        pattern = f"%{escape_like(search)}%"
        query = query.where(
            or_(
                Comment.content.ilike(pattern, escape="\\"),
                Comment.author_name.ilike(pattern, escape="\\"),
                Comment.author_email.ilike(pattern, escape="\\"),
            )
        )

    try:
        total = session.execute(
            select(func.count()).select_from(query.subquery())
        ).scalar_one()

        comments = session.execute(
            query.order_by(Comment.created_at.desc(), Comment.id)
            .offset((page - 1) * limit)
            .limit(limit)
        ).scalars().all()
    except SQLAlchemyError as exc:
        logger.error(f"Error fetching comments for admin: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch comments",
        )

    return CommentPage(
        data=[CommentResponse.model_validate(comment) for comment in comments],
        total=total,
        page=page,
        limit=limit,
        total_pages=math.ceil(total / limit),
    )


@router.patch("/bulk", response_model=CommentBulkResult)
def bulk_moderate_comments(
    request: Request,
    bulk_action: CommentBulkAction,
    moderator: User = Depends(require_moderator),
    session: Session = Depends(get_db),
):
    """Approve, reject or delete many comments at once"""
    comment_ids = list(dict.fromkeys(bulk_action.comment_ids))
    if not comment_ids:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No comment IDs provided",
        )

    affected = 0
    now = datetime.now(timezone.utc)

    # Chunked to keep IN clauses bounded
    for start in range(0, len(comment_ids), BULK_CHUNK_SIZE):
        chunk = comment_ids[start:start + BULK_CHUNK_SIZE]
        if bulk_action.action == "delete":
            statement = delete(Comment).where(Comment.id.in_(chunk))
        else:
            statement = (
                update(Comment)
                .where(Comment.id.in_(chunk))
                .values(status=BULK_STATUS[bulk_action.action], updated_at=now)
            )
        try:
            result = session.execute(statement)
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error(f"Bulk {bulk_action.action} failed: {exc}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to {bulk_action.action} comments: {store_error_message(exc)}",
            )
        affected += result.rowcount

    audit(
        session,
        request,
        moderator,
        action=f"bulk_{bulk_action.action}",
        target_id=",".join(comment_ids),
        details={"requested": len(comment_ids), "affected": affected},
    )
    commit_or_500(session, f"{bulk_action.action} comments")

    logger.info(f"Bulk {bulk_action.action} of {affected} comments by {moderator.id}")

    past_tense = {"approve": "approved", "reject": "rejected", "delete": "deleted"}[bulk_action.action]
    return CommentBulkResult(
        message=f"Comments {past_tense} successfully",
        affected=affected,
    )


@router.patch("/{comment_id}/status", response_model=CommentResponse)
def set_comment_status(
    request: Request,
    comment_id: str,
    status_update: CommentStatusUpdate,
    moderator: User = Depends(require_moderator),
    session: Session = Depends(get_db),
):
    comment = get_comment_or_404(session, comment_id)
    previous = comment.status

    comment.status = status_update.status
    audit(
        session,
        request,
        moderator,
        action="set_status",
        target_id=comment.id,
        details={"from": previous.value, "to": status_update.status.value},
    )
    commit_or_500(session, "update comment status")
    session.refresh(comment)

    logger.info(f"Comment {comment_id} {previous.value} -> {comment.status.value} by {moderator.id}")

    return comment


@router.put("/{comment_id}", response_model=CommentResponse)
def update_comment(
    request: Request,
    comment_id: str,
    comment_data: CommentUpdate,
    moderator: User = Depends(require_moderator),
    session: Session = Depends(get_db),
):
    """Edit a comment's content and/or status"""
    comment = get_comment_or_404(session, comment_id)
    changes = {}

    if comment_data.content is not None:
        content = strip_html(comment_data.content)
        if not content:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Content cannot be empty",
            )
        comment.content = content
        changes["content"] = True

    if comment_data.status is not None:
        changes["status"] = {"from": comment.status.value, "to": comment_data.status.value}
        comment.status = comment_data.status

    if changes:
        audit(session, request, moderator, action="update", target_id=comment.id, details=changes)
        commit_or_500(session, "update comment")
        session.refresh(comment)
        logger.info(f"Comment {comment_id} updated by {moderator.id}")

    return comment


@router.delete("/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_comment(
    request: Request,
    comment_id: str,
    moderator: User = Depends(require_moderator),
    session: Session = Depends(get_db),
):
    """Delete a comment together with all of its replies"""
    comment = get_comment_or_404(session, comment_id)

    session.delete(comment)
    audit(
        session,
        request,
        moderator,
        action="delete",
        target_id=comment_id,
        details={"post_id": comment.post_id},
    )
    commit_or_500(session, "delete comment")

    logger.info(f"Comment {comment_id} deleted by {moderator.id}")
