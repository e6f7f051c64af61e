import os
from collections import defaultdict

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from fastapi import APIRouter, Depends, HTTPException, Request, status

from inkwell.core.db.tables.comment import Comment, CommentStatus
from inkwell.core.db.tables.user import User
from inkwell.core.db.session import get_db, get_current_user
from inkwell.core.logger import get_logger
from inkwell.core.rate_limit import limiter
from inkwell.core.text import strip_html
from inkwell.api.v0.comment.models import (
    CommentCreate,
    CommentCount,
    CommentResponse,
    CommentWithReplies,
)

router = APIRouter(prefix="/comments")
logger = get_logger(__name__)


def auto_approve_comments() -> bool:
    """New comments skip the moderation queue unless INKWELL_COMMENT_AUTO_APPROVE=false"""
    return os.getenv("INKWELL_COMMENT_AUTO_APPROVE", "true").lower() != "false"


def get_comment_or_404(session: Session, comment_id: str) -> Comment:
    comment = session.execute(select(Comment).where(Comment.id == comment_id)).scalar()
    if not comment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Comment not found",
        )
    return comment


def store_error_message(exc: SQLAlchemyError) -> str:
    """Message of the underlying driver error, falling back to SQLAlchemy's own"""
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


def attach_replies(
    top_level: list[Comment], replies: list[Comment]
) -> list[CommentWithReplies]:
    """
    Nest replies under the comments they answer.

    replies may span several levels; an adjacency map from parent id to its
    children is built first and the tree is then grown from top_level.
    Replies whose parent is not part of the tree are dropped. Children keep
    the order they have in replies.
    """
    children: dict[str, list[Comment]] = defaultdict(list)
    for reply in replies:
        children[reply.parent_id].append(reply)

    def build(comment: Comment) -> CommentWithReplies:
        # Validate the plain row first; the ORM replies relationship is unfiltered
        row = CommentResponse.model_validate(comment)
        return CommentWithReplies(
            **row.model_dump(),
            replies=[build(child) for child in children.get(comment.id, [])],
        )

    return [build(comment) for comment in top_level]


def fetch_approved_replies(session: Session, parent_ids: list[str]) -> list[Comment]:
    """Approved replies below parent_ids, level by level, each level oldest-first"""
    replies: list[Comment] = []
    frontier = parent_ids
    while frontier:
        level = session.execute(
            select(Comment)
            .where(
                Comment.parent_id.in_(frontier),
                Comment.status == CommentStatus.APPROVED,
            )
            .order_by(Comment.created_at.asc(), Comment.id)
        ).scalars().all()
        replies.extend(level)
        frontier = [reply.id for reply in level]
    return replies


@router.post("", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_comment(
    request: Request,
    comment_data: CommentCreate,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    """Create a comment as the signed-in user"""
    content = strip_html(comment_data.content)
    post_id = (comment_data.post_id or "").strip()

    if not content or not post_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Content and post_id are required",
        )

    # If replying to another comment, verify it exists and belongs to same post
    if comment_data.parent_id:
        parent = get_comment_or_404(session, comment_data.parent_id)
        if parent.post_id != post_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Parent comment must belong to the same post",
            )

    comment = Comment(
        content=content,
        post_id=post_id,
        user_id=current_user.id,
        author_name=current_user.display_name,
        author_email=current_user.email,
        author_avatar=current_user.avatar_url,
        parent_id=comment_data.parent_id or None,
        status=CommentStatus.APPROVED if auto_approve_comments() else CommentStatus.PENDING,
    )

    try:
        session.add(comment)
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error(f"Error creating comment on post {post_id}: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=store_error_message(exc) or "Failed to create comment",
        )
    session.refresh(comment)

    logger.info(f"Comment {comment.id} created on post {post_id} by {current_user.id} ({comment.status.value})")

    return comment


@router.get("", response_model=list[CommentWithReplies])
def list_comments(
    post_id: str | None = None,
    session: Session = Depends(get_db),
):
    """Approved top-level comments of a post, newest first, with their approved replies"""
    if not post_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="post_id query parameter is required",
        )

    try:
        top_level = session.execute(
            select(Comment)
            .where(
                Comment.post_id == post_id,
                Comment.status == CommentStatus.APPROVED,
                Comment.parent_id.is_(None),
            )
            .order_by(Comment.created_at.desc(), Comment.id)
        ).scalars().all()

        replies = fetch_approved_replies(session, [comment.id for comment in top_level])
    except SQLAlchemyError as exc:
        logger.error(f"Error fetching comments for post {post_id}: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch comments",
        )

    return attach_replies(list(top_level), replies)


@router.get("/post/{post_id}/count", response_model=CommentCount)
def count_comments(
    post_id: str,
    session: Session = Depends(get_db),
):
    """Number of approved comments on a post, replies included"""
    count = session.execute(
        select(func.count())
        .select_from(Comment)
        .where(
            Comment.post_id == post_id,
            Comment.status == CommentStatus.APPROVED,
        )
    ).scalar_one()

    return CommentCount(count=count)


@router.get("/{comment_id}", response_model=CommentResponse)
def get_comment(
    comment_id: str,
    session: Session = Depends(get_db),
):
    comment = get_comment_or_404(session, comment_id)
    # Unmoderated comments are not public
    if comment.status != CommentStatus.APPROVED:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Comment not found",
        )
    return comment
