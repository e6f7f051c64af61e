from datetime import datetime, timezone

from sqlalchemy import select, desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from fastapi import APIRouter, Depends, HTTPException, Query, status

from inkwell.core.db.tables.post import Post, PostStatus
from inkwell.core.db.tables.user import User, UserRole
from inkwell.core.db.session import get_db, require_roles
from inkwell.core.logger import get_logger
from inkwell.core.text import slugify
from inkwell.api.v0.post.models import PostCreate, PostResponse

router = APIRouter(prefix="/posts")
logger = get_logger(__name__)


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
def create_post(
    post_data: PostCreate,
    current_user: User = Depends(require_roles(UserRole.ADMIN, UserRole.EDITOR, UserRole.AUTHOR)),
    session: Session = Depends(get_db),
):
    slug = post_data.slug or slugify(post_data.title)
    if not slug:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot derive a slug from the title",
        )

    post = Post(
        title=post_data.title,
        slug=slug,
        content=post_data.content,
        excerpt=post_data.excerpt,
        status=post_data.status,
        author_id=current_user.id,
        published_at=datetime.now(timezone.utc) if post_data.status == PostStatus.PUBLISHED else None,
    )

    try:
        session.add(post)
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A post with this slug already exists",
        )
    session.refresh(post)

    logger.info(f"Post {post.id} ({post.slug}) created by {current_user.id}")

    return post


@router.get("", response_model=list[PostResponse])
def list_posts(
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    session: Session = Depends(get_db),
):
    """Published posts, newest first"""
    posts = session.execute(
        select(Post)
        .where(Post.status == PostStatus.PUBLISHED)
        .order_by(desc(Post.published_at))
        .offset(skip)
        .limit(limit)
    ).scalars().all()
    return posts


@router.get("/{slug}", response_model=PostResponse)
def get_post(
    slug: str,
    session: Session = Depends(get_db),
):
    post = session.execute(select(Post).where(Post.slug == slug)).scalar()
    if not post:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Post not found",
        )
    return post


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_post(
    post_id: str,
    current_user: User = Depends(require_roles(UserRole.ADMIN)),
    session: Session = Depends(get_db),
):
    """Delete a post; its comments go with it"""
    post = session.execute(select(Post).where(Post.id == post_id)).scalar()
    if not post:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Post not found",
        )

    session.delete(post)
    session.commit()

    logger.info(f"Post {post_id} deleted by {current_user.id}")
