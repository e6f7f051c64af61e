from typing import Literal

from pydantic import BaseModel, Field
from datetime import datetime

from inkwell.core.db.tables.comment import CommentStatus


MAX_CONTENT_LENGTH = 10000
BULK_CHUNK_SIZE = 100


class CommentCreate(BaseModel):
    # Emptiness is checked by the route so that it answers 400, not 422
    content: str | None = Field(None, max_length=MAX_CONTENT_LENGTH)
    post_id: str | None = Field(None, description="ID of the post to comment on")
    parent_id: str | None = Field(None, description="ID of parent comment for replies")


class CommentUpdate(BaseModel):
    content: str | None = Field(None, max_length=MAX_CONTENT_LENGTH)
    status: CommentStatus | None = None


class CommentStatusUpdate(BaseModel):
    status: CommentStatus


class CommentBulkAction(BaseModel):
    comment_ids: list[str]
    action: Literal["approve", "reject", "delete"]


class CommentBulkResult(BaseModel):
    message: str
    affected: int


class CommentResponse(BaseModel):
    id: str
    content: str
    post_id: str
    user_id: str | None
    author_name: str
    author_email: str | None
    author_avatar: str | None
    parent_id: str | None
    status: CommentStatus
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CommentWithReplies(CommentResponse):
    replies: list["CommentWithReplies"] = []


# Allow self-referential model
CommentWithReplies.model_rebuild()


class CommentCount(BaseModel):
    count: int


class CommentPage(BaseModel):
    """One page of the moderation listing"""
    data: list[CommentResponse]
    total: int
    page: int
    limit: int
    total_pages: int
