from pydantic import BaseModel, Field, field_validator
from datetime import datetime

from inkwell.core.db.tables.post import PostStatus
from inkwell.core.text import strip_html


class PostCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    slug: str | None = Field(None, max_length=100, pattern=r"^[a-z0-9_-]+$")
    excerpt: str | None = Field(None, max_length=512)
    status: PostStatus = PostStatus.DRAFT

    @field_validator("title", "excerpt")
    @classmethod
    def sanitize_text(cls, v: str | None) -> str | None:
        """Titles and excerpts are plain text"""
        if v:
            return strip_html(v)
        return v


class PostResponse(BaseModel):
    id: str
    title: str
    slug: str
    content: str
    excerpt: str | None
    status: PostStatus
    author_id: str | None
    published_at: datetime | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
