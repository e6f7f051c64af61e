from fastapi import APIRouter
from inkwell.api.v0.auth.main import router as auth_router
from inkwell.api.v0.post.main import router as post_router
from inkwell.api.v0.moderation.main import router as moderation_router
from inkwell.api.v0.comment.main import router as comment_router

router = APIRouter(prefix="/api")
router.include_router(auth_router)
router.include_router(post_router)
# Moderation routes first: /comments/admin and /comments/bulk must win over /comments/{comment_id}
router.include_router(moderation_router)
router.include_router(comment_router)
