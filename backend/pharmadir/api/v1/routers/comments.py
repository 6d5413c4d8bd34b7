# pharmadir/api/v1/routers/comments.py
from fastapi import APIRouter, Depends
from pharmadir.api.v1.deps import get_context, get_current_identity
from pharmadir.core.context import AppContext
from pharmadir.schemas.comments import CommentIn
from pharmadir.schemas.identity import UserIdentity

router = APIRouter(prefix="/pharmacies/{pharmacy_id}/comments", tags=["comments"])

@router.get("")
async def list_comments(pharmacy_id: str, ctx: AppContext = Depends(get_context)):
    """
    All comments of a pharmacy, oldest first. No authentication required.

    Error codes:
        - NOT_FOUND (404): Pharmacy does not exist
    """
    items = await ctx.comments.list_comments(pharmacy_id)
    return {"success": True, "data": {"items": items}}

@router.post("")
async def create_comment(
    pharmacy_id: str,
    body: CommentIn,
    identity: UserIdentity = Depends(get_current_identity),
    ctx: AppContext = Depends(get_context),
):
    """
    Comment on a pharmacy as the authenticated user.

    Returns:
        dict: {"success": True, "data": {id, ownerUid, authorName, text, starRating, createdAt}}

    Error codes:
        - NOT_FOUND (404): Pharmacy does not exist
    """
    comment = await ctx.comments.create_comment(pharmacy_id, body.text, body.starRating, identity)
    return {"success": True, "data": comment}

@router.delete("/{comment_id}")
async def delete_comment(
    pharmacy_id: str,
    comment_id: str,
    identity: UserIdentity = Depends(get_current_identity),
    ctx: AppContext = Depends(get_context),
):
    """
    Delete one of the caller's own comments.

    Error codes:
        - NOT_FOUND (404): Pharmacy or comment does not exist
        - FORBIDDEN (403): The comment belongs to another user
    """
    await ctx.comments.delete_comment(pharmacy_id, comment_id, identity)
    return {"success": True, "data": {"id": comment_id, "deleted": True}}
