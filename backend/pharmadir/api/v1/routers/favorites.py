# pharmadir/api/v1/routers/favorites.py
from fastapi import APIRouter, Depends
from pharmadir.api.v1.deps import get_context, get_current_identity
from pharmadir.core.context import AppContext
from pharmadir.schemas.favorites import FavoritesIn
from pharmadir.schemas.identity import UserIdentity

router = APIRouter(prefix="/favorites", tags=["favorites"])

@router.get("")
async def get_favorites(
    identity: UserIdentity = Depends(get_current_identity),
    ctx: AppContext = Depends(get_context),
):
    """
    Current favorites of the authenticated user.

    Returns:
        dict: {"success": True, "data": {"favorites": [pharmacy ids]}}

    Error codes:
        - NOT_FOUND (404): The user has no profile document
    """
    favorites = await ctx.favorites.get_favorites(identity)
    return {"success": True, "data": {"favorites": favorites}}

@router.post("")
async def add_favorites(
    body: FavoritesIn,
    identity: UserIdentity = Depends(get_current_identity),
    ctx: AppContext = Depends(get_context),
):
    """
    Add pharmacy ids to the favorites.

    Error codes:
        - INVALID_INPUT (400): At least one id is already a favorite (nothing is added)
        - NOT_FOUND (404): The user has no profile document
    """
    favorites = await ctx.favorites.add_favorites(body.favorites, identity)
    return {"success": True, "data": {"favorites": favorites}}

@router.post("/remove")
async def remove_favorites(
    body: FavoritesIn,
    identity: UserIdentity = Depends(get_current_identity),
    ctx: AppContext = Depends(get_context),
):
    """
    Remove pharmacy ids from the favorites.

    Error codes:
        - INVALID_INPUT (400): At least one id is not a favorite (nothing is removed)
        - NOT_FOUND (404): The user has no profile document
    """
    favorites = await ctx.favorites.remove_favorites(body.favorites, identity)
    return {"success": True, "data": {"favorites": favorites}}
