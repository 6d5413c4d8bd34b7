# pharmadir/api/v1/routers/pharmacies.py
from fastapi import APIRouter, Depends
from pharmadir.api.v1.deps import get_context, require_admin
from pharmadir.core.context import AppContext
from pharmadir.schemas.identity import UserIdentity
from pharmadir.schemas.pharmacies import PharmacyIn

router = APIRouter(prefix="/pharmacies", tags=["pharmacies"])

@router.get("")
async def list_pharmacies(ctx: AppContext = Depends(get_context)):
    """
    All pharmacies of the directory. No authentication required.
    """
    items = await ctx.pharmacies.list_pharmacies()
    return {"success": True, "data": {"items": items, "total": len(items)}}

@router.get("/{pharmacy_id}")
async def get_pharmacy(pharmacy_id: str, ctx: AppContext = Depends(get_context)):
    """
    One pharmacy.

    Error codes:
        - NOT_FOUND (404): Pharmacy does not exist
    """
    return {"success": True, "data": await ctx.pharmacies.get_pharmacy(pharmacy_id)}

@router.put("/{pharmacy_id}")
async def upsert_pharmacy(
    pharmacy_id: str,
    body: PharmacyIn,
    admin: UserIdentity = Depends(require_admin),
    ctx: AppContext = Depends(get_context),
):
    """
    Create or replace a pharmacy (admin only).

    Error codes:
        - FORBIDDEN (403): Caller is not an admin (FORBIDDEN_ADMIN_ONLY)
    """
    pharmacy = await ctx.pharmacies.upsert_pharmacy(pharmacy_id, body.model_dump(), admin)
    return {"success": True, "data": pharmacy}
