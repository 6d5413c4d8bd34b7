"""
Pharmacy catalogue: the parent documents comments hang off. Reads are
public; writes need the ADMIN role.
"""
from typing import Dict, List

from pharmadir.core.errors import ForbiddenError
from pharmadir.schemas.identity import Role, UserIdentity
from .guarded import load_or_404
from .store_base import SERVER_TIMESTAMP, DocumentStore

PHARMACIES = "pharmacies"


class PharmacyService:
    def __init__(self, store: DocumentStore):
        self.store = store

    async def list_pharmacies(self) -> List[Dict]:
        return [{"id": s.id, **s.data} for s in await self.store.list(PHARMACIES)]

    async def get_pharmacy(self, pharmacy_id: str) -> Dict:
        snap = await load_or_404(self.store, PHARMACIES, pharmacy_id, "Pharmacy not found")
        return {"id": snap.id, **snap.data}

    async def upsert_pharmacy(self, pharmacy_id: str, fields: Dict, identity: UserIdentity) -> Dict:
        if identity.role != Role.ADMIN:
            raise ForbiddenError("FORBIDDEN_ADMIN_ONLY")
        await self.store.set(PHARMACIES, pharmacy_id, {**fields, "updatedAt": SERVER_TIMESTAMP})
        return await self.get_pharmacy(pharmacy_id)
