"""
Comments on pharmacies, stored in the subcollection
pharmacies/<pharmacyId>/comments. The parent pharmacy must exist for every
operation; only the comment's owner may delete it.
"""
import logging
from typing import Dict, List

from pharmadir.schemas.identity import UserIdentity
from .guarded import ensure_owner, load_or_404
from .store_base import SERVER_TIMESTAMP, DocumentSnapshot, DocumentStore, subcollection

logger = logging.getLogger("uvicorn.error")

PHARMACIES = "pharmacies"
COMMENTS = "comments"
PHARMACY_NOT_FOUND = "Pharmacy not found"
COMMENT_NOT_FOUND = "Comment not found"


def _comment_out(snap: DocumentSnapshot) -> Dict:
    return {"id": snap.id, **snap.data}


class CommentsService:
    def __init__(self, store: DocumentStore):
        self.store = store

    def _comments_of(self, pharmacy_id: str) -> str:
        return subcollection(PHARMACIES, pharmacy_id, COMMENTS)

    async def create_comment(self, pharmacy_id: str, text: str, star_rating: int, identity: UserIdentity) -> Dict:
        await load_or_404(self.store, PHARMACIES, pharmacy_id, PHARMACY_NOT_FOUND)
        snap = await self.store.add(self._comments_of(pharmacy_id), {
            "ownerUid": identity.uid,
            "authorName": identity.displayName,
            "text": text,
            "starRating": star_rating,
            "createdAt": SERVER_TIMESTAMP,
        })
        logger.info("[comments] %s commented on %s (%s)", identity.uid, pharmacy_id, snap.id)
        return _comment_out(snap)

    async def list_comments(self, pharmacy_id: str) -> List[Dict]:
        await load_or_404(self.store, PHARMACIES, pharmacy_id, PHARMACY_NOT_FOUND)
        return [_comment_out(s) for s in await self.store.list(self._comments_of(pharmacy_id))]

    async def delete_comment(self, pharmacy_id: str, comment_id: str, identity: UserIdentity) -> None:
        await load_or_404(self.store, PHARMACIES, pharmacy_id, PHARMACY_NOT_FOUND)
        collection = self._comments_of(pharmacy_id)
        comment = await load_or_404(self.store, collection, comment_id, COMMENT_NOT_FOUND)
        ensure_owner(comment, identity, "You can only delete your own comments")
        await self.store.delete(collection, comment_id)
        logger.info("[comments] %s deleted %s on %s", identity.uid, comment_id, pharmacy_id)
