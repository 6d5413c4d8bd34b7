"""
Tortoise ORM adapter for the document store.

Every write bumps the row's version column; compare_and_set turns that into
an atomic conditional UPDATE, so read-modify-write callers can detect
concurrent writers instead of silently overwriting them.
"""
import logging
import uuid
from typing import Dict, List, Optional

from tortoise import timezone
from tortoise.exceptions import IntegrityError
from tortoise.expressions import F

from pharmadir.models.document import StoredDocument
from .store_base import (
    DocumentNotFoundError,
    DocumentSnapshot,
    DocumentStore,
    StoreConflictError,
    document_path,
    resolve_server_values,
)

logger = logging.getLogger("uvicorn.error")

# Retries for unconditional partial updates racing with other writers
_UPDATE_ATTEMPTS = 10


def _snapshot(row: StoredDocument) -> DocumentSnapshot:
    return DocumentSnapshot(id=row.doc_id, data=dict(row.data or {}), version=row.version)


class TortoiseDocumentStore(DocumentStore):
    """Document store persisted in the `documents` table"""

    async def get(self, collection: str, doc_id: str) -> Optional[DocumentSnapshot]:
        row = await StoredDocument.get_or_none(path=document_path(collection, doc_id))
        return _snapshot(row) if row else None

    async def set(self, collection: str, doc_id: str, data: Dict, merge: bool = False) -> None:
        path = document_path(collection, doc_id)
        payload = resolve_server_values(data)
        row = await StoredDocument.get_or_none(path=path)
        if row is None:
            try:
                await StoredDocument.create(
                    path=path,
                    collection=collection,
                    doc_id=doc_id,
                    data=payload,
                )
                return
            except IntegrityError:
                # Created concurrently; fall through and overwrite/merge it
                row = await StoredDocument.get(path=path)
        body = {**row.data, **payload} if merge else payload
        await StoredDocument.filter(id=row.id).update(
            data=body,
            version=F("version") + 1,
            updated_at=timezone.now(),  # auto_now does not fire on queryset updates
        )

    async def update(self, collection: str, doc_id: str, fields: Dict) -> None:
        for _ in range(_UPDATE_ATTEMPTS):
            snap = await self.get(collection, doc_id)
            if snap is None:
                raise DocumentNotFoundError(document_path(collection, doc_id))
            if await self.compare_and_set(collection, doc_id, fields, snap.version):
                return
        raise StoreConflictError(f"too many concurrent writes on {document_path(collection, doc_id)}")

    async def compare_and_set(
        self,
        collection: str,
        doc_id: str,
        fields: Dict,
        expected_version: int,
    ) -> bool:
        path = document_path(collection, doc_id)
        row = await StoredDocument.get_or_none(path=path)
        if row is None:
            raise DocumentNotFoundError(path)
        if row.version != expected_version:
            return False
        body = {**row.data, **resolve_server_values(fields)}
        # The version filter makes the check-and-write a single atomic statement
        updated = await StoredDocument.filter(id=row.id, version=expected_version).update(
            data=body,
            version=expected_version + 1,
            updated_at=timezone.now(),
        )
        if not updated:
            logger.info("[store] version conflict on %s (expected v%d)", path, expected_version)
        return updated == 1

    async def delete(self, collection: str, doc_id: str) -> None:
        await StoredDocument.filter(path=document_path(collection, doc_id)).delete()

    async def add(self, collection: str, data: Dict) -> DocumentSnapshot:
        doc_id = uuid.uuid4().hex
        row = await StoredDocument.create(
            path=document_path(collection, doc_id),
            collection=collection,
            doc_id=doc_id,
            data=resolve_server_values(data),
        )
        return _snapshot(row)

    async def list(self, collection: str) -> List[DocumentSnapshot]:
        rows = await StoredDocument.filter(collection=collection).order_by("created_at", "id")
        return [_snapshot(r) for r in rows]
