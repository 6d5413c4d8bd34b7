"""
Building blocks for ownership-guarded mutations.

Every guarded operation follows the same steps: load the owning document,
check existence (NotFoundError) and ownership (ForbiddenError), compute the
next state, write it back. `read_modify_write` runs the last two steps under
optimistic concurrency: the write only lands if the document version is the
one that was read, otherwise the whole cycle starts again from a fresh read.
"""
import logging
from typing import Callable, Dict

from pharmadir.core.errors import ForbiddenError, NotFoundError
from pharmadir.schemas.identity import UserIdentity
from .store_base import DocumentNotFoundError, DocumentSnapshot, DocumentStore, StoreConflictError

logger = logging.getLogger("uvicorn.error")


async def load_or_404(store: DocumentStore, collection: str, doc_id: str, message: str) -> DocumentSnapshot:
    snap = await store.get(collection, doc_id)
    if snap is None:
        raise NotFoundError(message)
    return snap


def ensure_owner(
    snap: DocumentSnapshot,
    identity: UserIdentity,
    message: str,
    owner_field: str = "ownerUid",
) -> None:
    if snap.data.get(owner_field) != identity.uid:
        raise ForbiddenError(message)


async def read_modify_write(
    store: DocumentStore,
    collection: str,
    doc_id: str,
    mutate: Callable[[Dict], Dict],
    max_attempts: int,
    missing_message: str,
) -> Dict:
    """
    Apply `mutate` to a document with compare-and-set retries.

    `mutate` receives the current document body and returns the fields to
    merge. It may raise a ServiceError to reject the change; that is
    re-evaluated against fresh data on every attempt.

    Returns:
        The merged document body that was written

    Raises:
        NotFoundError: The document does not exist (or vanished mid-way)
        StoreConflictError: Every attempt lost against a concurrent writer
    """
    for attempt in range(1, max_attempts + 1):
        snap = await load_or_404(store, collection, doc_id, missing_message)
        changes = mutate(dict(snap.data))
        try:
            written = await store.compare_and_set(collection, doc_id, changes, expected_version=snap.version)
        except DocumentNotFoundError:
            raise NotFoundError(missing_message)
        if written:
            return {**snap.data, **changes}
        logger.info("[guarded] %s/%s changed concurrently, retry %d/%d", collection, doc_id, attempt, max_attempts)
    raise StoreConflictError(f"{collection}/{doc_id}: gave up after {max_attempts} attempts")
