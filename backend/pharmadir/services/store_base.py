"""
Document Store Abstract Interface

Documents are addressed by a collection path plus a document id. Nested
subcollections use the path "<collection>/<doc_id>/<name>".
"""
import datetime as dt
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional


class _ServerTimestamp:
    """Sentinel replaced by the store with the write time."""

    def __repr__(self):
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


class DocumentNotFoundError(LookupError):
    """Raised by partial writes that target a missing document."""


class StoreConflictError(RuntimeError):
    """Raised when an optimistic write keeps losing against concurrent writers."""


@dataclass
class DocumentSnapshot:
    """A document as read from the store"""
    id: str
    data: Dict = field(default_factory=dict)
    version: int = 1  # Write counter, used for compare-and-set


def server_now() -> str:
    """ISO timestamp used for SERVER_TIMESTAMP values"""
    return dt.datetime.now(dt.timezone.utc).isoformat()


def resolve_server_values(data: Dict) -> Dict:
    """Replace SERVER_TIMESTAMP sentinels (top-level fields only)"""
    now = None
    resolved = {}
    for key, value in data.items():
        if value is SERVER_TIMESTAMP:
            now = now or server_now()
            value = now
        resolved[key] = value
    return resolved


def document_path(collection: str, doc_id: str) -> str:
    if not doc_id or "/" in doc_id:
        raise ValueError(f"invalid document id: {doc_id!r}")
    return f"{collection}/{doc_id}"


def subcollection(collection: str, doc_id: str, name: str) -> str:
    """Path of the subcollection `name` nested under collection/doc_id"""
    return f"{document_path(collection, doc_id)}/{name}"


class DocumentStore(ABC):
    """Document Store Abstract Base Class"""

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> Optional[DocumentSnapshot]:
        """Return the document, or None when it does not exist"""
        pass

    @abstractmethod
    async def set(self, collection: str, doc_id: str, data: Dict, merge: bool = False) -> None:
        """
        Create or overwrite a document.

        With merge=True the given fields are merged into an existing document
        instead of replacing it.
        """
        pass

    @abstractmethod
    async def update(self, collection: str, doc_id: str, fields: Dict) -> None:
        """Merge fields into an existing document (DocumentNotFoundError if absent)"""
        pass

    @abstractmethod
    async def compare_and_set(
        self,
        collection: str,
        doc_id: str,
        fields: Dict,
        expected_version: int,
    ) -> bool:
        """
        Merge fields only if the document is still at expected_version.

        Returns:
        - True if the write happened, False if another writer got there first
        """
        pass

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> None:
        """Delete a document. Subcollections are left untouched."""
        pass

    @abstractmethod
    async def add(self, collection: str, data: Dict) -> DocumentSnapshot:
        """Create a document with a store-assigned id"""
        pass

    @abstractmethod
    async def list(self, collection: str) -> List[DocumentSnapshot]:
        """All documents of a collection, oldest first"""
        pass
