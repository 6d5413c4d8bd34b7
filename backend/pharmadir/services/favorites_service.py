"""
Favorites: a set of pharmacy ids kept as the `favorites` array of the
caller's profile document (users/<uid>).

Adding an id that is already there, or removing one that is not, is rejected
instead of silently succeeding. Writes go through read_modify_write, so two
concurrent changes to the same profile cannot overwrite each other.
"""
from typing import Dict, Iterable, List

from pharmadir.core.errors import InvalidInputError
from pharmadir.schemas.identity import UserIdentity
from .guarded import load_or_404, read_modify_write
from .store_base import DocumentStore

USERS = "users"
PROFILE_NOT_FOUND = "User profile not found"


def _unique(ids: Iterable[str]) -> List[str]:
    # Order-preserving de-duplication
    return list(dict.fromkeys(ids))


class FavoritesService:
    def __init__(self, store: DocumentStore, max_attempts: int = 10):
        self.store = store
        self.max_attempts = max_attempts

    async def get_favorites(self, identity: UserIdentity) -> List[str]:
        profile = await load_or_404(self.store, USERS, identity.uid, PROFILE_NOT_FOUND)
        return list(profile.data.get("favorites") or [])

    async def add_favorites(self, ids: List[str], identity: UserIdentity) -> List[str]:
        wanted = _unique(ids)

        def mutate(profile: Dict) -> Dict:
            current = list(profile.get("favorites") or [])
            present = [i for i in wanted if i in current]
            if present:
                raise InvalidInputError(f"Already in favorites: {', '.join(present)}")
            return {"favorites": current + wanted}

        body = await read_modify_write(self.store, USERS, identity.uid, mutate, self.max_attempts, PROFILE_NOT_FOUND)
        return body["favorites"]

    async def remove_favorites(self, ids: List[str], identity: UserIdentity) -> List[str]:
        unwanted = _unique(ids)

        def mutate(profile: Dict) -> Dict:
            current = list(profile.get("favorites") or [])
            missing = [i for i in unwanted if i not in current]
            if missing:
                raise InvalidInputError(f"Not in favorites: {', '.join(missing)}")
            return {"favorites": [i for i in current if i not in unwanted]}

        body = await read_modify_write(self.store, USERS, identity.uid, mutate, self.max_attempts, PROFILE_NOT_FOUND)
        return body["favorites"]
