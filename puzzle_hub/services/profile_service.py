"""
Profile Service

The identity provider for players: a shared list of named profiles. Picking
a profile is all the "login" a player does.
"""

from typing import List, Optional

from ..config.game_settings import PLAYERS_COLLECTION
from ..errors import LoadError, PersistenceFailure, PuzzleValidationError
from ..models.user import PlayerProfile
from ..utils.helpers import generate_id
from ..utils.timer import iso_timestamp, now_ms
from .storage import DocumentStore, StorageError

PLAYER_ID_PREFIX = "user_"
PLAYER_ID_LENGTH = 7
MAX_NAME_LENGTH = 40


class ProfileService:
    def __init__(self, store: DocumentStore, rng=None):
        self.store = store
        self.rng = rng

    def list_players(self) -> List[PlayerProfile]:
        try:
            docs = self.store.query_all(PLAYERS_COLLECTION)
        except StorageError as e:
            raise LoadError(f"Could not load players: {e}") from e
        return [PlayerProfile(id=d['id'], name=d.get('name', ''), created_at=d.get('createdAt')) for d in docs]

    def get_player(self, user_id: str) -> Optional[PlayerProfile]:
        if not user_id:
            return None
        try:
            doc = self.store.get(PLAYERS_COLLECTION, user_id)
        except StorageError as e:
            raise LoadError(f"Could not load player {user_id}: {e}") from e
        if doc is None:
            return None
        return PlayerProfile(id=user_id, name=doc.get('name', ''), created_at=doc.get('createdAt'))

    def create_player(self, name: str) -> PlayerProfile:
        name = (name or '').strip()
        if not name:
            raise PuzzleValidationError("Please enter your name")
        if len(name) > MAX_NAME_LENGTH:
            raise PuzzleValidationError(f"Name must be at most {MAX_NAME_LENGTH} characters")

        profile = PlayerProfile(
            id=generate_id(PLAYER_ID_LENGTH, prefix=PLAYER_ID_PREFIX, rng=self.rng),
            name=name,
            created_at=iso_timestamp(now_ms()),
        )
        try:
            self.store.put(PLAYERS_COLLECTION, profile.id, {'name': profile.name, 'createdAt': profile.created_at})
        except StorageError as e:
            raise PersistenceFailure(f"Error creating profile: {e}") from e
        return profile
