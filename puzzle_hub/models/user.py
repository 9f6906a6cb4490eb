"""
User Data Models

Contains player identity and admin account structures.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional
from datetime import datetime


@dataclass(frozen=True)
class PlayerIdentity:
    """Who is playing a session. Required to write a result record."""
    user_id: str
    user_name: str


@dataclass
class PlayerProfile:
    """Player profile as stored in the players collection."""
    id: str
    name: str
    created_at: Optional[str] = None

    @property
    def identity(self) -> PlayerIdentity:
        return PlayerIdentity(user_id=self.id, user_name=self.name)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "createdAt": self.created_at}


@dataclass
class AdminUser:
    """Admin account data model."""
    id: str
    username: str
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None
