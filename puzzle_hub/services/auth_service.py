"""
Admin Authentication Service

Handles admin login for puzzle authoring: bcrypt password hashes, JWT tokens
and one active session per admin, all kept in the document store. Players
never authenticate; for them an admin session either exists or it does not.
"""

import datetime
import hashlib
from typing import Any, Dict, Optional

import bcrypt
import jwt

from ..config.game_settings import ADMINS_COLLECTION
from ..models.user import AdminUser
from .storage import DocumentStore, StorageError

ADMIN_SESSIONS_COLLECTION = "admin_sessions"


class AuthService:
    """
    Authentication service for admin login, token checks and logout.
    """

    def __init__(self, store: DocumentStore, jwt_secret: str, expiration_days: int = 7):
        """
        Args:
            store: Document store holding admin accounts and sessions
            jwt_secret: Secret key for JWT token generation
            expiration_days: Lifetime of an issued token
        """
        self.store = store
        self.jwt_secret = jwt_secret
        self.expiration_days = expiration_days

    def hash_password(self, password: str) -> str:
        salt = bcrypt.gensalt()
        hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
        return hashed.decode('utf-8')

    def verify_password(self, password: str, hashed_password: str) -> bool:
        return bcrypt.checkpw(password.encode('utf-8'), hashed_password.encode('utf-8'))

    def _hash_token(self, token: str) -> str:
        """SHA256 of the token, so raw tokens are never stored."""
        return hashlib.sha256(token.encode('utf-8')).hexdigest()

    def _now(self) -> datetime.datetime:
        return datetime.datetime.now(datetime.timezone.utc)

    def seed_admin(self, username: str, password: str) -> Optional[AdminUser]:
        """
        Creates the configured admin account if it does not exist yet.

        Returns:
            The admin account, or None when no credentials are configured
        """
        if not username or not password:
            return None

        username = username.strip().lower()
        existing = self.store.get(ADMINS_COLLECTION, username)
        if existing:
            return AdminUser(id=username, username=username, created_at=existing.get("created_at"))

        created_at = self._now()
        self.store.put(ADMINS_COLLECTION, username, {
            "username": username,
            "password": self.hash_password(password),
            "created_at": created_at.isoformat(),
            "last_login": None,
        })
        return AdminUser(id=username, username=username, created_at=created_at)

    def login_admin(self, username: str, password: str) -> Dict[str, Any]:
        """
        Authenticate an admin and issue a JWT token.

        Returns:
            Dictionary with success status and token, or error
        """
        try:
            if not username or not password:
                return {"success": False, "error": "Username and password are required"}

            username = username.strip().lower()

            admin = self.store.get(ADMINS_COLLECTION, username)
            if not admin or not self.verify_password(password, admin["password"]):
                return {"success": False, "error": "Invalid username or password"}

            now = self._now()
            admin["last_login"] = now.isoformat()
            self.store.put(ADMINS_COLLECTION, username, admin)

            token_payload = {
                "admin_id": username,
                "username": username,
                "exp": now + datetime.timedelta(days=self.expiration_days),
            }
            token = jwt.encode(token_payload, self.jwt_secret, algorithm="HS256")

            # One session per admin; a new login replaces the previous one
            self.store.put(ADMIN_SESSIONS_COLLECTION, username, {
                "admin_id": username,
                "token_hash": self._hash_token(token),
                "created_at": now.isoformat(),
            })

            return {
                "success": True,
                "token": token,
                "admin": {"id": username, "username": username},
            }

        except StorageError as e:
            return {"success": False, "error": f"Login failed: {str(e)}"}

    def verify_token(self, token: str) -> Dict[str, Any]:
        """
        Verify a JWT token and check the admin session is still active.

        Returns:
            Dictionary with success status and admin data, or error
        """
        try:
            if not token:
                return {"success": False, "error": "Token is required"}

            payload = jwt.decode(token, self.jwt_secret, algorithms=["HS256"])
            admin_id = payload.get("admin_id")
            if not admin_id:
                return {"success": False, "error": "Invalid token payload"}

            session = self.store.get(ADMIN_SESSIONS_COLLECTION, admin_id)
            if not session or session.get("token_hash") != self._hash_token(token):
                return {"success": False, "error": "Session has expired or is invalid"}

            return {"success": True, "admin": {"id": admin_id, "username": payload.get("username")}}

        except jwt.ExpiredSignatureError:
            return {"success": False, "error": "Token has expired"}
        except jwt.InvalidTokenError:
            return {"success": False, "error": "Invalid token"}
        except StorageError as e:
            return {"success": False, "error": f"Token verification failed: {str(e)}"}

    def logout_admin(self, token: str) -> Dict[str, Any]:
        """Ends the admin session the token belongs to."""
        verified = self.verify_token(token)
        if not verified["success"]:
            return verified

        admin_id = verified["admin"]["id"]
        try:
            self.store.put(ADMIN_SESSIONS_COLLECTION, admin_id, {
                "admin_id": admin_id,
                "token_hash": None,
                "ended_at": self._now().isoformat(),
            })
        except StorageError as e:
            return {"success": False, "error": f"Logout failed: {str(e)}"}
        return {"success": True, "message": "Logged out successfully"}
