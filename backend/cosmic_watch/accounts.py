"""User registry, sessions and role capabilities.

Roles are a plain two-value enum; what a role may do is answered by the
predicates below rather than by subclassing. Passwords are kept as salted
PBKDF2-SHA256 hashes in the registry document.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
import threading
import secrets
import uuid

from cosmic_watch.models import Role, UserProfile
from cosmic_watch.storage import KeyValueStore

logger = logging.getLogger(__name__)

REGISTRY_KEY = "cosmic_users_registry"
PBKDF2_ITERATIONS = 200_000

# Serialises registry updates across request threads
_write_lock = threading.Lock()


# ── Capabilities ────────────────────────────────────────────────────

def can_override(role: Role) -> bool:
    return role is Role.RESEARCHER


def can_view_watchlist(role: Role) -> bool:
    return role is Role.RESEARCHER


def can_toggle_watchlist(role: Role) -> bool:
    return role in (Role.OBSERVER, Role.RESEARCHER)


# ── Registry ────────────────────────────────────────────────────────

class CredentialConflict(Exception):
    """Email already registered."""


class AccessDenied(Exception):
    """Unknown email or wrong password."""


def _hash_password(password: str, salt: bytes) -> str:
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, PBKDF2_ITERATIONS)
    return digest.hex()


class AccountRegistry:
    def __init__(self, store: KeyValueStore):
        self._store = store

    def _users(self) -> list[dict]:
        raw = self._store.get(REGISTRY_KEY)
        if not raw:
            return []
        try:
            users = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning("User registry is not valid JSON, ignoring: %s", exc)
            return []
        return users if isinstance(users, list) else []

    @staticmethod
    def _profile(user: dict) -> UserProfile:
        return UserProfile(
            id=user["id"],
            username=user["username"],
            email=user["email"],
            role=Role(user["role"]),
        )

    def signup(self, email: str, password: str, role: Role = Role.OBSERVER) -> UserProfile:
        email = email.strip().lower()
        salt = secrets.token_bytes(16)
        user = {
            "id": uuid.uuid4().hex[:9],
            "username": email.split("@")[0],
            "email": email,
            "role": role.value,
            "salt": salt.hex(),
            "password_hash": _hash_password(password, salt),
        }

        with _write_lock:
            users = self._users()
            if any(u.get("email") == email for u in users):
                raise CredentialConflict("CREDENTIAL CONFLICT: Email already registered.")
            users.append(user)
            self._store.set(REGISTRY_KEY, json.dumps(users))
        logger.info("Registered %s as %s", user["username"], role.value)
        return self._profile(user)

    def login(self, email: str, password: str) -> UserProfile:
        email = email.strip().lower()
        for user in self._users():
            if user.get("email") != email:
                continue
            expected = user.get("password_hash", "")
            actual = _hash_password(password, bytes.fromhex(user.get("salt", "")))
            if hmac.compare_digest(expected, actual):
                return self._profile(user)
            break
        raise AccessDenied("ACCESS DENIED: Invalid credentials.")

    def find(self, user_id: str) -> UserProfile | None:
        for user in self._users():
            if user.get("id") == user_id:
                return self._profile(user)
        return None


# ── Sessions ────────────────────────────────────────────────────────

class SessionManager:
    """In-process session table (token -> user id). Lost on restart."""

    def __init__(self):
        self._sessions: dict[str, str] = {}

    def open(self, user: UserProfile) -> str:
        token = secrets.token_urlsafe(32)
        self._sessions[token] = user.id
        return token

    def resolve(self, token: str | None) -> str | None:
        """User id behind a session token, if the session is live."""
        if not token:
            return None
        return self._sessions.get(token)

    def close(self, token: str) -> None:
        self._sessions.pop(token, None)
