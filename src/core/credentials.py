"""
src/core/credentials.py
========================
CredentialVault: user records on top of a JsonFileStore.

Record shape (users.json):
    {"username": "admin", "passwordHash": "$2b$10$..."}

Passwords are only ever compared through bcrypt.checkpw() and are never
logged. The seed collection holds a single admin account whose hash is
computed lazily, the first time the file needs to be (re)created.
"""

from __future__ import annotations

import logging
from typing import Optional

import bcrypt

from src.core.config     import Settings
from src.core.errors     import AuthenticationError, NotFoundError, ValidationError
from src.core.file_store import JsonFileStore

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72


def hash_password(password: str, rounds: int = 10) -> str:
    """Salted bcrypt hash of password, as a str suitable for JSON."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


class CredentialVault:
    """Owns users.json: lookup, password verification, password rotation."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self.store     = JsonFileStore(
            settings.users_file,
            seed           = self._seed_users,
            label          = "users.json",
            backup_corrupt = settings.backup_corrupt,
        )

    def _seed_users(self) -> list[dict]:
        s = self._settings
        logger.warning(
            "Seeding users.json with account '%s' and the configured default password. "
            "Change it immediately outside of local development.",
            s.admin_username,
        )
        return [{
            "username":     s.admin_username,
            "passwordHash": hash_password(s.admin_password, s.bcrypt_rounds),
        }]

    # ── lookups ───────────────────────────────────────────────────────────────

    def find_by_username(self, username: str) -> Optional[dict]:
        """Return the record for username (case-sensitive), or None."""
        for user in self.store.load().records:
            if user.get("username") == username:
                return user
        return None

    @staticmethod
    def verify_password(record: dict, candidate: str) -> bool:
        stored = record.get("passwordHash")
        if not isinstance(stored, str) or not stored:
            return False
        raw = candidate.encode("utf-8")
        if len(raw) > BCRYPT_MAX_BYTES:
            return False
        try:
            return bcrypt.checkpw(raw, stored.encode("utf-8"))
        except ValueError:
            # stored value is not a bcrypt hash
            logger.error("Malformed password hash for user '%s'", record.get("username"))
            return False

    def authenticate(self, username: str, password: str) -> dict:
        """Return the user record, or raise AuthenticationError."""
        user = self.find_by_username(username)
        if user is None or not self.verify_password(user, password):
            logger.info("Login failed for user '%s'", username)
            raise AuthenticationError()
        return user

    # ── mutation ──────────────────────────────────────────────────────────────

    def rotate_password(self, username: str, old_password: str, new_password: str) -> None:
        """
        Replace username's password hash after re-checking old_password.

        Raises:
            ValidationError      new_password empty or longer than 72 bytes
            NotFoundError        no such user (e.g. removed after the token was issued)
            AuthenticationError  old_password does not match; nothing is written
        """
        if not new_password:
            raise ValidationError("newPassword must not be empty.")
        if len(new_password.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise ValidationError(f"newPassword must be at most {BCRYPT_MAX_BYTES} bytes.")

        with self.store.transaction():
            users = self.store.load().records
            user  = next((u for u in users if u.get("username") == username), None)
            if user is None:
                raise NotFoundError("User not found.", code="user_not_found")
            if not self.verify_password(user, old_password):
                raise AuthenticationError("Current password is incorrect.", code="wrong_password")

            user["passwordHash"] = hash_password(new_password, self._settings.bcrypt_rounds)
            self.store.save(users)

        logger.info("Password rotated for user '%s'", username)
