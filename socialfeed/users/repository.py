"""Repository for user records and their refresh-token allow-lists."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from threading import Lock
from typing import Any, Callable

from pymongo import MongoClient
from pymongo.errors import DuplicateKeyError, PyMongoError

from socialfeed.core.config import MongoConfig
from socialfeed.users.models import User, normalize_email

LOGGER = logging.getLogger(__name__)

USERS_COLLECTION = "users"

# Fields written by ``save_user``. The allow-list is only ever changed through
# the dedicated single-document updates below.
_PROFILE_FIELDS = ("email", "password_hash", "full_name", "image_url")


class DuplicateEmailError(ValueError):
    """Raised when creating a user whose email is already registered."""


class UserStoreCorruptedError(RuntimeError):
    """Raised when the file store exists but cannot be parsed."""


class UserRepository:
    """User repository with MongoDB primary and file-store fallback."""

    def __init__(self, app_root: Path, mongo: MongoConfig | None = None) -> None:
        """Initialize repository storage backends."""
        self._fallback_dir = app_root / "runtime" / "user_store"
        self._fallback_dir.mkdir(parents=True, exist_ok=True)
        self._users_file = self._fallback_dir / "users.json"
        self._file_lock = Lock()

        self._mongo_users: Any = None

        if mongo is not None and mongo.uri:
            try:
                client: Any = MongoClient(mongo.uri, serverSelectionTimeoutMS=3000)
                client.admin.command("ping")
                users = client[mongo.database][USERS_COLLECTION]
                users.create_index("email", unique=True)
                users.create_index("user_id", unique=True)
                self._mongo_users = users
            except PyMongoError:
                LOGGER.warning("mongo_unavailable_using_file_store", exc_info=True)
                self._mongo_users = None

    @property
    def uses_mongo(self) -> bool:
        return self._mongo_users is not None

    def _read_json_file(self) -> list[dict[str, Any]]:
        """Read list payload from JSON file; a missing file is an empty store.

        Callers hold ``_file_lock``. A file that exists but does not parse
        raises ``UserStoreCorruptedError`` so it is never overwritten.
        """
        if not self._users_file.exists():
            return []
        try:
            payload = json.loads(self._users_file.read_text(encoding="utf-8"))
        except ValueError as exc:
            LOGGER.error("user_store_corrupted", exc_info=True)
            raise UserStoreCorruptedError(str(self._users_file)) from exc
        if not isinstance(payload, list):
            LOGGER.error("user_store_corrupted")
            raise UserStoreCorruptedError(str(self._users_file))
        return payload

    def _write_json_file(self, items: list[dict[str, Any]]) -> None:
        """Persist list payload by replacing the JSON file atomically."""
        tmp_file = self._users_file.with_name(f"{self._users_file.name}.tmp")
        tmp_file.write_text(
            json.dumps(items, ensure_ascii=False, indent=2), encoding="utf-8"
        )
        os.replace(tmp_file, self._users_file)

    def _find_file_row(self, matches: Callable[[dict[str, Any]], bool]) -> User | None:
        with self._file_lock:
            for row in self._read_json_file():
                if matches(row):
                    return User.model_validate(row)
        return None

    def _mutate_file_row(
        self, user_id: str, mutate: Callable[[dict[str, Any]], bool]
    ) -> bool:
        """Apply ``mutate`` to one stored row under the file lock.

        Returns what ``mutate`` returned, or False when no row matched.
        """
        with self._file_lock:
            items = self._read_json_file()
            for row in items:
                if str(row.get("user_id", "")) != user_id:
                    continue
                changed = mutate(row)
                if changed:
                    self._write_json_file(items)
                return changed
        return False

    def get_user_by_email(self, email: str) -> User | None:
        """Get user by normalized email."""
        key = normalize_email(email)
        if self._mongo_users is not None:
            doc = self._mongo_users.find_one({"email": key}, {"_id": 0})
            return User.model_validate(doc) if doc else None

        return self._find_file_row(
            lambda row: normalize_email(str(row.get("email", ""))) == key
        )

    def get_user_by_id(self, user_id: str) -> User | None:
        """Get user by identifier."""
        if self._mongo_users is not None:
            doc = self._mongo_users.find_one({"user_id": user_id}, {"_id": 0})
            return User.model_validate(doc) if doc else None

        return self._find_file_row(lambda row: str(row.get("user_id", "")) == user_id)

    def create_user(self, user: User) -> User:
        """Insert a new user, raising ``DuplicateEmailError`` on email clash."""
        doc = user.model_dump()
        doc["email"] = normalize_email(user.email)
        if self._mongo_users is not None:
            try:
                self._mongo_users.insert_one(dict(doc))
            except DuplicateKeyError as exc:
                raise DuplicateEmailError(doc["email"]) from exc
            return User.model_validate(doc)

        with self._file_lock:
            items = self._read_json_file()
            if any(
                normalize_email(str(row.get("email", ""))) == doc["email"]
                for row in items
            ):
                raise DuplicateEmailError(doc["email"])
            items.append(doc)
            self._write_json_file(items)
        return User.model_validate(doc)

    def save_user(self, user: User) -> None:
        """Persist profile and credential fields of an existing user."""
        fields = {key: getattr(user, key) for key in _PROFILE_FIELDS}
        fields["email"] = normalize_email(user.email)
        if self._mongo_users is not None:
            self._mongo_users.update_one({"user_id": user.user_id}, {"$set": fields})
            return

        def _apply(row: dict[str, Any]) -> bool:
            row.update(fields)
            return True

        self._mutate_file_row(user.user_id, _apply)

    def add_refresh_token(self, user_id: str, token: str) -> bool:
        """Add ``token`` to the allow-list; returns whether the user exists."""
        if self._mongo_users is not None:
            result = self._mongo_users.update_one(
                {"user_id": user_id}, {"$addToSet": {"refresh_tokens": token}}
            )
            return result.matched_count == 1

        def _apply(row: dict[str, Any]) -> bool:
            tokens = row.get("refresh_tokens") or []
            if token not in tokens:
                tokens.append(token)
            row["refresh_tokens"] = tokens
            return True

        return self._mutate_file_row(user_id, _apply)

    def remove_refresh_token(self, user_id: str, token: str) -> None:
        """Remove ``token`` from the allow-list; absent tokens are ignored."""
        if self._mongo_users is not None:
            self._mongo_users.update_one(
                {"user_id": user_id}, {"$pull": {"refresh_tokens": token}}
            )
            return

        def _apply(row: dict[str, Any]) -> bool:
            tokens = row.get("refresh_tokens") or []
            if token not in tokens:
                return False
            row["refresh_tokens"] = [item for item in tokens if item != token]
            return True

        self._mutate_file_row(user_id, _apply)

    def rotate_refresh_token(self, user_id: str, old_token: str, new_token: str) -> bool:
        """Replace ``old_token`` by ``new_token`` only if ``old_token`` is present.

        Single conditional write: returns False, changing nothing, when the old
        token was already removed (e.g. by a concurrent rotation).
        """
        if self._mongo_users is not None:
            result = self._mongo_users.update_one(
                {"user_id": user_id, "refresh_tokens": old_token},
                {"$set": {"refresh_tokens.$": new_token}},
            )
            return result.modified_count == 1

        def _apply(row: dict[str, Any]) -> bool:
            tokens = row.get("refresh_tokens") or []
            if old_token not in tokens:
                return False
            row["refresh_tokens"] = [item for item in tokens if item != old_token]
            row["refresh_tokens"].append(new_token)
            return True

        return self._mutate_file_row(user_id, _apply)

    def clear_refresh_tokens(self, user_id: str) -> None:
        """Revoke every refresh token of the user."""
        if self._mongo_users is not None:
            self._mongo_users.update_one(
                {"user_id": user_id}, {"$set": {"refresh_tokens": []}}
            )
            return

        def _apply(row: dict[str, Any]) -> bool:
            row["refresh_tokens"] = []
            return True

        self._mutate_file_row(user_id, _apply)
