from __future__ import annotations

import json
from pathlib import Path
from threading import Event, Thread

import pytest

from socialfeed.users.models import User
from socialfeed.users.repository import (
    DuplicateEmailError,
    UserRepository,
    UserStoreCorruptedError,
)


def _user(user_id: str = "u1", email: str = "User@Test.Local") -> User:
    return User(user_id=user_id, email=email, password_hash="hash", full_name="User")


def _stored_rows(tmp_path: Path) -> list[dict]:
    users_file = tmp_path / "runtime" / "user_store" / "users.json"
    return json.loads(users_file.read_text(encoding="utf-8"))


def test_user_repository_create_and_get_case_insensitive(tmp_path: Path) -> None:
    repo = UserRepository(tmp_path)

    repo.create_user(_user())
    by_email = repo.get_user_by_email("user@test.local")
    by_id = repo.get_user_by_id("u1")

    assert not repo.uses_mongo
    assert by_email is not None
    assert by_email.email == "user@test.local"
    assert by_id == by_email
    assert repo.get_user_by_id("missing") is None


def test_user_repository_rejects_duplicate_email(tmp_path: Path) -> None:
    repo = UserRepository(tmp_path)
    repo.create_user(_user())

    with pytest.raises(DuplicateEmailError):
        repo.create_user(_user(user_id="u2", email="USER@test.local"))

    assert len(_stored_rows(tmp_path)) == 1


def test_user_repository_save_does_not_touch_allow_list(tmp_path: Path) -> None:
    repo = UserRepository(tmp_path)
    repo.create_user(_user())
    stale = repo.get_user_by_id("u1")
    assert stale is not None
    repo.add_refresh_token("u1", "t1")

    stale.full_name = "Renamed"
    repo.save_user(stale)

    saved = repo.get_user_by_id("u1")
    assert saved is not None
    assert saved.full_name == "Renamed"
    assert saved.refresh_tokens == ["t1"]


def test_user_repository_allow_list_operations(tmp_path: Path) -> None:
    repo = UserRepository(tmp_path)
    repo.create_user(_user())

    assert repo.add_refresh_token("u1", "t1")
    assert repo.add_refresh_token("u1", "t1")
    assert repo.add_refresh_token("u1", "t2")
    assert not repo.add_refresh_token("ghost", "t3")
    repo.remove_refresh_token("u1", "t1")
    repo.remove_refresh_token("u1", "absent")

    user = repo.get_user_by_id("u1")
    assert user is not None
    assert user.refresh_tokens == ["t2"]

    repo.clear_refresh_tokens("u1")
    cleared = repo.get_user_by_id("u1")
    assert cleared is not None
    assert cleared.refresh_tokens == []


def test_user_repository_rotation_is_conditional(tmp_path: Path) -> None:
    repo = UserRepository(tmp_path)
    repo.create_user(_user())
    repo.add_refresh_token("u1", "old")

    assert repo.rotate_refresh_token("u1", "old", "new-a")
    assert not repo.rotate_refresh_token("u1", "old", "new-b")

    user = repo.get_user_by_id("u1")
    assert user is not None
    assert user.refresh_tokens == ["new-a"]


def test_user_repository_concurrent_rotations_have_one_winner(tmp_path: Path) -> None:
    repo = UserRepository(tmp_path)
    repo.create_user(_user())
    repo.add_refresh_token("u1", "old")
    results: list[bool] = []

    threads = [
        Thread(target=lambda n=n: results.append(repo.rotate_refresh_token("u1", "old", f"new-{n}")))
        for n in range(8)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    user = repo.get_user_by_id("u1")
    assert user is not None
    assert results.count(True) == 1
    assert len(user.refresh_tokens) == 1
    assert user.refresh_tokens[0].startswith("new-")


def test_user_repository_readers_never_miss_user_during_writes(tmp_path: Path) -> None:
    repo = UserRepository(tmp_path)
    repo.create_user(_user())
    stop = Event()

    def write_loop() -> None:
        n = 0
        while not stop.is_set():
            repo.add_refresh_token("u1", f"t{n}")
            n += 1

    writer = Thread(target=write_loop)
    writer.start()
    try:
        misses = sum(
            1
            for _ in range(2000)
            if repo.get_user_by_id("u1") is None
            or repo.get_user_by_email("user@test.local") is None
        )
    finally:
        stop.set()
        writer.join()

    assert misses == 0
    assert not (tmp_path / "runtime" / "user_store" / "users.json.tmp").exists()


def test_user_repository_corrupted_file_raises_and_is_not_overwritten(
    tmp_path: Path,
) -> None:
    repo = UserRepository(tmp_path)
    repo.create_user(_user(email="a@example.com"))
    users_file = tmp_path / "runtime" / "user_store" / "users.json"
    truncated = users_file.read_text(encoding="utf-8")[:-3]
    users_file.write_text(truncated, encoding="utf-8")

    with pytest.raises(UserStoreCorruptedError):
        repo.get_user_by_email("a@example.com")
    with pytest.raises(UserStoreCorruptedError):
        repo.create_user(_user(user_id="u2", email="b@example.com"))
    with pytest.raises(UserStoreCorruptedError):
        repo.add_refresh_token("u1", "t1")

    assert users_file.read_text(encoding="utf-8") == truncated
