"""
Unit tests for CredentialVault: seeding, verification, rotation.
Run with: pytest tests/
"""

import json

import pytest

from src.core.credentials import CredentialVault
from src.core.errors import AuthenticationError, NotFoundError, ValidationError


def test_seed_creates_single_admin_with_bcrypt_hash(vault):
    users = json.loads(vault.store.path.read_text(encoding="utf-8"))

    assert len(users) == 1
    assert users[0]["username"] == "admin"
    assert users[0]["passwordHash"].startswith("$2")
    assert "admin123" not in vault.store.path.read_text(encoding="utf-8")


def test_seed_uses_configured_admin(settings):
    from dataclasses import replace

    custom = CredentialVault(replace(settings, admin_username="root", admin_password="s3cret"))
    custom.store.ensure()

    assert custom.find_by_username("admin") is None
    assert custom.verify_password(custom.find_by_username("root"), "s3cret")


def test_find_by_username_is_case_sensitive(vault):
    assert vault.find_by_username("admin") is not None
    assert vault.find_by_username("Admin") is None


def test_verify_password(vault):
    admin = vault.find_by_username("admin")

    assert vault.verify_password(admin, "admin123") is True
    assert vault.verify_password(admin, "admin1234") is False
    assert vault.verify_password(admin, "") is False
    assert vault.verify_password(admin, "x" * 100) is False


def test_verify_password_with_malformed_hash(vault):
    assert vault.verify_password({"username": "u", "passwordHash": "plain"}, "plain") is False
    assert vault.verify_password({"username": "u"}, "anything") is False


def test_authenticate(vault):
    assert vault.authenticate("admin", "admin123")["username"] == "admin"
    with pytest.raises(AuthenticationError):
        vault.authenticate("admin", "wrong")
    with pytest.raises(AuthenticationError):
        vault.authenticate("nobody", "admin123")


def test_rotate_password_swaps_which_password_verifies(vault):
    vault.rotate_password("admin", "admin123", "n3w-pass")

    admin = vault.find_by_username("admin")
    assert vault.verify_password(admin, "admin123") is False
    assert vault.verify_password(admin, "n3w-pass") is True


def test_rotate_with_wrong_old_password_leaves_hash_unchanged(vault):
    before = vault.find_by_username("admin")["passwordHash"]

    with pytest.raises(AuthenticationError) as info:
        vault.rotate_password("admin", "not-it", "n3w-pass")

    assert info.value.code == "wrong_password"
    assert vault.find_by_username("admin")["passwordHash"] == before


def test_rotate_for_vanished_user(vault):
    with pytest.raises(NotFoundError) as info:
        vault.rotate_password("ghost", "admin123", "n3w-pass")
    assert info.value.code == "user_not_found"


@pytest.mark.parametrize("new_password", ["", "é" * 40])
def test_rotate_rejects_unusable_new_password(vault, new_password):
    with pytest.raises(ValidationError):
        vault.rotate_password("admin", "admin123", new_password)
    assert vault.verify_password(vault.find_by_username("admin"), "admin123")


def test_corrupt_users_file_reseeds_admin(vault):
    vault.store.path.write_text("[{", encoding="utf-8")

    admin = vault.find_by_username("admin")

    assert admin is not None
    assert vault.verify_password(admin, "admin123")
