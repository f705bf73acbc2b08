"""
Unit Tests for Username Rules.

Pure functions, no mocks.
"""

import pytest

from snack.backend.domain.usernames import (
    RESERVED_USERNAMES,
    is_valid_username,
    normalize_username,
    validate_username,
)


class TestValidateUsername:
    @pytest.mark.parametrize("username", ["ada", "ada_lovelace", "grace-hopper", "User123", "a" * 30])
    def test_valid_usernames(self, username):
        assert validate_username(username) is None

    @pytest.mark.parametrize("username", [None, "", "   "])
    def test_missing_username(self, username):
        assert validate_username(username) == "Username is required"

    def test_too_short(self):
        assert validate_username("ab") == "Username must be at least 3 characters"

    def test_too_long(self):
        assert validate_username("a" * 31) == "Username must be at most 30 characters"

    @pytest.mark.parametrize("username", ["ada lovelace", "ada.l", "ada@home", "émile"])
    def test_disallowed_characters(self, username):
        assert "can only contain" in validate_username(username)

    @pytest.mark.parametrize("username", ["_ada", "ada-", "-ada_"])
    def test_leading_or_trailing_special(self, username):
        assert "cannot start or end" in validate_username(username)

    @pytest.mark.parametrize("username", ["ada__l", "ada--l", "ada-_l"])
    def test_consecutive_special(self, username):
        assert "consecutive" in validate_username(username)

    @pytest.mark.parametrize("username", ["admin", "Explore", "SNACK", "api"])
    def test_reserved_names_any_case(self, username):
        assert validate_username(username) == "This username is reserved"

    def test_surrounding_whitespace_is_ignored(self):
        assert validate_username("  ada  ") is None


class TestNormalizeUsername:
    def test_lowercases_and_trims(self):
        assert normalize_username("  Ada_L ") == "ada_l"


class TestReservedUsernames:
    def test_reserved_set_is_lower_case(self):
        assert all(name == name.lower() for name in RESERVED_USERNAMES)

    def test_is_valid_username_mirrors_validate(self):
        assert is_valid_username("ada") is True
        assert is_valid_username("settings") is False
