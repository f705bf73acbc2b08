"""
Unit Tests for List Public IDs.
"""

from uuid import uuid4

import pytest

from snack.backend.domain.ids import (
    PUBLIC_ID_ALPHABET,
    PUBLIC_ID_LENGTH,
    generate_public_id,
    is_valid_public_id,
)


class TestGeneratePublicId:
    def test_length_and_alphabet(self):
        public_id = generate_public_id()
        assert len(public_id) == PUBLIC_ID_LENGTH
        assert all(ch in PUBLIC_ID_ALPHABET for ch in public_id)

    def test_generated_ids_validate(self):
        for _ in range(50):
            assert is_valid_public_id(generate_public_id())

    def test_ids_vary(self):
        assert len({generate_public_id() for _ in range(50)}) > 1


class TestIsValidPublicId:
    @pytest.mark.parametrize("char", ["0", "O", "1", "l", "I"])
    def test_confusable_characters_rejected(self, char):
        assert is_valid_public_id(f"abcdefg{char}") is False

    @pytest.mark.parametrize("value", [None, "", "abc", "abcdefghj"])
    def test_wrong_length_or_empty(self, value):
        assert is_valid_public_id(value) is False

    def test_uuid_is_not_a_public_id(self):
        assert is_valid_public_id(str(uuid4())) is False

    def test_valid_id(self):
        assert is_valid_public_id("Ab3dEf9k") is True
