"""
List Public IDs.

Short identifiers used in shareable list URLs. The alphabet omits
characters that are easy to confuse when read aloud or typed (0/O, 1/l/I).
"""

import re
import secrets

PUBLIC_ID_ALPHABET = "23456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnpqrstuvwxyz"
PUBLIC_ID_LENGTH = 8

_PUBLIC_ID_PATTERN = re.compile(f"^[{PUBLIC_ID_ALPHABET}]{{{PUBLIC_ID_LENGTH}}}$")


def generate_public_id() -> str:
    """Generate a random public list ID."""
    return "".join(secrets.choice(PUBLIC_ID_ALPHABET) for _ in range(PUBLIC_ID_LENGTH))


def is_valid_public_id(value: str | None) -> bool:
    """Check that a value has the shape of a public list ID."""
    if not value:
        return False
    return bool(_PUBLIC_ID_PATTERN.match(value))
