"""
Username Rules.

Usernames appear in profile URLs (/{username}), so besides the character
rules they must not collide with application routes or brand terms.
"""

import re

MIN_LENGTH = 3
MAX_LENGTH = 30

_ALLOWED = re.compile(r"^[a-zA-Z0-9_-]+$")
_CONSECUTIVE_SPECIAL = re.compile(r"[-_]{2,}")

RESERVED_USERNAMES = frozenset({
    # routes
    "about", "account", "admin", "api", "app", "auth", "billing", "blog",
    "callback", "checkout", "contact", "dashboard", "discover", "docs",
    "earnings", "edit", "explore", "extension", "faq", "feed", "help",
    "home", "list", "lists", "login", "logout", "new", "onboarding",
    "pricing", "privacy", "profile", "purchase", "purchases", "register",
    "saved", "search", "settings", "signin", "signout", "signup", "static",
    "stats", "support", "terms", "user", "users", "webhooks", "www",
    # brand and system
    "root", "snack", "snackapp", "snackteam", "staff", "system", "team",
    "official", "moderator", "null", "undefined", "anonymous",
})


def normalize_username(username: str) -> str:
    """Trim and lower-case a username for storage and lookup."""
    return username.strip().lower()


def validate_username(username: str | None) -> str | None:
    """
    Validate a username.

    Returns:
        None when valid, otherwise a human-readable reason.
    """
    if not username or not username.strip():
        return "Username is required"

    value = username.strip()

    if len(value) < MIN_LENGTH:
        return f"Username must be at least {MIN_LENGTH} characters"
    if len(value) > MAX_LENGTH:
        return f"Username must be at most {MAX_LENGTH} characters"
    if not _ALLOWED.match(value):
        return "Username can only contain letters, numbers, hyphens, and underscores"
    if value[0] in "-_" or value[-1] in "-_":
        return "Username cannot start or end with a hyphen or underscore"
    if _CONSECUTIVE_SPECIAL.search(value):
        return "Username cannot contain consecutive hyphens or underscores"
    if normalize_username(value) in RESERVED_USERNAMES:
        return "This username is reserved"

    return None


def is_valid_username(username: str | None) -> bool:
    return validate_username(username) is None
