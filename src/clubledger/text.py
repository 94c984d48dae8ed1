"""Text helpers for name matching and display."""

import unicodedata


def normalize_text(text: str) -> str:
    """Strip diacritics and lowercase, so "José" compares equal to "jose".

    NFD decomposes accented characters into base + combining mark; the
    combining marks are then dropped.
    """
    decomposed = unicodedata.normalize("NFD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold()


def name_sort_key(name: str) -> tuple[str, str]:
    """Sort key that ignores case and diacritics.

    The raw name breaks ties so the order is deterministic.
    """
    return normalize_text(name), name


def mask_email(email: str | None) -> str | None:
    """Mask the local part of an email for public reports.

    Keeps the first two characters and the last one:
    ``john.doe@example.com`` -> ``jo*****e@example.com``. Local parts of
    two characters or fewer, and strings that are not a single
    ``local@domain`` pair, are returned unchanged.
    """
    if not email:
        return email
    parts = email.split("@")
    if len(parts) != 2:
        return email

    username, domain = parts
    if len(username) <= 2:
        return email

    masked = username[:2] + "*" * (len(username) - 3) + username[-1]
    return f"{masked}@{domain}"
