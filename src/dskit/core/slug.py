"""Pure string helpers for URL slugs.

Usage:
    generate_slug("Hello World!")  # "hello-world"
    in_chain("b", ["a", "b", "c"])  # True
"""

from __future__ import annotations

from collections.abc import Iterable


def _slug_char(ch: str) -> str:
    if ch == " " or ch == "-":
        return "-"
    if ch == "_" or ch.isalpha() or ch.isdecimal():
        return ch
    return ""


def generate_slug(text: str) -> str:
    """Turn free text into a URL-safe slug.

    Strips surrounding whitespace, lowercases, maps spaces and hyphens to
    hyphens, keeps letters, digits and underscores, and drops every other
    character without replacing it.

    Args:
        text: Free-form input.

    Returns:
        The slug. Empty if no character of the input is eligible.
    """
    return "".join(_slug_char(ch) for ch in text.strip().lower())


def in_chain(needle: str, chain: Iterable[str]) -> bool:
    """Check whether needle equals any element of chain, in order."""
    for item in chain:
        if item == needle:
            return True
    return False
