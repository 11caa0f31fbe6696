"""Color normalization for note display colors.

Older notes were saved with symbolic names (``blue``, ``emerald`` ...) or
bare hex digits. Everything that leaves the service is a canonical
``#RRGGBB`` string.
"""

from __future__ import annotations

import re

DEFAULT_COLOR = "#3b82f6"

LEGACY_COLORS: dict[str, str] = {
    "blue": "#3b82f6",
    "emerald": "#10b981",
    "purple": "#8b5cf6",
    "orange": "#f97316",
    "rose": "#f43f5e",
}

_BARE_HEX = re.compile(r"^[0-9a-fA-F]{6}$")
_PREFIXED_HEX = re.compile(r"^#[0-9a-fA-F]{6}$")


def is_hex_color(value: str | None) -> bool:
    """Return True if *value* is ``#`` followed by exactly six hex digits."""
    return bool(value) and _PREFIXED_HEX.match(value) is not None


def normalize_color(value: str | None, strict: bool = True) -> str:
    """Map *value* to a canonical ``#RRGGBB`` color.

    Args:
        value: Raw color as submitted or stored. May be None or blank.
        strict: When True, unrecognized values fall back to
            ``DEFAULT_COLOR``. When False they are returned trimmed but
            otherwise untouched.

    Returns:
        The normalized color string.
    """
    if not isinstance(value, str):
        return DEFAULT_COLOR
    trimmed = value.strip()
    if not trimmed:
        return DEFAULT_COLOR
    if trimmed in LEGACY_COLORS:
        return LEGACY_COLORS[trimmed]
    if _BARE_HEX.match(trimmed):
        return f"#{trimmed}"
    if is_hex_color(trimmed):
        return trimmed
    return DEFAULT_COLOR if strict else trimmed
