# =============================================================================
# 🔤 utils/escaping.py
# Escaping-Regeln für vCard (RFC 2426) und MeCard
# -----------------------------------------------------------------------------
# Backslash immer zuerst, sonst werden eingefügte Backslashes doppelt escaped.
# =============================================================================

from __future__ import annotations

_VCARD_RULES = (
    ("\\", "\\\\"),
    (",", "\\,"),
    (";", "\\;"),
    ("\n", "\\n"),
)

_MECARD_RULES = (
    ("\\", "\\\\"),
    (":", "\\:"),
    (";", "\\;"),
    (",", "\\,"),
    ('"', '\\"'),
)


def escape_vcard_value(value: str) -> str:
    for raw, escaped in _VCARD_RULES:
        value = value.replace(raw, escaped)
    return value


def escape_mecard_value(value: str) -> str:
    for raw, escaped in _MECARD_RULES:
        value = value.replace(raw, escaped)
    return value


def unescape_mecard_value(value: str) -> str:
    """Kehrt escape_mecard_value um: jedes `\\x` wird zu `x`."""
    out = []
    chars = iter(value)
    for ch in chars:
        if ch == "\\":
            out.append(next(chars, "\\"))
        else:
            out.append(ch)
    return "".join(out)
