from __future__ import annotations


def require_id(value: str, label: str) -> str:
    """Reject empty identifiers before they turn into a malformed path."""
    text = str(value).strip()
    if not text:
        raise ValueError(f"{label} cannot be empty")
    return text
