"""
Request URI construction.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import BaseModel


def path(*segments: str) -> str:
    """Join path segments into ``/a/b/c``, percent-encoding each segment."""
    return "/" + "/".join(quote(str(s), safe="") for s in segments)


def build_uri(base_path: str, params: BaseModel | Mapping[str, Any] | None = None) -> str:
    """
    Render `base_path` plus query parameters.

    Parameters that are ``None`` are omitted. Models are flattened field by
    field in declaration order.
    """
    if params is None:
        return base_path
    items = params.model_dump() if isinstance(params, BaseModel) else dict(params)
    query = httpx.QueryParams({k: v for k, v in items.items() if v is not None})
    if not query:
        return base_path
    return f"{base_path}?{query}"
