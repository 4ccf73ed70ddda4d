"""
JSON codec for request and response bodies.
"""

from __future__ import annotations

import json
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from .exceptions import APIError, DecodeError
from .models.envelope import Envelope

M = TypeVar("M", bound=BaseModel)
E = TypeVar("E", bound=Envelope[Any])


def encode(obj: BaseModel | dict[str, Any]) -> bytes:
    """
    Serialize a request body.

    Models are dumped with ``exclude_unset`` so fields the caller never set are
    left out of the body entirely.
    """
    if isinstance(obj, BaseModel):
        payload = obj.model_dump(mode="json", by_alias=True, exclude_unset=True)
    else:
        payload = obj
    return json.dumps(payload, separators=(",", ":")).encode("utf-8")


def decode(content: bytes, shape: type[M]) -> M:
    """
    Parse response bytes into `shape`.

    Raises:
        DecodeError: If the body is not JSON or does not match `shape`.
    """
    try:
        return shape.model_validate_json(content)
    except ValidationError as e:
        raise DecodeError(
            f"Response does not match {shape.__name__}: {e.errors()[0]['msg']}",
            shape=shape.__name__,
            body=content,
        ) from e


def decode_envelope(content: bytes, shape: type[E]) -> E:
    """
    Decode an envelope and reject it if the API reported ``success: false``.

    Raises:
        DecodeError: If the body does not match `shape`.
        APIError: If the envelope carries ``success: false``.
    """
    envelope = decode(content, shape)
    if not envelope.success:
        errors = [e.model_dump() for e in envelope.errors]
        message = envelope.errors[0].message if envelope.errors else ""
        raise APIError(message or "API reported failure", errors=errors, response_body=content)
    return envelope
