"""
Internal request pipeline primitives.

Requests and responses are modeled independently of httpx so cross-cutting
behavior (write guard, request logging, status mapping) is implemented as
middleware around a terminal transport call.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Literal, Protocol, TypeAlias, TypedDict, cast

Header: TypeAlias = tuple[str, str]
Method: TypeAlias = Literal["GET", "POST", "PATCH", "DELETE"]

WRITE_METHODS: frozenset[str] = frozenset({"POST", "PATCH", "PUT", "DELETE"})


class RequestContext(TypedDict, total=False):
    timeout_seconds: float


class ResponseContext(TypedDict, total=False):
    request_id: str
    elapsed_seconds: float


@dataclass(slots=True)
class SDKRequest:
    method: Method
    url: str
    headers: list[Header] = field(default_factory=list)
    content: bytes | None = None
    context: RequestContext = field(default_factory=lambda: cast(RequestContext, {}))

    @property
    def write_intent(self) -> bool:
        return self.method in WRITE_METHODS


@dataclass(slots=True)
class SDKResponse:
    status_code: int
    headers: list[Header]
    content: bytes
    context: ResponseContext = field(default_factory=lambda: cast(ResponseContext, {}))


Pipeline: TypeAlias = Callable[[SDKRequest], SDKResponse]
AsyncPipeline: TypeAlias = Callable[[SDKRequest], Awaitable[SDKResponse]]


class Middleware(Protocol):
    def __call__(self, req: SDKRequest, next: Pipeline) -> SDKResponse: ...


class AsyncMiddleware(Protocol):
    async def __call__(self, req: SDKRequest, next: AsyncPipeline) -> SDKResponse: ...


def compose(middlewares: Sequence[Middleware], terminal: Pipeline) -> Pipeline:
    pipeline = terminal
    for middleware in reversed(middlewares):
        next_pipeline = pipeline

        def _wrapped(
            req: SDKRequest, *, _mw: Middleware = middleware, _n: Pipeline = next_pipeline
        ) -> SDKResponse:
            return _mw(req, _n)

        pipeline = _wrapped
    return pipeline


def compose_async(middlewares: Sequence[AsyncMiddleware], terminal: AsyncPipeline) -> AsyncPipeline:
    pipeline = terminal
    for middleware in reversed(middlewares):
        next_pipeline = pipeline

        async def _wrapped(
            req: SDKRequest,
            *,
            _mw: AsyncMiddleware = middleware,
            _n: AsyncPipeline = next_pipeline,
        ) -> SDKResponse:
            return await _mw(req, _n)

        pipeline = _wrapped
    return pipeline
