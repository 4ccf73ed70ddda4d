"""
Device settings policy service.

Covers the default policy of an account, custom policies by id, and the
paginated policy listing. Every operation is a single request/response round
trip except `list()`, which may follow several pages.
"""

from __future__ import annotations

import builtins
import logging
from collections.abc import AsyncIterator, Iterator
from typing import TYPE_CHECKING

from ..codec import decode_envelope, encode
from ..exceptions import DecodeError
from ..models.entities import Policy, PolicyCreate, PolicyUpdate
from ..models.envelope import PolicyDeleteEnvelope, PolicyEnvelope, PolicyListEnvelope
from ..models.pagination import ListParams, PageCursor, PaginatedResponse, ResultInfo
from ..types import ACCOUNT_ROUTE_ROOT, AccountId, PolicyId
from ..uri import build_uri, path
from ._ids import require_id

if TYPE_CHECKING:
    from ..clients.http import AsyncHTTPClient, HTTPClient

logger = logging.getLogger(__name__)


def _policy_path(account_id: AccountId | str, policy_id: PolicyId | str | None = None) -> str:
    account = require_id(account_id, "account_id")
    if policy_id is None:
        return path(ACCOUNT_ROUTE_ROOT, account, "devices", "policy")
    policy = require_id(policy_id, "policy_id")
    return path(ACCOUNT_ROUTE_ROOT, account, "devices", "policy", policy)


def _list_path(account_id: AccountId | str) -> str:
    return path(ACCOUNT_ROUTE_ROOT, require_id(account_id, "account_id"), "devices", "policies")


def _resolve_params(
    params: ListParams | None, page: int | None, per_page: int | None
) -> ListParams:
    if params is not None:
        if page is not None or per_page is not None:
            raise ValueError(
                "Cannot combine 'params' with 'page'/'per_page'; pass one or the other."
            )
        return params
    return ListParams(page=page, per_page=per_page)


def _page_uri(base: str, cursor: PageCursor, per_page: int) -> str:
    return build_uri(base, ListParams(page=cursor.page, per_page=per_page))


def _to_page(envelope: PolicyListEnvelope) -> PaginatedResponse[Policy]:
    return PaginatedResponse[Policy](data=envelope.result or [], result_info=envelope.result_info)


def _require_result(envelope: PolicyEnvelope) -> Policy:
    # A 2xx envelope without a result carries nothing to return.
    if envelope.result is None:
        raise DecodeError("Policy response has no result", shape="PolicyEnvelope")
    return envelope.result


# =============================================================================
# Pagination
# =============================================================================


class PolicyListFetcher:
    """
    Fetches the policies of an account page by page.

    With neither `page` nor `per_page` given, every page is requested in turn
    (20 per page) until `result_info.total_pages` is reached. Setting either
    one requests exactly that single page. The loop is strictly sequential
    since each page number comes from the previous response.
    """

    def __init__(self, client: HTTPClient):
        self._client = client

    def pages(
        self, account_id: AccountId | str, params: ListParams | None = None
    ) -> Iterator[PaginatedResponse[Policy]]:
        """Yield each fetched page in order."""
        params = params or ListParams()
        base = _list_path(account_id)
        per_page = params.effective_per_page
        cursor = PageCursor.start(params)
        while True:
            content = self._client.execute("GET", _page_uri(base, cursor, per_page))
            page = _to_page(decode_envelope(content, PolicyListEnvelope))
            logger.debug(
                "Fetched policies page %s/%s (%d items)",
                page.result_info.page or cursor.page or 1,
                page.result_info.total_pages,
                len(page.data),
            )
            yield page
            cursor = cursor.advance(page.result_info)
            if cursor.done or not params.auto_paginate:
                return

    def fetch(
        self, account_id: AccountId | str, params: ListParams | None = None
    ) -> PaginatedResponse[Policy]:
        """
        Fetch and merge pages.

        Returns the policies in page order together with the `result_info` of
        the last page fetched. Any error aborts the whole listing.
        """
        policies: list[Policy] = []
        last_info = ResultInfo()
        for page in self.pages(account_id, params):
            policies.extend(page.data)
            last_info = page.result_info
        return PaginatedResponse[Policy](data=policies, result_info=last_info)


class AsyncPolicyListFetcher:
    """Async version of `PolicyListFetcher`. Cancelling the task aborts the listing."""

    def __init__(self, client: AsyncHTTPClient):
        self._client = client

    async def pages(
        self, account_id: AccountId | str, params: ListParams | None = None
    ) -> AsyncIterator[PaginatedResponse[Policy]]:
        params = params or ListParams()
        base = _list_path(account_id)
        per_page = params.effective_per_page
        cursor = PageCursor.start(params)
        while True:
            content = await self._client.execute("GET", _page_uri(base, cursor, per_page))
            page = _to_page(decode_envelope(content, PolicyListEnvelope))
            logger.debug(
                "Fetched policies page %s/%s (%d items)",
                page.result_info.page or cursor.page or 1,
                page.result_info.total_pages,
                len(page.data),
            )
            yield page
            cursor = cursor.advance(page.result_info)
            if cursor.done or not params.auto_paginate:
                return

    async def fetch(
        self, account_id: AccountId | str, params: ListParams | None = None
    ) -> PaginatedResponse[Policy]:
        policies: list[Policy] = []
        last_info = ResultInfo()
        async for page in self.pages(account_id, params):
            policies.extend(page.data)
            last_info = page.result_info
        return PaginatedResponse[Policy](data=policies, result_info=last_info)


# =============================================================================
# Services
# =============================================================================


class DevicePolicyService:
    """
    Service for device settings policies.

    An account always has one default policy (addressed without an id) and
    any number of custom policies matched by precedence.
    """

    def __init__(self, client: HTTPClient):
        self._client = client
        self._fetcher = PolicyListFetcher(client)

    # =========================================================================
    # Read Operations
    # =========================================================================

    def get_default(self, account_id: AccountId | str) -> Policy:
        """Get the default device settings policy of an account."""
        content = self._client.execute("GET", _policy_path(account_id))
        return _require_result(decode_envelope(content, PolicyEnvelope))

    def get(self, account_id: AccountId | str, policy_id: PolicyId | str) -> Policy:
        """Get a custom device settings policy by id."""
        content = self._client.execute("GET", _policy_path(account_id, policy_id))
        return _require_result(decode_envelope(content, PolicyEnvelope))

    def list(
        self,
        account_id: AccountId | str,
        params: ListParams | None = None,
        *,
        page: int | None = None,
        per_page: int | None = None,
    ) -> PaginatedResponse[Policy]:
        """
        List the policies of an account.

        Args:
            account_id: The account id
            params: Page constraints (alternative to `page`/`per_page`)
            page: 1-based page number; fetches only that page
            per_page: Page size; fetches only one page

        Returns:
            All policies when no page constraint is given, otherwise one page.
            `result_info` is that of the last page fetched.
        """
        return self._fetcher.fetch(account_id, _resolve_params(params, page, per_page))

    def pages(
        self,
        account_id: AccountId | str,
        params: ListParams | None = None,
        *,
        page: int | None = None,
        per_page: int | None = None,
    ) -> Iterator[PaginatedResponse[Policy]]:
        """Iterate policy pages (not items) with the same rules as `list()`."""
        return self._fetcher.pages(account_id, _resolve_params(params, page, per_page))

    def all(self, account_id: AccountId | str) -> Iterator[Policy]:
        """Iterate every policy of an account, fetching pages lazily."""
        for page in self._fetcher.pages(account_id):
            yield from page.data

    # =========================================================================
    # Write Operations
    # =========================================================================

    def create(self, account_id: AccountId | str, data: PolicyCreate) -> Policy:
        """Create a custom policy for devices matching `data.match`."""
        content = self._client.execute("POST", _policy_path(account_id), encode(data))
        return _require_result(decode_envelope(content, PolicyEnvelope))

    def update_default(self, account_id: AccountId | str, data: PolicyUpdate) -> Policy:
        """Update the default policy. Only fields set on `data` are sent."""
        content = self._client.execute("PATCH", _policy_path(account_id), encode(data))
        return _require_result(decode_envelope(content, PolicyEnvelope))

    def update(
        self, account_id: AccountId | str, policy_id: PolicyId | str, data: PolicyUpdate
    ) -> Policy:
        """Update a custom policy. Only fields set on `data` are sent."""
        content = self._client.execute(
            "PATCH", _policy_path(account_id, policy_id), encode(data)
        )
        return _require_result(decode_envelope(content, PolicyEnvelope))

    def delete(
        self, account_id: AccountId | str, policy_id: PolicyId | str
    ) -> builtins.list[Policy]:
        """
        Delete a custom policy.

        Returns:
            The policies remaining on the account.
        """
        content = self._client.execute("DELETE", _policy_path(account_id, policy_id))
        return decode_envelope(content, PolicyDeleteEnvelope).result or []


class AsyncDevicePolicyService:
    """Async version of DevicePolicyService."""

    def __init__(self, client: AsyncHTTPClient):
        self._client = client
        self._fetcher = AsyncPolicyListFetcher(client)

    async def get_default(self, account_id: AccountId | str) -> Policy:
        content = await self._client.execute("GET", _policy_path(account_id))
        return _require_result(decode_envelope(content, PolicyEnvelope))

    async def get(self, account_id: AccountId | str, policy_id: PolicyId | str) -> Policy:
        content = await self._client.execute("GET", _policy_path(account_id, policy_id))
        return _require_result(decode_envelope(content, PolicyEnvelope))

    async def list(
        self,
        account_id: AccountId | str,
        params: ListParams | None = None,
        *,
        page: int | None = None,
        per_page: int | None = None,
    ) -> PaginatedResponse[Policy]:
        return await self._fetcher.fetch(account_id, _resolve_params(params, page, per_page))

    def pages(
        self,
        account_id: AccountId | str,
        params: ListParams | None = None,
        *,
        page: int | None = None,
        per_page: int | None = None,
    ) -> AsyncIterator[PaginatedResponse[Policy]]:
        return self._fetcher.pages(account_id, _resolve_params(params, page, per_page))

    async def all(self, account_id: AccountId | str) -> AsyncIterator[Policy]:
        async for page in self._fetcher.pages(account_id):
            for policy in page.data:
                yield policy

    async def create(self, account_id: AccountId | str, data: PolicyCreate) -> Policy:
        content = await self._client.execute("POST", _policy_path(account_id), encode(data))
        return _require_result(decode_envelope(content, PolicyEnvelope))

    async def update_default(self, account_id: AccountId | str, data: PolicyUpdate) -> Policy:
        content = await self._client.execute("PATCH", _policy_path(account_id), encode(data))
        return _require_result(decode_envelope(content, PolicyEnvelope))

    async def update(
        self, account_id: AccountId | str, policy_id: PolicyId | str, data: PolicyUpdate
    ) -> Policy:
        content = await self._client.execute(
            "PATCH", _policy_path(account_id, policy_id), encode(data)
        )
        return _require_result(decode_envelope(content, PolicyEnvelope))

    async def delete(
        self, account_id: AccountId | str, policy_id: PolicyId | str
    ) -> builtins.list[Policy]:
        content = await self._client.execute("DELETE", _policy_path(account_id, policy_id))
        return decode_envelope(content, PolicyDeleteEnvelope).result or []
