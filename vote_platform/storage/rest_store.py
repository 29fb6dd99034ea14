"""
RestStore – HTTP-backed store for Vote Platform
===============================================

Talks to a realtime-database style REST endpoint where every node of the
tree is addressable as `{base_url}/{path}.json`:

    GET    {base}/{path}.json            -> JSON value, `null` when absent
    PUT    {base}/{path}.json  <json>    -> full overwrite
    DELETE {base}/{path}.json            -> remove the subtree

There is no authentication and no conditional write; the database's own
declarative rules are the only enforcement boundary.

Error mapping
-------------
- transport errors / timeouts / non-2xx  -> StoreUnavailable
- 401 / 403                               -> PermissionDenied

No request is retried here; callers pick the fallback (revert the UI,
use the local cache, or drop the analytics write).

Example
-------
>>> store = RestStore("https://portfolio-default-rtdb.firebaseio.com")
>>> await store.write("votes/dungeon/count", 3)
>>> await store.read("votes/dungeon/count")
3
"""

import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from ..errors import PermissionDenied, StoreUnavailable
from .base import BaseStore, split_path

log = logging.getLogger(__name__)


class RestStore(BaseStore):
    """REST implementation of the store contract.

    Parameters
    ----------
    base_url : str
        Root of the database, without a trailing slash.
    timeout : float
        Per-request timeout in seconds.
    client : httpx.AsyncClient, optional
        Injected client (tests pass one built on httpx.MockTransport).
    """

    def __init__(self, base_url: str, timeout: float = 5.0, client: Optional[httpx.AsyncClient] = None) -> None:
        super().__init__()
        if not base_url:
            raise ValueError("base_url is required for the REST store")
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    # ---- Internal helpers -------------------------------------------------

    def _url(self, path: str) -> str:
        # Quote every segment so sanitized identities ("%2E") survive the trip
        quoted = "/".join(quote(segment, safe="") for segment in split_path(path))
        return f"{self.base_url}/{quoted}.json"

    async def _request(self, method: str, path: str, value: Any = None) -> httpx.Response:
        kwargs = {"json": value} if method == "PUT" else {}
        try:
            resp = await self._client.request(method, self._url(path), **kwargs)
        except httpx.HTTPError as exc:
            log.debug("%s %s failed: %s", method, path, exc)
            raise StoreUnavailable(f"{method} {path} failed: {exc}", path=path) from exc
        if resp.status_code in (401, 403):
            raise PermissionDenied(f"{method} {path} rejected ({resp.status_code})", path=path)
        if not resp.is_success:
            raise StoreUnavailable(f"{method} {path} returned {resp.status_code}", path=path)
        return resp

    # ---- Contract methods -------------------------------------------------

    async def read(self, path: str) -> Optional[Any]:
        resp = await self._request("GET", path)
        try:
            return resp.json()
        except ValueError as exc:
            raise StoreUnavailable(f"GET {path} returned a non-JSON body", path=path) from exc

    async def write(self, path: str, value: Any) -> None:
        await self._request("PUT", path, value)

    async def delete(self, path: str) -> None:
        await self._request("DELETE", path)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
