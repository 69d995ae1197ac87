# backend/utils/rest_store.py
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin

import httpx

from config import settings
from utils.row_store import RowStore, StoreError, Row, Filters, Search, check_collection

logger = logging.getLogger(__name__)


def _literal(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _filter_params(filters: Optional[Filters], search: Optional[Search]) -> List[tuple]:
    params = []
    for name, value in (filters or {}).items():
        if isinstance(value, (list, tuple, set)):
            joined = ",".join(f'"{_literal(v)}"' for v in value)
            params.append((name, f"in.({joined})"))
        elif value is None:
            params.append((name, "is.null"))
        else:
            params.append((name, f"eq.{_literal(value)}"))
    if search:
        columns, term = search
        pattern = _quoted(f"*{_search_term(term)}*")
        clauses = ",".join(f"{c}.ilike.{pattern}" for c in columns)
        params.append(("or", f"({clauses})"))
    return params


def _search_term(term: str) -> str:
    # '*' is PostgREST's LIKE wildcard, a literal one cannot be expressed
    return term.replace("*", " ").strip()


def _quoted(value: str) -> str:
    # Double quotes keep ',', '(' and ')' from splitting the logic tree
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class RestRowStore(RowStore):
    """Row store over the hosted backend's PostgREST endpoint."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        access_token: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        base_url = base_url or settings.REST_URL
        if not base_url:
            raise StoreError("REST_URL is not configured")
        self.api_url = urljoin(base_url.rstrip("/") + "/", "rest/v1/")
        self.api_key = api_key or settings.REST_API_KEY or ""
        # Row-level security runs as the caller when their token is forwarded
        self.access_token = access_token or self.api_key
        self._client = client

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }
        headers.update(extra or {})
        return headers

    async def _request(self, method: str, collection: str, *, params=None, json=None, headers=None) -> httpx.Response:
        check_collection(collection)
        url = urljoin(self.api_url, collection)
        try:
            if self._client is not None:
                response = await self._client.request(
                    method, url, params=params, json=json, headers=self._headers(headers)
                )
            else:
                async with httpx.AsyncClient(timeout=settings.REST_TIMEOUT) as client:
                    response = await client.request(
                        method, url, params=params, json=json, headers=self._headers(headers)
                    )
        except httpx.RequestError as e:
            logger.error(f"REST store {method} {collection} unreachable: {e}")
            raise StoreError(f"Could not reach the data service ({collection}).", collection=collection) from e

        if response.status_code >= 400:
            try:
                payload = response.json()
                message = payload.get("message") or payload.get("error") or response.text
            except ValueError:
                message = response.text or response.reason_phrase
            logger.error(f"REST store {method} {collection} failed ({response.status_code}): {message}")
            raise StoreError(message, collection=collection)
        return response

    async def select(self, collection, columns=None, filters=None, order=None,
                     descending=False, offset=None, limit=None, search=None) -> List[Row]:
        params = [("select", ",".join(columns) if columns else "*")]
        params += _filter_params(filters, search)
        if order:
            params.append(("order", f"{order}.{'desc' if descending else 'asc'}"))
        if offset:
            params.append(("offset", str(offset)))
        if limit is not None:
            params.append(("limit", str(limit)))
        response = await self._request("GET", collection, params=params)
        return response.json()

    async def count(self, collection, filters=None, search=None) -> int:
        params = _filter_params(filters, search)
        response = await self._request("HEAD", collection, params=params, headers={"Prefer": "count=exact"})
        # Content-Range: "0-9/42" or "*/0"
        content_range = response.headers.get("Content-Range", "")
        total = content_range.rsplit("/", 1)[-1]
        if not total.isdigit():
            raise StoreError(f"Data service did not return a count for {collection}.", collection=collection)
        return int(total)

    async def insert(self, collection, row) -> Row:
        response = await self._request(
            "POST", collection, json=row, headers={"Prefer": "return=representation"}
        )
        data = response.json()
        if isinstance(data, list):
            if not data:
                raise StoreError(f"Insert into {collection} returned no row.", collection=collection)
            return data[0]
        return data

    async def update(self, collection, patch, filters) -> None:
        await self._request("PATCH", collection, params=_filter_params(filters, None), json=patch)

    async def delete(self, collection, filters) -> None:
        await self._request("DELETE", collection, params=_filter_params(filters, None))
