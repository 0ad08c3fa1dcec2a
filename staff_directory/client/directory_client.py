"""
Async HTTP client for the staff directory API.

Keeps a cache of fetched pages keyed by query parameters. Any successful
create, update or delete clears the cache and bumps a generation counter,
so a page fetched before a mutation is never shown again without a fresh
query. Reads and deletes are retried on transient failures; creates and
updates are not, since a retried create could insert a duplicate.
"""
import asyncio
import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional, Tuple

import httpx

from staff_directory.client.projection import designation_counts, sort_records
from staff_directory.domains.employees.query import Page, QueryParams, SortDirection, SortKey

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = (503, 504)


class DirectoryClientError(Exception):
    """Error reported by the directory API (or a transport failure)."""

    def __init__(
            self,
            status_code: Optional[int],
            code: str,
            message: str,
            details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details or {}

    @property
    def retryable(self) -> bool:
        return self.status_code is None or self.status_code in RETRYABLE_STATUS

    @classmethod
    def from_response(cls, response: httpx.Response) -> "DirectoryClientError":
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        details = {k: v for k, v in body.items() if k not in ("success", "code", "message")}
        return cls(
            response.status_code,
            body.get("code", "HTTP_ERROR"),
            body.get("message") or response.reason_phrase,
            details,
        )


class DirectoryClient:
    """
    Async client for the /employees endpoints.

    Uses httpx.AsyncClient with:
    - Bearer token authentication
    - Page cache invalidated by mutations
    - Exponential backoff retry for reads and deletes only
    """

    def __init__(
            self,
            base_url: str,
            token: Optional[str] = None,
            timeout: float = 10.0,
            max_retries: int = 3,
            backoff: float = 0.5,
            transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff = backoff
        self.transport = transport
        self.generation = 0
        self._cache: Dict[Tuple, Page] = {}
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "DirectoryClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            headers = {"Content-Type": "application/json"}
            if self.token:
                headers["Authorization"] = f"Bearer {self.token}"
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                headers=headers,
                transport=self.transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request(
            self,
            method: str,
            path: str,
            params: Optional[Dict[str, Any]] = None,
            json: Optional[Dict[str, Any]] = None,
            retry: bool = False,
    ) -> httpx.Response:
        """
        Execute a request, retrying transient failures when retry is set.

        Raises:
            DirectoryClientError: For any non-2xx response or transport failure
        """
        client = await self._get_client()
        attempts = self.max_retries + 1 if retry else 1

        for attempt in range(attempts):
            try:
                response = await client.request(method, path, params=params, json=json)
            except httpx.TransportError as e:
                error = DirectoryClientError(None, "TRANSPORT_ERROR", str(e) or type(e).__name__)
            else:
                if response.is_success:
                    return response
                error = DirectoryClientError.from_response(response)

            # Only a repeated delete may see 404 for a record its first attempt removed
            if attempt > 0 and method == "DELETE" and error.status_code == 404:
                return response

            if not error.retryable or attempt == attempts - 1:
                raise error

            delay = self.backoff * (2 ** attempt)
            logger.warning(f"{method} {path} failed ({error.code}), retry {attempt + 1} in {delay:.2f}s")
            await asyncio.sleep(delay)

        raise error

    def invalidate(self) -> None:
        """Drop every cached page."""
        self._cache.clear()
        self.generation += 1

    @staticmethod
    def _cache_key(params: QueryParams) -> Tuple:
        return (
            params.search or "",
            SortKey(params.sort_key).value,
            SortDirection(params.sort_direction).value,
            params.page,
            params.page_size,
        )

    async def fetch_page(self, params: QueryParams, use_cache: bool = True) -> Page:
        """
        Fetch one server-sorted page, from cache when available.
        """
        key = self._cache_key(params)
        if use_cache and key in self._cache:
            return self._cache[key]
        generation = self.generation

        query = {
            "page": params.page,
            "limit": params.page_size,
            "sort": key[1],
            "order": key[2],
        }
        if key[0]:
            query["search"] = key[0]

        response = await self._request("GET", "/employees", params=query, retry=True)
        body = response.json()
        pagination = body["pagination"]
        page = Page(
            data=body["data"],
            total=pagination["total"],
            page=pagination["page"],
            pages=pagination["pages"],
            limit=pagination["limit"],
        )
        # A mutation finished while this request was in flight; the page may predate it
        if self.generation == generation:
            self._cache[key] = page
        return page

    async def fetch_all(self, search: Optional[str] = None, page_size: int = 100) -> List[Dict[str, Any]]:
        """
        Fetch every record matching search, page by page, e.g. for charting.
        """
        params = QueryParams(search=search, page=1, page_size=page_size)
        first = await self.fetch_page(params)
        records = list(first.data)
        for number in range(2, first.pages + 1):
            page = await self.fetch_page(replace(params, page=number))
            records.extend(page.data)
        return records

    async def get_employee(self, employee_id: str) -> Dict[str, Any]:
        response = await self._request("GET", f"/employees/{employee_id}", retry=True)
        return response.json()["data"]

    async def create_employee(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        response = await self._request("POST", "/employees", json=fields)
        self.invalidate()
        return response.json()["data"]

    async def update_employee(self, employee_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        response = await self._request("PUT", f"/employees/{employee_id}", json=fields)
        self.invalidate()
        return response.json()["data"]

    async def delete_employee(self, employee_id: str) -> None:
        await self._request("DELETE", f"/employees/{employee_id}", retry=True)
        self.invalidate()


class DirectoryView:
    """
    The table view over one loaded page.

    Re-sorting is local to the loaded page. Changing page, search or page
    size always goes back to the server with the current sort, and any
    mutation made through the view reloads it.
    """

    def __init__(self, client: DirectoryClient, params: Optional[QueryParams] = None):
        self.client = client
        self.params = params or QueryParams()
        self.page: Optional[Page] = None
        self.records: List[Dict[str, Any]] = []
        self._generation = -1

    @property
    def stale(self) -> bool:
        """True if nothing is loaded or a mutation happened since the last load."""
        return self.page is None or self._generation != self.client.generation

    async def load(self) -> List[Dict[str, Any]]:
        self.page = await self.client.fetch_page(self.params)
        self.records = list(self.page.data)
        self._generation = self.client.generation
        return self.records

    def resort(self, sort_key: SortKey, direction: SortDirection = SortDirection.ASC) -> List[Dict[str, Any]]:
        """Re-sort the loaded page without a request; later fetches use the new sort."""
        self.params = replace(self.params, sort_key=SortKey(sort_key), sort_direction=SortDirection(direction))
        self.records = sort_records(self.records, self.params.sort_key, self.params.sort_direction)
        return self.records

    async def goto_page(self, page: int) -> List[Dict[str, Any]]:
        self.params = replace(self.params, page=page)
        return await self.load()

    async def search(self, text: Optional[str]) -> List[Dict[str, Any]]:
        self.params = replace(self.params, search=text, page=1)
        return await self.load()

    def chart(self) -> List[Dict[str, Any]]:
        """Employees per designation over the loaded records."""
        return designation_counts(self.records)

    async def create(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        created = await self.client.create_employee(fields)
        await self.load()
        return created

    async def update(self, employee_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        updated = await self.client.update_employee(employee_id, fields)
        await self.load()
        return updated

    async def delete(self, employee_id: str) -> None:
        await self.client.delete_employee(employee_id)
        await self.load()
