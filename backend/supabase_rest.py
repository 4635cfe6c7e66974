"""
supabase_rest.py — HTTP-based database client using Supabase's PostgREST API.
One SupabaseRest per request: handlers receive it through the get_store()
dependency, which owns the underlying httpx.Client and closes it afterwards.
"""
import logging
from urllib.parse import quote

import httpx

from config import SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY, HTTP_TIMEOUT
from errors import StorageError

logger = logging.getLogger(__name__)


def eq_filters(filters: dict | None) -> str:
    """Render equality filters as PostgREST query parameters."""
    if not filters:
        return ""
    return "&".join(f"{key}=eq.{quote(str(value))}" for key, value in filters.items())


def in_list(values) -> str:
    """Render values for an `in.(...)` filter."""
    return "(" + ",".join(quote(str(v)) for v in values) + ")"


class SupabaseRest:
    """Minimal PostgREST client. Raises StorageError on any HTTP failure."""

    def __init__(self, client: httpx.Client, base_url: str, api_key: str):
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key

    def _headers(self, **extra) -> dict:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        }
        headers.update(extra)
        return headers

    def _url(self, table: str, *parts: str) -> str:
        query = "&".join(p for p in parts if p)
        url = f"{self.base_url}/rest/v1/{table}"
        return f"{url}?{query}" if query else url

    def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            resp = self.client.request(method, url, headers=self._headers(), **kwargs)
            resp.raise_for_status()
            return resp
        except httpx.HTTPStatusError as e:
            detail = e.response.text
            logger.error("Supabase %s %s failed (%s): %s", method, url, e.response.status_code, detail)
            raise StorageError(upstream_status=e.response.status_code, detail=detail) from e
        except httpx.HTTPError as e:
            logger.error("Supabase %s %s failed: %s", method, url, e)
            raise StorageError(detail=str(e)) from e

    # ------------------------------------------------------------------
    def select(self, table: str, filters: dict = None, columns: str = "*", query_string: str = None) -> list:
        """Select rows with optional equality filters and a raw PostgREST query."""
        url = self._url(table, f"select={columns}", eq_filters(filters), query_string)
        return self._send("GET", url).json()

    def select_one(self, table: str, filters: dict, columns: str = "*") -> dict | None:
        rows = self.select(table, filters=filters, columns=columns, query_string="limit=1")
        return rows[0] if rows else None

    def insert(self, table: str, data: dict) -> dict:
        """Insert a row and return the created record."""
        result = self._send("POST", self._url(table), json=data).json()
        return result[0] if isinstance(result, list) and result else {}

    def update(self, table: str, filters: dict, data: dict) -> dict:
        """Update rows matching every equality filter."""
        result = self._send("PATCH", self._url(table, eq_filters(filters)), json=data).json()
        return result[0] if isinstance(result, list) and result else {}

    def delete(self, table: str, filters: dict) -> None:
        """Delete rows matching every equality filter."""
        if not filters:
            raise ValueError("Refusing to delete without filters")
        self._send("DELETE", self._url(table, eq_filters(filters)))

    def delete_in(self, table: str, column: str, values) -> None:
        """Delete every row whose `column` is in `values`, in one call."""
        values = list(values)
        if not values:
            return
        self._send("DELETE", self._url(table, f"{column}=in.{in_list(values)}"))


def get_store():
    """FastAPI dependency — yields a service-role store and closes it after use."""
    if not SUPABASE_URL or not SUPABASE_SERVICE_ROLE_KEY:
        raise StorageError(detail="SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")
    client = httpx.Client(timeout=HTTP_TIMEOUT)
    try:
        yield SupabaseRest(client, SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY)
    finally:
        client.close()
