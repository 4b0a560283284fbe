from __future__ import annotations

from threading import Lock
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlencode

import httpx

from src.core.config import get_settings


Filters = List[Tuple[str, str]]


class SupabaseClient:
    """Thin PostgREST client over a shared httpx connection pool."""

    _shared_client: httpx.Client | None = None
    _client_lock: Lock = Lock()

    def __init__(self) -> None:
        settings = get_settings()
        self.base_url = settings.supabase_url.rstrip("/") + "/rest/v1"
        self.api_key = settings.supabase_service_role_key or settings.supabase_anon_key
        if not self.api_key:
            raise ValueError("Supabase API key is required")
        self.page_size = settings.max_query_rows
        self._client = self._get_shared_client()

    @classmethod
    def _get_shared_client(cls) -> httpx.Client:
        if cls._shared_client is not None:
            return cls._shared_client
        with cls._client_lock:
            if cls._shared_client is None:
                cls._shared_client = httpx.Client(
                    timeout=30.0,
                    limits=httpx.Limits(max_keepalive_connections=10, max_connections=50),
                )
        return cls._shared_client

    def select(
        self,
        table: str,
        select: str = "*",
        filters: Optional[Filters] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        order: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        params: Filters = [("select", select)]
        if filters:
            params.extend(filters)
        if limit is not None:
            params.append(("limit", str(limit)))
        if offset is not None:
            params.append(("offset", str(offset)))
        if order:
            params.append(("order", order))

        response = self._client.get(self._url(table, params), headers=self._headers())
        response.raise_for_status()
        data = response.json()
        return data if isinstance(data, list) else []

    def select_all(
        self,
        table: str,
        select: str = "*",
        filters: Optional[Filters] = None,
        order: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Read a whole table snapshot, one page of ``max_query_rows`` at a time."""
        rows: List[Dict[str, Any]] = []
        offset = 0
        while True:
            page = self.select(
                table=table,
                select=select,
                filters=filters,
                limit=self.page_size,
                offset=offset,
                order=order,
            )
            rows.extend(page)
            if len(page) < self.page_size:
                return rows
            offset += self.page_size

    def insert(self, table: str, payload: Dict[str, Any] | List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        headers = self._headers(write=True)
        response = self._client.post(self._url(table), headers=headers, json=payload)
        response.raise_for_status()
        return self._rows(response)

    def delete(self, table: str, filters: Filters) -> List[Dict[str, Any]]:
        if not filters:
            raise ValueError("Refusing to delete without filters")
        headers = self._headers(write=True)
        response = self._client.delete(self._url(table, filters), headers=headers)
        response.raise_for_status()
        return self._rows(response)

    def _url(self, table: str, params: Optional[Filters] = None) -> str:
        url = f"{self.base_url}/{table}"
        if params:
            url = f"{url}?{urlencode(params, doseq=True)}"
        return url

    def _headers(self, write: bool = False) -> Dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
        }
        if write:
            headers["Content-Type"] = "application/json"
            headers["Prefer"] = "return=representation"
        return headers

    @staticmethod
    def _rows(response: httpx.Response) -> List[Dict[str, Any]]:
        if not response.content:
            return []
        data = response.json()
        if isinstance(data, list):
            return data
        if isinstance(data, dict):
            return [data]
        return []
