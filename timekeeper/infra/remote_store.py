"""
Remote store: REST adapter for the hosted data service.

The service exposes each table as a PostgREST resource
(`<url>/rest/v1/<table>`), which is what Supabase serves.

Two kinds of failure are kept apart on purpose:
- the server answered with an error status -> returned as QueryResult.error
- the request could not complete (connection, timeout, unreadable body)
  -> the exception propagates to the caller

No retries happen here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from timekeeper.infra.config import Settings

logger = logging.getLogger(__name__)

SINGLE_OBJECT = "application/vnd.pgrst.object+json"


@dataclass(frozen=True)
class RemoteError:
    """Error payload reported by the server"""
    status_code: int
    message: str
    code: Optional[str] = None

    @classmethod
    def from_response(cls, response: httpx.Response) -> "RemoteError":
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            return cls(
                status_code=response.status_code,
                message=str(payload.get("message") or payload.get("error") or response.reason_phrase),
                code=payload.get("code"),
            )
        return cls(status_code=response.status_code, message=response.text or response.reason_phrase)

    def __str__(self) -> str:
        code = f" [{self.code}]" if self.code else ""
        return f"HTTP {self.status_code}{code}: {self.message}"


@dataclass(frozen=True)
class QueryResult:
    data: Any = None
    error: Optional[RemoteError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def build_async_client(settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    """Create the one `httpx.AsyncClient` used for the remote data service.

    The access key goes in both headers the service expects.
    """
    if not settings.remote_configured:
        raise ValueError("Remote data service is not configured")

    base_url = settings.supabase_url.strip().rstrip("/") + "/rest/v1"
    key = settings.supabase_key.strip()
    return httpx.AsyncClient(
        base_url=base_url,
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        headers={
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Accept": "application/json",
        },
        transport=transport,
    )


class RemoteStore:
    """
    Table-level operations against the remote data service.

    The client is injected; this class never creates or closes it.
    """

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def _execute(self, method: str, table: str, *,
                       params: Optional[Dict[str, str]] = None,
                       json: Any = None,
                       headers: Optional[Dict[str, str]] = None) -> QueryResult:
        response = await self.client.request(
            method, f"/{table}", params=params, json=json, headers=headers
        )
        if response.is_error:
            error = RemoteError.from_response(response)
            logger.debug(f"{method} /{table} answered {error}")
            return QueryResult(error=error)
        if not response.content:
            return QueryResult(data=None)
        return QueryResult(data=response.json())

    async def select(self, table: str, *, order: str, descending: bool = False,
                     filters: Optional[Dict[str, str]] = None) -> QueryResult:
        """All rows (optionally filtered by equality), ordered by one column"""
        params = {"select": "*", "order": f"{order}.{'desc' if descending else 'asc'}"}
        for column, value in (filters or {}).items():
            params[column] = f"eq.{value}"
        result = await self._execute("GET", table, params=params)
        if result.ok and result.data is None:
            return QueryResult(data=[])
        return result

    async def select_one(self, table: str, record_id: str) -> QueryResult:
        """Exactly one row by id; zero rows is reported by the server as an error"""
        return await self._execute(
            "GET", table,
            params={"select": "*", "id": f"eq.{record_id}"},
            headers={"Accept": SINGLE_OBJECT},
        )

    async def insert(self, table: str, record: Dict[str, Any]) -> QueryResult:
        return await self._execute(
            "POST", table,
            params={"select": "*"},
            json=record,
            headers={"Accept": SINGLE_OBJECT, "Prefer": "return=representation"},
        )

    async def update(self, table: str, record_id: str, fields: Dict[str, Any]) -> QueryResult:
        return await self._execute(
            "PATCH", table,
            params={"select": "*", "id": f"eq.{record_id}"},
            json=fields,
            headers={"Accept": SINGLE_OBJECT, "Prefer": "return=representation"},
        )

    async def delete(self, table: str, record_id: str) -> QueryResult:
        return await self._execute("DELETE", table, params={"id": f"eq.{record_id}"})

    async def count_probe(self, table: str) -> QueryResult:
        """
        Minimal connectivity check: ask for the row count, fetch at most one id.

        data is the count from the Content-Range header, or None if the
        server did not send one.
        """
        response = await self.client.get(
            f"/{table}",
            params={"select": "id", "limit": "1"},
            headers={"Prefer": "count=exact"},
        )
        if response.is_error:
            return QueryResult(error=RemoteError.from_response(response))
        return QueryResult(data=_parse_total(response.headers.get("content-range")))


def _parse_total(content_range: Optional[str]) -> Optional[int]:
    # "0-0/42" or "*/0"
    if not content_range or "/" not in content_range:
        return None
    total = content_range.rsplit("/", 1)[1]
    return int(total) if total.isdigit() else None


def rows(data: Any) -> List[Dict[str, Any]]:
    """Response data of a successful query as a list of rows"""
    if isinstance(data, list):
        return data
    return [] if data is None else [data]
