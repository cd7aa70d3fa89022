"""Search-store access: the consumed capability set and its Elasticsearch REST adapter."""

from __future__ import annotations

from typing import Any, Mapping, Protocol
from urllib.parse import quote

import httpx
import structlog

from ..config import StoreConfig
from ..exceptions import StoreError
from .models import SearchPage, SourceHit

MATCH_ALL: dict[str, Any] = {"match_all": {}}


class StoreClient(Protocol):
    """Operations the sync job needs from a document store."""

    def search(self, index: str, query: Mapping[str, Any], size: int, scroll: str) -> SearchPage:
        ...

    def scroll_next(self, cursor: str, scroll: str) -> SearchPage:
        ...

    def release_cursor(self, cursor: str) -> None:
        ...

    def upsert(self, index: str, doc_id: str, document: Mapping[str, Any]) -> None:
        ...

    def close(self) -> None:
        ...


class ElasticsearchStore:
    """Talk to an Elasticsearch cluster over its REST API with httpx."""

    def __init__(
        self,
        base_url: str,
        *,
        client: httpx.Client | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.logger = logger or structlog.get_logger("customer_sync.store")
        self._client = client or httpx.Client(base_url=self.base_url)

    @classmethod
    def from_config(cls, config: StoreConfig) -> "ElasticsearchStore":
        headers = {"Accept": "application/json"}
        if config.api_key:
            headers["Authorization"] = f"ApiKey {config.api_key}"
        auth = (config.username, config.password) if config.username is not None else None
        verify: bool | str = config.verify_certs
        if config.verify_certs and config.ca_certs is not None:
            verify = str(config.ca_certs)
        client = httpx.Client(
            base_url=config.url,
            auth=auth,
            headers=headers,
            verify=verify,
            timeout=httpx.Timeout(config.read_timeout, connect=config.connect_timeout),
            limits=httpx.Limits(
                max_connections=config.max_connections,
                max_keepalive_connections=config.max_connections,
                keepalive_expiry=config.keepalive_expiry,
            ),
        )
        return cls(config.url, client=client)

    # ------------------------------------------------------------------
    def search(self, index: str, query: Mapping[str, Any], size: int, scroll: str) -> SearchPage:
        payload = self._request(
            "search",
            "POST",
            f"/{quote(index, safe='')}/_search",
            params={"scroll": scroll},
            json={"size": size, "query": dict(query)},
        )
        return _parse_page(payload)

    def scroll_next(self, cursor: str, scroll: str) -> SearchPage:
        payload = self._request(
            "scroll",
            "POST",
            "/_search/scroll",
            json={"scroll": scroll, "scroll_id": cursor},
        )
        return _parse_page(payload)

    def release_cursor(self, cursor: str) -> None:
        # 404 means the context already expired server side
        self._request(
            "clear_scroll",
            "DELETE",
            "/_search/scroll",
            json={"scroll_id": [cursor]},
            accept_status=(404,),
        )

    def upsert(self, index: str, doc_id: str, document: Mapping[str, Any]) -> None:
        self._request(
            "index",
            "PUT",
            f"/{quote(index, safe='')}/_doc/{quote(doc_id, safe='')}",
            json=dict(document),
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ElasticsearchStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    def _request(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        accept_status: tuple[int, ...] = (),
        **kwargs: Any,
    ) -> dict[str, Any]:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise StoreError(operation, f"{type(exc).__name__}: {exc}") from exc
        self.logger.debug("store_request", operation=operation, status=response.status_code)
        if response.status_code in accept_status:
            return {}
        if response.status_code >= 400:
            raise StoreError(operation, _error_reason(response), status_code=response.status_code)
        if not response.content:
            return {}
        try:
            payload = response.json()
        except ValueError as exc:
            raise StoreError(operation, "response body is not JSON", response.status_code) from exc
        if not isinstance(payload, dict):
            raise StoreError(operation, "response body is not a JSON object", response.status_code)
        return payload


def _parse_page(payload: Mapping[str, Any]) -> SearchPage:
    cursor = payload.get("_scroll_id")
    hits_section = payload.get("hits") or {}
    raw_hits = hits_section.get("hits") if isinstance(hits_section, dict) else None
    if raw_hits is None:
        return SearchPage(cursor=cursor, hits=None)
    hits = [
        SourceHit(doc_id=raw.get("_id"), source=raw.get("_source"))
        for raw in raw_hits
        if isinstance(raw, dict)
    ]
    return SearchPage(cursor=cursor, hits=hits)


def _error_reason(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        return str(error.get("reason") or error.get("type") or error)
    if error:
        return str(error)
    return response.reason_phrase


__all__ = ["ElasticsearchStore", "MATCH_ALL", "StoreClient"]
