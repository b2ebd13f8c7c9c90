"""Async HTTP client for the catalog REST API."""

from __future__ import annotations

import json
from typing import Any, Sequence

import httpx
import structlog

from ..config import RemoteConfig
from ..errors import NotFoundError, TransportError

COLLECTION_CONTENT_TYPE = "application/vnd.akeneo.collection+json"


class CatalogClient:
    """List collections and send batched updates.

    Authentication beyond a static bearer token, paging and retries are out of
    scope; ``list`` returns the first page of ``page_limit`` items.
    """

    def __init__(
        self,
        config: RemoteConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config
        self.logger = logger or structlog.get_logger("catalog_mirror.client")
        headers = {"Accept": "application/json"}
        if config.token:
            headers["Authorization"] = f"Bearer {config.token}"
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            headers=headers,
            timeout=config.timeout,
            verify=config.verify_ssl,
            follow_redirects=True,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "CatalogClient":
        return self

    async def __aexit__(self, *_exc_info) -> None:
        await self.close()

    async def list(self, path: str) -> Any:
        """GET a collection; HAL envelopes are unwrapped to their items."""

        response = await self._send("GET", path, params={"limit": self.config.page_limit})
        payload = self._decode_json(response)
        if isinstance(payload, dict) and "_embedded" in payload:
            embedded = payload.get("_embedded") or {}
            return embedded.get("items")
        return payload

    async def batch_update(self, path: str, records: Sequence[dict]) -> list[dict]:
        """PATCH ``records`` as one line-delimited collection body.

        Returns the per-line status objects reported by the remote.
        """

        body = "\n".join(json.dumps(record, ensure_ascii=False) for record in records)
        response = await self._send(
            "PATCH",
            path,
            content=body.encode("utf-8"),
            headers={"Content-Type": COLLECTION_CONTENT_TYPE},
        )
        statuses: list[dict] = []
        for line in response.text.splitlines():
            if not line.strip():
                continue
            try:
                status = json.loads(line)
            except json.JSONDecodeError as exc:
                raise TransportError(
                    f"Undecodable update status from {path}: {exc.msg}",
                    url=str(response.url),
                    status_code=response.status_code,
                ) from exc
            if isinstance(status, dict):
                statuses.append(status)
        return statuses

    # ------------------------------------------------------------------
    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            self.logger.warning("request_error", method=method, path=path, error=str(exc))
            raise TransportError(f"{method} {path} failed: {exc}", url=path) from exc
        self.logger.debug(
            "request_done", method=method, path=path, status_code=response.status_code
        )
        if response.status_code == 404:
            raise NotFoundError(
                f"{method} {path} returned 404", url=str(response.url), status_code=404
            )
        if response.status_code >= 400:
            raise TransportError(
                f"{method} {path} returned {response.status_code}: {self._error_message(response)}",
                url=str(response.url),
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _decode_json(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise TransportError(
                f"Invalid JSON from {response.url}",
                url=str(response.url),
                status_code=response.status_code,
            ) from exc

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            return response.text[:200]
        if isinstance(payload, dict) and payload.get("message"):
            return str(payload["message"])
        return response.text[:200]


__all__ = ["COLLECTION_CONTENT_TYPE", "CatalogClient"]
