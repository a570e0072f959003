"""
Content store client - reads and writes documents in the hosted CMS.

Queries go through the HTTP query API; mutations through the mutate API and
require a token. Clients are built once at startup and handed to request
handlers.
"""

import hashlib
import json
import logging
from typing import Any, Optional

import httpx

from app.config.settings import ContentStoreSettings
from app.core.cache_client import MISS, CacheClient
from app.core.exceptions import ContentStoreError
from app.core.metrics import increment, record_latency

logger = logging.getLogger(__name__)


class ContentStoreClient:
    """Async client for the CMS query and mutate endpoints."""

    def __init__(
        self,
        settings: ContentStoreSettings,
        cache: Optional[CacheClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self.cache = cache
        self.timeout = settings.timeout_seconds
        self._transport = transport
        self._api_version = settings.api_version.lstrip("v")

    @property
    def token(self) -> Optional[str]:
        return self.settings.token

    def _get_headers(self) -> dict:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _query_url(self) -> str:
        return f"{self.settings.query_host}/v{self._api_version}/data/query/{self.settings.dataset}"

    def _mutate_url(self) -> str:
        return f"{self.settings.api_host}/v{self._api_version}/data/mutate/{self.settings.dataset}"

    @staticmethod
    def encode_params(query: str, params: Optional[dict] = None) -> dict:
        """Query string for the query API: each parameter is JSON under ``$name``."""
        encoded = {"query": query}
        for name, value in (params or {}).items():
            encoded[f"${name}"] = json.dumps(value)
        return encoded

    @staticmethod
    def cache_key(query: str, params: Optional[dict] = None) -> str:
        digest = hashlib.sha256(
            (query + json.dumps(params or {}, sort_keys=True)).encode("utf-8")
        ).hexdigest()
        return f"content:{digest}"

    async def fetch(
        self,
        query: str,
        params: Optional[dict] = None,
        cache_ttl: Optional[int] = None,
    ) -> Any:
        """
        Run a query and return its ``result``.

        Args:
            query: GROQ query text
            params: Query parameters, referenced as ``$name`` in the query
            cache_ttl: Cache the result in Redis for this many seconds

        Returns:
            Decoded result (document, list, scalar or None)

        Raises:
            ContentStoreError: On transport failure or non-2xx response
        """
        key = self.cache_key(query, params) if cache_ttl and self.cache else None
        if key:
            cached = await self.cache.get_json(key)
            if cached is not MISS:
                increment("content_store.cache_hit")
                return cached
            increment("content_store.cache_miss")

        with record_latency("content_store.query"):
            body = await self._request("GET", self._query_url(), params=self.encode_params(query, params))
        result = body.get("result")

        if key:
            await self.cache.set_json(key, result, ttl_seconds=cache_ttl)
        return result

    async def mutate(self, mutations: list[dict], return_ids: bool = True) -> dict:
        """
        Apply a transaction of mutations.

        Raises:
            ContentStoreError: If no token is configured or the request fails
        """
        if not self.token:
            raise ContentStoreError(
                "Content store write token is not configured",
                details={"dataset": self.settings.dataset},
                status_code=500,
            )
        return await self._request(
            "POST",
            self._mutate_url(),
            params={"returnIds": str(return_ids).lower()},
            json={"mutations": mutations},
        )

    async def _request(self, method: str, url: str, **kwargs) -> dict:
        try:
            async with httpx.AsyncClient(
                headers=self._get_headers(),
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            increment("content_store.error")
            logger.warning(f"Content store request timed out: {method} {url}")
            raise ContentStoreError(
                "Content store request timed out", details={"url": url}, status_code=504
            ) from e
        except httpx.HTTPError as e:
            increment("content_store.error")
            logger.error(f"Content store request failed: {e}")
            raise ContentStoreError(
                "Content store is unreachable", details={"url": url}, status_code=503
            ) from e

        if response.status_code >= 400:
            increment("content_store.error")
            logger.error(
                f"Content store returned {response.status_code}",
                extra={"url": url, "status_code": response.status_code},
            )
            raise ContentStoreError(
                f"Content store returned {response.status_code}",
                details={"upstream_status": response.status_code, "body": response.text[:500]},
            )

        try:
            return response.json()
        except ValueError as e:
            increment("content_store.error")
            logger.error(
                f"Content store returned a non-JSON body ({response.status_code})",
                extra={"url": url, "content_type": response.headers.get("content-type")},
            )
            raise ContentStoreError(
                "Content store returned an invalid response",
                details={"url": url, "body": response.text[:500]},
                status_code=503,
            ) from e


def create_write_client(
    settings: ContentStoreSettings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ContentStoreClient:
    """
    Build the client used for writes. Always bypasses the CDN.

    A missing token is logged rather than raised so the read-only parts of
    the app still start.
    """
    client = ContentStoreClient(settings.model_copy(update={"use_cdn": False}), transport=transport)
    if not client.token:
        logger.warning("Content store write client requires CONTENT_TOKEN environment variable")
    return client
