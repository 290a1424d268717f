"""HTTP fetching through the persistent URL cache."""

from __future__ import annotations

import httpx
import structlog

from ..config import GlobalConfig
from ..errors import FetchError
from ..infra import CacheStore


class Fetcher:
    """Resolve URLs through the cache, hitting the network only on a miss."""

    def __init__(
        self,
        cache: CacheStore,
        global_config: GlobalConfig,
        client: httpx.Client | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.cache = cache
        self.global_config = global_config
        self.logger = logger or structlog.get_logger("scheme_sync.fetcher")
        self._owns_client = client is None
        self._client = client or httpx.Client(
            follow_redirects=True,
            timeout=global_config.request_timeout,
        )
        self._client.headers["User-Agent"] = global_config.user_agent
        self.network_requests = 0

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def fetch(self, url: str) -> bytes:
        updater, cached = self.cache.get_for_update(url)
        if cached is not None:
            return cached

        self.logger.info("fetch_request", url=url)
        self.network_requests += 1
        try:
            response = self._client.get(url)
            data = response.content
        except httpx.HTTPError as exc:
            raise FetchError(url, str(exc) or exc.__class__.__name__) from exc

        if not response.is_success:
            detail = data.decode("utf-8", errors="replace")
            self.logger.warning("fetch_failed", url=url, status=response.status_code)
            raise FetchError(url, detail)

        ttl = self.parse_max_age(response.headers.get("cache-control"))
        if ttl is None:
            ttl = self.global_config.default_ttl_seconds
        updater.write(data, ttl)
        self.logger.debug("fetch_cached", url=url, ttl=ttl, size=len(data))
        return data

    @staticmethod
    def parse_max_age(header: str | None) -> int | None:
        """Return the ``max-age`` seconds from a Cache-Control header value."""

        if not header:
            return None
        for directive in header.split(","):
            name, sep, value = directive.strip().partition("=")
            if not sep or name.strip().lower() != "max-age":
                continue
            value = value.strip().strip('"')
            if value.isascii() and value.isdigit():
                return int(value)
        return None


__all__ = ["Fetcher"]
