"""HTTP client for the upstream tracking API.

Every collection endpoint answers a GET with a JSON array of records. No
retries here: a single failure aborts the request that needed the data.
"""

import logging

import httpx

from errors import UpstreamUnavailable

logger = logging.getLogger(__name__)


class ReferenceFetcher:
    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 5,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    async def fetch(self, path: str) -> list[dict]:
        """GET one collection and return the decoded JSON array."""
        url = self.url_for(path)
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self._transport, follow_redirects=True
            ) as client:
                resp = await client.get(url)
                resp.raise_for_status()
                data = resp.json()
        except httpx.TimeoutException as e:
            logger.error("Upstream timeout after %ss: %s", self.timeout_seconds, url)
            raise UpstreamUnavailable(url, f"timeout: {e}") from e
        except httpx.HTTPError as e:
            logger.error("Upstream request failed for %s: %s", url, e)
            raise UpstreamUnavailable(url, str(e)) from e
        except ValueError as e:
            logger.error("Upstream sent malformed JSON from %s: %s", url, e)
            raise UpstreamUnavailable(url, f"malformed JSON: {e}") from e

        if not isinstance(data, list):
            logger.error("Upstream sent %s instead of a collection from %s", type(data).__name__, url)
            raise UpstreamUnavailable(url, f"expected a JSON array, got {type(data).__name__}")

        logger.debug("Fetched %d records from %s", len(data), url)
        return data
