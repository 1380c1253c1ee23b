from __future__ import annotations

import asyncio
import logging
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from losh.errors import ResourceFetchError

logger = logging.getLogger(__name__)


class ResourceFetcher:
    """Fetches form and template resources relative to a base URL."""

    def __init__(self, base_url: str) -> None:
        self.base_url = base_url.rstrip("/")

    def url_for(self, resource_path: str) -> str:
        return f"{self.base_url}/{resource_path.lstrip('/')}"

    def _read(self, url: str) -> str:
        request = Request(url=url, method="GET")
        try:
            with urlopen(request) as response:  # nosec B310
                return response.read().decode("utf-8")
        except HTTPError as exc:
            raise ResourceFetchError(url, status=exc.code, reason=str(exc.reason)) from exc
        except URLError as exc:
            raise ResourceFetchError(url, reason=str(exc.reason)) from exc
        except OSError as exc:
            raise ResourceFetchError(url, reason=str(exc)) from exc

    async def fetch(self, resource_path: str) -> str:
        url = self.url_for(resource_path)
        logger.info("Request %s", url)
        content = await asyncio.to_thread(self._read, url)
        logger.info("Received %d bytes from %s", len(content), url)
        return content
