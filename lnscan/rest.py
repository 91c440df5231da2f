import json
from typing import Any, Optional, Protocol

import httpx
from loguru import logger

from lnscan.exceptions import ServiceConnectivityError, ServiceConnectivityErrorKind
from lnscan.settings import settings


class RestClient(Protocol):
    async def get(self, url: str) -> tuple[str, int]:
        """Return the response body and the http status code."""
        ...


class HttpxRestClient:
    """RestClient backed by one shared httpx.AsyncClient."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self.headers = {"User-Agent": settings.user_agent}
        self.client = client or httpx.AsyncClient(
            headers=self.headers,
            timeout=settings.http_timeout,
            follow_redirects=settings.http_follow_redirects,
        )

    async def get(self, url: str) -> tuple[str, int]:
        logger.debug(f"GET {url}")
        try:
            r = await self.client.get(url)
        except httpx.TimeoutException as exc:
            raise ServiceConnectivityError(
                ServiceConnectivityErrorKind.timeout, str(exc)
            ) from exc
        except httpx.ConnectError as exc:
            raise ServiceConnectivityError(
                ServiceConnectivityErrorKind.connect, str(exc)
            ) from exc
        except httpx.TooManyRedirects as exc:
            raise ServiceConnectivityError(
                ServiceConnectivityErrorKind.redirect, str(exc)
            ) from exc
        except (httpx.DecodingError, httpx.ReadError) as exc:
            raise ServiceConnectivityError(
                ServiceConnectivityErrorKind.body, str(exc)
            ) from exc
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as exc:
            raise ServiceConnectivityError(
                ServiceConnectivityErrorKind.builder, str(exc)
            ) from exc
        except httpx.RequestError as exc:
            raise ServiceConnectivityError(
                ServiceConnectivityErrorKind.request, str(exc)
            ) from exc
        try:
            body = r.text
        except UnicodeDecodeError as exc:
            raise ServiceConnectivityError(
                ServiceConnectivityErrorKind.decode, str(exc)
            ) from exc
        return body, r.status_code

    async def aclose(self):
        try:
            await self.client.aclose()
        except RuntimeError as e:
            logger.warning(f"Error closing http client: {e}")

    async def __aenter__(self) -> "HttpxRestClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


def parse_json(body: str, status: int) -> Any:
    """
    Parse a response body, reporting a failure as a status error when the
    server did not answer with a success code.
    """
    try:
        return json.loads(body)
    except json.JSONDecodeError as exc:
        kind = (
            ServiceConnectivityErrorKind.json
            if 200 <= status < 300
            else ServiceConnectivityErrorKind.status
        )
        raise ServiceConnectivityError(kind, f"status {status}: {exc}") from exc
