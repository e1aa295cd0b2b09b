"""Async registry client.

Responsible solely for talking to the registry's read-only HTTP API:
crate metadata lookups and download-path existence probes.

Uses httpx.AsyncClient which is meant to be long-lived and reused.
A single shared client is managed by the module; see ``get_http_client``
and ``close_http_client`` for lifecycle hooks.

Nothing here retries.  Callers that need to wait for a publish to
propagate re-poll through :mod:`crate_await.services.availability`.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from crate_await.core.config import settings
from crate_await.models.crate import CrateInfo, Version

logger = logging.getLogger(__name__)

# Module-level shared client
_http_client: Optional[httpx.AsyncClient] = None


def get_http_client() -> httpx.AsyncClient:
    """Return the shared AsyncClient.  Creates one if missing."""
    global _http_client  # noqa: PLW0603
    if _http_client is None or _http_client.is_closed:
        _http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(settings.http_timeout),
            follow_redirects=True,
            verify=settings.http_verify_ssl,
            headers={"User-Agent": settings.user_agent},
        )
    return _http_client


async def close_http_client() -> None:
    """Close the shared AsyncClient gracefully."""
    global _http_client  # noqa: PLW0603
    if _http_client is not None and not _http_client.is_closed:
        await _http_client.aclose()
        _http_client = None
        logger.debug("HTTP client closed.")


class CrateAwaitError(Exception):
    """Base class for errors raised while inspecting a registry."""


class RegistryError(CrateAwaitError):
    """Raised when the registry answers a metadata request with an unexpected status."""

    def __init__(self, crate: str, registry: str, status_code: int, body: str) -> None:
        self.crate = crate
        self.registry = registry
        self.status_code = status_code
        self.body = body
        super().__init__(
            f"Error when requesting crate '{crate}' info from {registry} "
            f"(status: {status_code}, contents: '{body}')"
        )


class ResponseFormatError(CrateAwaitError):
    """Raised when a metadata response body cannot be parsed."""


def _base_url(registry: str) -> str:
    return registry.rstrip("/")


async def get_crate_info(crate: str, registry: str) -> CrateInfo | None:
    """Fetch the metadata of *crate* from *registry*.

    Returns ``None`` when the registry does not know the crate (HTTP 404),
    which is the normal state right before a first publish propagates.

    Raises:
        RegistryError: on any status other than 200 or 404.
        ResponseFormatError: when the body is not the expected JSON document.
        httpx.RequestError: on transport failures, unchanged.
    """
    url = f"{_base_url(registry)}/api/v1/crates/{crate}"
    response = await get_http_client().get(url)
    logger.debug("GET %s -> %s", url, response.status_code)

    if response.status_code == httpx.codes.NOT_FOUND:
        return None
    if response.status_code != httpx.codes.OK:
        raise RegistryError(crate, registry, response.status_code, response.text)

    try:
        return CrateInfo.model_validate_json(response.text)
    except ValidationError as exc:
        raise ResponseFormatError(
            f"Error when parsing crate '{crate}' info from {registry}: {exc}"
        ) from exc


async def get_crate_versions(crate: str, registry: str) -> list[Version] | None:
    """Return the published versions of *crate* in registry order, or ``None``."""
    info = await get_crate_info(crate, registry)
    if info is None:
        return None
    return [version_info.to_version() for version_info in info.versions]


async def check_crate_availability(registry: str, dl_path: str) -> bool:
    """Return ``True`` iff ``HEAD {registry}{dl_path}`` answers 200."""
    url = f"{_base_url(registry)}{dl_path}"
    response = await get_http_client().head(url)
    logger.debug("HEAD %s -> %s", url, response.status_code)
    return response.status_code == httpx.codes.OK
