"""Wait for a published crate version to propagate through a registry.

Propagation happens in two steps, so the wait has two phases that share
one deadline:

1. *metadata*: the version shows up in ``/api/v1/crates/{name}``.  The
   first check only happens after one poll interval since metadata is
   never visible immediately after a publish.
2. *download*: ``HEAD`` on the version's ``dl_path`` answers 200.  This
   is checked right away and then on a shorter interval.

Both loops run on tenacity and only retry on the "not yet" result.
Anything raised by the registry client aborts the wait as-is.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Optional

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_result,
    wait_fixed,
    wait_none,
)

from crate_await.core.config import settings
from crate_await.models.crate import Version
from crate_await.workers.registry import (
    CrateAwaitError,
    check_crate_availability,
    get_crate_versions,
)

logger = logging.getLogger(__name__)

METADATA_PHASE = "metadata"
DOWNLOAD_PHASE = "download"

_PHASE_GOALS = {
    METADATA_PHASE: "published",
    DOWNLOAD_PHASE: "downloadable",
}


class AvailabilityTimeoutError(CrateAwaitError, TimeoutError):
    """Raised when a crate version is not available before the deadline."""

    def __init__(
        self, crate: str, version: str, registry: str, timeout: float, phase: str
    ) -> None:
        self.crate = crate
        self.version = version
        self.registry = registry
        self.timeout = timeout
        self.phase = phase
        super().__init__(
            f"Timeout '{timeout}s' reached when awaiting crate '{crate}' "
            f"version '{version}' to be {_PHASE_GOALS[phase]} on {registry}"
        )


def _deadline(started: float, timeout: float) -> Callable[[RetryCallState], bool]:
    """Build the stop condition shared by both phases.

    The clock is read per attempt, so the second phase keeps counting
    from the original start instead of getting a fresh budget.
    """

    def stop(retry_state: RetryCallState) -> bool:
        return time.monotonic() - started > timeout

    return stop


def _find_dl_path(versions: Optional[list[Version]], version: str) -> Optional[str]:
    """Return the download path of the first entry matching *version*."""
    for candidate in versions or ():
        if candidate.version == version:
            return candidate.dl_path
    return None


async def await_crate_version(
    crate: str,
    version: str,
    registry: str,
    timeout: Optional[float] = None,
) -> None:
    """Block until *crate* *version* is listed and downloadable on *registry*.

    ``timeout`` is in seconds and covers both phases together; it defaults
    to ``settings.await_timeout``.

    Raises:
        AvailabilityTimeoutError: the deadline passed; ``phase`` tells
            which of the two checks never succeeded.
        RegistryError, ResponseFormatError, httpx.RequestError: propagated
            from the registry client on the first occurrence.
    """
    if timeout is None:
        timeout = settings.await_timeout
    started = time.monotonic()
    stop = _deadline(started, timeout)

    logger.info(
        "Awaiting crate '%s' version '%s' on %s (timeout: %ss)",
        crate, version, registry, timeout,
    )

    async def poll_metadata() -> Optional[str]:
        await asyncio.sleep(settings.metadata_poll_interval)
        dl_path = _find_dl_path(await get_crate_versions(crate, registry), version)
        if dl_path is None:
            logger.debug("Crate '%s' version '%s' not listed yet", crate, version)
        return dl_path

    try:
        dl_path = await AsyncRetrying(
            retry=retry_if_result(lambda found: found is None),
            stop=stop,
            wait=wait_none(),
            sleep=asyncio.sleep,
        )(poll_metadata)
    except RetryError as exc:
        raise AvailabilityTimeoutError(
            crate, version, registry, timeout, METADATA_PHASE
        ) from exc

    logger.info(
        "Crate '%s' version '%s' is published, waiting for %s to be downloadable",
        crate, version, dl_path,
    )

    async def poll_download() -> bool:
        available = await check_crate_availability(registry, dl_path)
        if not available:
            logger.debug("Download path %s not available yet", dl_path)
        return available

    try:
        await AsyncRetrying(
            retry=retry_if_result(lambda available: not available),
            stop=stop,
            wait=wait_fixed(settings.download_poll_interval),
            sleep=asyncio.sleep,
        )(poll_download)
    except RetryError as exc:
        raise AvailabilityTimeoutError(
            crate, version, registry, timeout, DOWNLOAD_PHASE
        ) from exc

    logger.info(
        "Crate '%s' version '%s' is available after %.1fs",
        crate, version, time.monotonic() - started,
    )
