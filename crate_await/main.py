"""Command line entry point: block until a crate version has propagated.

Usage::

    crate-await my-crate 1.2.3 --registry https://crates.io --timeout 300

Exit codes: 0 when the version is downloadable, 1 on timeout, 2 when the
registry cannot be queried (unexpected status, malformed response or
transport failure).
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

import httpx

from crate_await.core.config import settings
from crate_await.services.availability import (
    AvailabilityTimeoutError,
    await_crate_version,
)
from crate_await.workers.registry import CrateAwaitError, close_http_client

logger = logging.getLogger("crate_await")


def _configure_logging(level_name: str) -> None:
    """Configure the ``crate_await`` logger namespace.

    Configuring the namespace directly, with ``propagate = False``, keeps
    the output on stderr even when an embedding tool has already set up
    the root logger.
    """
    level = getattr(logging, level_name.upper(), logging.INFO)
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s")
    )
    app_log = logging.getLogger("crate_await")
    app_log.setLevel(level)
    if not app_log.handlers:
        app_log.addHandler(handler)
    app_log.propagate = False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="crate-await",
        description="Wait until a published crate version is listed and downloadable",
    )
    parser.add_argument("crate", help="Crate name (e.g., serde)")
    parser.add_argument("version", help="Version to wait for (e.g., 1.0.0)")
    parser.add_argument(
        "--registry",
        default=settings.registry_url,
        help=f"Registry base URL (default: {settings.registry_url})",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=settings.await_timeout,
        help=f"Maximum seconds to wait (default: {settings.await_timeout:g})",
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help=f"Logging level (default: {settings.log_level})",
    )
    return parser


async def run(crate: str, version: str, registry: str, timeout: float) -> int:
    """Await the version and map the outcome to an exit code."""
    try:
        await await_crate_version(crate, version, registry, timeout)
    except AvailabilityTimeoutError as exc:
        logger.error("%s", exc)
        return 1
    except (CrateAwaitError, httpx.HTTPError) as exc:
        logger.error(
            "Failed to query %s for crate '%s' version '%s': %s",
            registry, crate, version, exc,
        )
        return 2
    finally:
        await close_http_client()
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.log_level)
    return asyncio.run(run(args.crate, args.version, args.registry, args.timeout))


if __name__ == "__main__":
    sys.exit(main())
