from __future__ import annotations

import pytest

import crate_await.workers.registry as registry_module

REGISTRY = "https://registry.test"


@pytest.fixture(autouse=True)
def fresh_http_client():
    """Reset the shared httpx client around every test.

    respx intercepts the client created inside the test; a stale client
    must never leak into the next one.
    """
    registry_module._http_client = None
    yield
    registry_module._http_client = None


def version_payload(num: str, crate: str = "x", **overrides) -> dict:
    """A ``versions[]`` entry shaped like the crates.io API returns it."""
    entry = {
        "id": 1,
        "crate": crate,
        "crate_size": 1024,
        "num": num,
        "created_at": "2023-01-02T03:04:05.123456+00:00",
        "updated_at": "2023-01-02T03:04:05.123456+00:00",
        "dl_path": f"/api/v1/crates/{crate}/{num}/download",
        "yanked": False,
        "license": "MIT",
    }
    entry.update(overrides)
    return entry


def crate_payload(*versions: dict, name: str = "x") -> dict:
    return {
        "crate": {
            "id": name,
            "name": name,
            "created_at": "2023-01-01T00:00:00+00:00",
            "updated_at": "2023-01-02T03:04:05+00:00",
            "max_version": "1.0.0",
        },
        "versions": list(versions),
        "keywords": [],
        "categories": [],
    }
