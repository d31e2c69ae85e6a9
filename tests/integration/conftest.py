"""Integration test fixtures — a real MeiliSearch server speaking the update-queue API.

Expects a server on localhost:7700 started with the master key
``test-master-key``, e.g.::

    docker run -p 7700:7700 -e MEILI_MASTER_KEY=test-master-key getmeili/meilisearch:v0.20.0
"""

from __future__ import annotations

import time
from typing import Any

import httpx
import pytest

MEILI_HOST = "http://localhost:7700"
MEILI_KEY = "test-master-key"

MOCK_DOCUMENTS: list[dict[str, Any]] = [
    {"id": "doc-001", "title": "Advances in Solar Nowcasting Using Deep Learning", "author": "Alice Johnson"},
    {"id": "doc-002", "title": "Transformer Models for Natural Language Understanding", "author": "Bob Smith"},
    {"id": "doc-003", "title": "Federated Learning for Privacy-Preserving Medical Imaging", "author": "Carol Zhang"},
    {"id": "doc-004", "title": "Reinforcement Learning for Robotic Manipulation", "author": "David Lee"},
]


def _wait_for_service(url: str, timeout: float = 30.0) -> bool:
    """Poll ``url`` until it answers or ``timeout`` elapses."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        try:
            resp = httpx.get(url, timeout=2.0)
            if resp.status_code < 500:
                return True
        except httpx.HTTPError:
            pass
        time.sleep(1.0)
    return False


def _speaks_update_api(host: str) -> bool:
    """Servers from v0.21 on replaced ``/indexes/{uid}/updates`` with ``/tasks``."""
    resp = httpx.get(f"{host}/version", headers={"X-Meili-API-Key": MEILI_KEY}, timeout=5.0)
    if resp.status_code != 200:
        return False
    major, minor, *_ = (int(part) for part in resp.json().get("pkgVersion", "0.0.0").split(".")[:2])
    return (major, minor) < (0, 21)


@pytest.fixture(scope="session")
def meilisearch_ready() -> str:
    """Ensure a compatible MeiliSearch server is running."""
    if not _wait_for_service(f"{MEILI_HOST}/health", timeout=5.0):
        pytest.skip(f"MeiliSearch not available at {MEILI_HOST}")
    if not _speaks_update_api(MEILI_HOST):
        pytest.skip("MeiliSearch server does not expose the update-queue API")
    return MEILI_HOST


@pytest.fixture(scope="session")
def meili_key() -> str:
    return MEILI_KEY


@pytest.fixture
def mock_documents() -> list[dict[str, Any]]:
    return [dict(doc) for doc in MOCK_DOCUMENTS]
