"""Shared test fixtures and configuration."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

Route = tuple[str, str]
"""``(METHOD, path)`` key of a fake server route."""


class FakeServer:
    """Minimal in-process MeiliSearch stand-in for ``httpx.MockTransport``.

    Routes map ``(method, path)`` to ``(status, body)``; every request is
    recorded in ``requests``.
    """

    def __init__(self) -> None:
        self.routes: dict[Route, tuple[int, Any]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, status: int = 200, body: Any = None) -> None:
        self.routes[(method.upper(), path)] = (status, body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        if key not in self.routes:
            return httpx.Response(
                404,
                json={"message": f"no route for {key}", "errorCode": "not_found"},
            )
        status, body = self.routes[key]
        if body is None:
            return httpx.Response(status)
        if isinstance(body, (str, bytes)):
            return httpx.Response(status, content=body)
        return httpx.Response(status, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def last_json(self) -> Any:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def enqueued_payload() -> dict[str, Any]:
    return {
        "updateId": 42,
        "type": {"name": "DocumentsDeletion", "number": 3},
        "enqueuedAt": "2021-01-01T00:00:00Z",
    }


@pytest.fixture
def processed_payload(enqueued_payload: dict[str, Any]) -> dict[str, Any]:
    return {
        **enqueued_payload,
        "duration": 1.5,
        "processedAt": "2021-01-01T00:00:02Z",
    }


@pytest.fixture
def settings_update_payload() -> dict[str, Any]:
    """Processed settings update as reported by the server."""
    return {
        "updateId": 7,
        "type": {
            "name": "Settings",
            "settings": {
                "rankingRules": ["typo", "words", "desc(release_date)"],
                "distinctAttribute": None,
                "stopWords": ["the", "a"],
                "synonyms": {"wolverine": ["logan", "xmen"]},
                "acceptNewFields": False,
            },
        },
        "duration": 0.012,
        "enqueuedAt": "2021-03-04T10:00:00.000000Z",
        "processedAt": "2021-03-04T10:00:00.120000Z",
    }


@pytest.fixture
def tagged_settings_update_payload() -> dict[str, Any]:
    """Processed settings update in the tagged form a v0.20 server reports."""
    return {
        "updateId": 8,
        "type": {
            "name": "Settings",
            "settings": {
                "rankingRules": "Nothing",
                "distinctAttribute": "Clear",
                "identifier": "Nothing",
                "searchableAttributes": {"Update": ["title", "overview"]},
                "displayedAttributes": "Nothing",
                "stopWords": {"Update": ["the"]},
                "synonyms": {"Update": {"wolverine": ["logan"]}},
                "acceptNewFields": {"Update": False},
            },
        },
        "duration": 0.004,
        "enqueuedAt": "2021-03-04T10:00:01.000000Z",
        "processedAt": "2021-03-04T10:00:01.050000Z",
    }


@pytest.fixture
def make_payload() -> Callable[..., dict[str, Any]]:
    """Build an enqueued status payload for an arbitrary update id."""

    def _make(update_id: int, name: str = "ClearAll", **extra: Any) -> dict[str, Any]:
        return {
            "updateId": update_id,
            "type": {"name": name},
            "enqueuedAt": "2021-01-01T00:00:00Z",
            **extra,
        }

    return _make
