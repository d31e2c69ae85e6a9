"""Tests for the update status decoder and poller."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock

import httpx
import pytest

from meilikit.client.client import AsyncMeiliClient
from meilikit.core.progress import TaskStatusPoller, decode_status
from meilikit.exceptions import ApiError, IndexNotFoundError, InvalidResponseError
from meilikit.models.settings import CLEARED, UNCHANGED, SetTo
from meilikit.models.status import (
    DocumentsDeletion,
    EnqueuedStatus,
    ProcessedStatus,
    SettingsUpdate,
    TaskRef,
)

# ── Decoding ─────────────────────────────────────────────────────────────────


class TestDecodeStatus:
    def test_enqueued_example(self, enqueued_payload: dict[str, Any]) -> None:
        status = decode_status(enqueued_payload)
        assert status == EnqueuedStatus(
            update_id=42,
            update_type=DocumentsDeletion(count=3),
            enqueued_at="2021-01-01T00:00:00Z",
        )

    def test_processed_example(self, processed_payload: dict[str, Any]) -> None:
        status = decode_status(processed_payload)
        assert isinstance(status, ProcessedStatus)
        assert status.update_id == 42
        assert status.update_type == DocumentsDeletion(count=3)
        assert status.duration == 1.5
        assert status.enqueued_at == "2021-01-01T00:00:00Z"
        assert status.processed_at == "2021-01-01T00:00:02Z"

    def test_processed_wins_over_enqueued(self, processed_payload: dict[str, Any]) -> None:
        # Both shapes validate a processed payload; the terminal one must win.
        assert EnqueuedStatus.model_validate(processed_payload)
        assert isinstance(decode_status(processed_payload), ProcessedStatus)

    def test_processed_with_error(self, processed_payload: dict[str, Any]) -> None:
        status = decode_status({**processed_payload, "error": "invalid document"})
        assert isinstance(status, ProcessedStatus)
        assert status.failed

    def test_partial_terminal_fields_fall_back_to_enqueued(self, enqueued_payload: dict[str, Any]) -> None:
        status = decode_status({**enqueued_payload, "duration": 0.5})
        assert isinstance(status, EnqueuedStatus)

    def test_scalars_preserved_exactly(self, processed_payload: dict[str, Any]) -> None:
        payload = {
            **processed_payload,
            "duration": 0.1 + 0.2,
            "enqueuedAt": "2021-01-01T00:00:00.123456789+02:00",
            "processedAt": "not even a date",
        }
        status = decode_status(payload)
        assert isinstance(status, ProcessedStatus)
        assert status.duration == 0.1 + 0.2
        assert status.enqueued_at == "2021-01-01T00:00:00.123456789+02:00"
        assert status.processed_at == "not even a date"

    def test_settings_update(self, settings_update_payload: dict[str, Any]) -> None:
        status = decode_status(settings_update_payload)
        assert isinstance(status, ProcessedStatus)
        assert isinstance(status.update_type, SettingsUpdate)
        delta = status.update_type.settings
        assert delta.distinct_attribute == CLEARED
        assert delta.stop_words == SetTo({"the", "a"})
        assert delta.changed_fields() == [
            "ranking_rules",
            "distinct_attribute",
            "stop_words",
            "synonyms",
            "accept_new_fields",
        ]

    def test_tagged_settings_update(self, tagged_settings_update_payload: dict[str, Any]) -> None:
        status = decode_status(tagged_settings_update_payload)
        assert isinstance(status, ProcessedStatus)
        assert isinstance(status.update_type, SettingsUpdate)
        delta = status.update_type.settings
        assert delta.ranking_rules == UNCHANGED
        assert delta.distinct_attribute == CLEARED
        assert delta.identifier == UNCHANGED
        assert delta.searchable_attributes == SetTo(["title", "overview"])
        assert delta.displayed_attributes == UNCHANGED
        assert delta.stop_words == SetTo({"the"})
        assert delta.synonyms == SetTo({"wolverine": ["logan"]})
        assert delta.accept_new_fields == SetTo(False)

    def test_status_with_settings_is_hashable(self, tagged_settings_update_payload: dict[str, Any]) -> None:
        first = decode_status(tagged_settings_update_payload)
        second = decode_status(tagged_settings_update_payload)
        assert hash(first) == hash(second)
        assert len({first, second}) == 1

    def test_string_update_id_rejected(self, processed_payload: dict[str, Any]) -> None:
        with pytest.raises(InvalidResponseError):
            decode_status({**processed_payload, "updateId": "42"})

    def test_string_document_count_rejected(self, enqueued_payload: dict[str, Any]) -> None:
        with pytest.raises(InvalidResponseError):
            decode_status({**enqueued_payload, "type": {"name": "DocumentsDeletion", "number": "3"}})

    def test_string_duration_falls_back_to_enqueued(self, processed_payload: dict[str, Any]) -> None:
        status = decode_status({**processed_payload, "duration": "1.5"})
        assert isinstance(status, EnqueuedStatus)

    def test_integer_duration_widens(self, processed_payload: dict[str, Any]) -> None:
        status = decode_status({**processed_payload, "duration": 2})
        assert isinstance(status, ProcessedStatus)
        assert status.duration == 2.0
        assert isinstance(status.duration, float)

    def test_missing_update_id(self, processed_payload: dict[str, Any]) -> None:
        payload = dict(processed_payload)
        del payload["updateId"]
        with pytest.raises(InvalidResponseError, match="Invalid server response"):
            decode_status(payload)

    def test_unknown_operation(self, enqueued_payload: dict[str, Any]) -> None:
        with pytest.raises(InvalidResponseError):
            decode_status({**enqueued_payload, "type": {"name": "Dump"}})

    @pytest.mark.parametrize("payload", [None, [], "enqueued", 42])
    def test_non_object(self, payload: Any) -> None:
        with pytest.raises(InvalidResponseError):
            decode_status(payload)


# ── Poller ───────────────────────────────────────────────────────────────────


class TestTaskStatusPoller:
    async def test_check_issues_single_get(self, server, enqueued_payload: dict[str, Any]) -> None:
        server.add("GET", "/indexes/movies/updates/42", 200, enqueued_payload)

        async with AsyncMeiliClient("http://testserver", "key", transport=server.transport) as client:
            status = await TaskStatusPoller(client).check(TaskRef(task_id=42, index_uid="movies"))

        assert isinstance(status, EnqueuedStatus)
        assert len(server.requests) == 1
        request = server.requests[0]
        assert request.method == "GET"
        assert request.url.path == "/indexes/movies/updates/42"
        assert request.headers["X-Meili-API-Key"] == "key"

    async def test_check_is_repeatable(self, server, processed_payload: dict[str, Any]) -> None:
        server.add("GET", "/indexes/movies/updates/42", 200, processed_payload)
        task = TaskRef(task_id=42, index_uid="movies")

        async with AsyncMeiliClient("http://testserver", transport=server.transport) as client:
            poller = TaskStatusPoller(client)
            first = await poller.check(task)
            second = await poller.check(task)

        assert first == second
        assert len(server.requests) == 2

    async def test_check_reflects_server_transition(
        self,
        processed_payload: dict[str, Any],
        enqueued_payload: dict[str, Any],
    ) -> None:
        client = AsyncMock(spec=AsyncMeiliClient)
        client.request.side_effect = [enqueued_payload, processed_payload]
        poller = TaskStatusPoller(client)
        task = TaskRef(task_id=42, index_uid="movies")

        assert not (await poller.check(task)).is_terminal
        assert (await poller.check(task)).is_terminal
        client.request.assert_awaited_with("GET", "/indexes/movies/updates/42", expected_status=200)

    async def test_check_unrecognized_payload(self, server) -> None:
        server.add("GET", "/indexes/movies/updates/1", 200, {"status": "processing"})

        async with AsyncMeiliClient("http://testserver", transport=server.transport) as client:
            with pytest.raises(InvalidResponseError):
                await client.get_status(TaskRef(task_id=1, index_uid="movies"))

    async def test_check_unexpected_status(self, server) -> None:
        server.add(
            "GET",
            "/indexes/movies/updates/1",
            404,
            {"message": "Index movies not found", "errorCode": "index_not_found"},
        )

        async with AsyncMeiliClient("http://testserver", transport=server.transport) as client:
            with pytest.raises(IndexNotFoundError) as exc_info:
                await client.get_update_status("movies", 1)

        assert exc_info.value.status_code == 404
        assert isinstance(exc_info.value, ApiError)

    async def test_transport_errors_propagate(self) -> None:
        def _refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        async with AsyncMeiliClient("http://testserver", transport=httpx.MockTransport(_refuse)) as client:
            with pytest.raises(httpx.ConnectError):
                await client.get_update_status("movies", 1)

    async def test_check_all(self, server, enqueued_payload: dict[str, Any], processed_payload: dict[str, Any]) -> None:
        server.add("GET", "/indexes/movies/updates", 200, [processed_payload, enqueued_payload])

        async with AsyncMeiliClient("http://testserver", transport=server.transport) as client:
            statuses = await client.get_all_update_status("movies")

        assert [type(s) for s in statuses] == [ProcessedStatus, EnqueuedStatus]

    async def test_check_all_requires_list(self, server) -> None:
        server.add("GET", "/indexes/movies/updates", 200, {"updates": []})

        async with AsyncMeiliClient("http://testserver", transport=server.transport) as client:
            with pytest.raises(InvalidResponseError):
                await client.get_all_update_status("movies")
