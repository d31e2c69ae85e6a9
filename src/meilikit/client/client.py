"""meilikit — Async and sync clients for the MeiliSearch update-queue API.

Usage::

    # Async
    async with AsyncMeiliClient("http://localhost:7700", "master-key") as client:
        task = await client.add_documents("movies", [{"id": 1, "title": "Carol"}])
        status = await client.get_status(task)

    # Sync (wraps async client internally)
    client = MeiliClient("http://localhost:7700", "master-key")
    task = client.delete_all_documents("movies")
    status = client.get_status(task)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine, Sequence
from typing import Any, TypeVar, cast

import httpx

from meilikit.core.progress import TaskStatusPoller
from meilikit.exceptions import (
    ApiError,
    DocumentNotFoundError,
    IndexAlreadyExistsError,
    IndexNotFoundError,
    InvalidResponseError,
)
from meilikit.models.index import IndexInfo
from meilikit.models.search import SearchQuery, SearchResults
from meilikit.models.settings import IndexSettings, SettingsDelta
from meilikit.models.status import TaskRef, TaskStatus

_T = TypeVar("_T")

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-Meili-API-Key"

Document = dict[str, Any]
"""A single document (arbitrary JSON object)."""

_ERROR_CODES: dict[str, type[ApiError]] = {
    "index_not_found": IndexNotFoundError,
    "index_already_exists": IndexAlreadyExistsError,
    "document_not_found": DocumentNotFoundError,
}


def _error_from_response(resp: httpx.Response) -> ApiError:
    """Build the ``ApiError`` matching an unexpected response."""
    message: str | None = None
    error_code: str | None = None
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = body.get("message")
        error_code = body.get("errorCode")

    error_cls = _ERROR_CODES.get(error_code or "", ApiError)
    return error_cls(
        message or resp.text or f"HTTP {resp.status_code}",
        status_code=resp.status_code,
        error_code=error_code,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Async client
# ═══════════════════════════════════════════════════════════════════════════════


class AsyncMeiliClient:
    """Async Python client for a MeiliSearch server.

    Args:
        host: Server URL, e.g. ``"http://localhost:7700"``.
        api_key: API key sent as the ``X-Meili-API-Key`` header.
        timeout: Request timeout in seconds.
        **httpx_kwargs: Additional keyword arguments passed to ``httpx.AsyncClient``.

    Example::

        async with AsyncMeiliClient("http://localhost:7700") as client:
            index = await client.get_or_create_index("movies")
            task = await client.add_documents(index.uid, docs)
    """

    def __init__(
        self,
        host: str = "http://localhost:7700",
        api_key: str | None = None,
        *,
        timeout: float = 30.0,
        **httpx_kwargs: Any,
    ) -> None:
        self.host = host.rstrip("/")
        headers: dict[str, str] = dict(httpx_kwargs.pop("headers", None) or {})
        if api_key:
            headers[API_KEY_HEADER] = api_key

        self._client = httpx.AsyncClient(
            base_url=self.host,
            timeout=httpx.Timeout(timeout),
            headers=headers,
            **httpx_kwargs,
        )
        self._poller = TaskStatusPoller(self)

    async def __aenter__(self) -> AsyncMeiliClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    # ── Low level ──

    async def request(
        self,
        method: str,
        path: str,
        *,
        expected_status: int = 200,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Send a request and decode its JSON body.

        Args:
            method: HTTP method.
            path: Path relative to the host.
            expected_status: Status code the call must answer with.
            json: Optional JSON body.
            params: Optional query parameters.

        Returns:
            Decoded JSON body, or ``None`` for an empty body.

        Raises:
            ApiError: If the response status differs from ``expected_status``.
            InvalidResponseError: If the body is not valid JSON.
        """
        logger.debug("%s %s", method, path)
        resp = await self._client.request(method, path, json=json, params=params)
        if resp.status_code != expected_status:
            raise _error_from_response(resp)
        if resp.status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise InvalidResponseError(f"Invalid server response: {method} {path} returned non-JSON body") from e

    # ── Server ──

    async def health(self) -> bool:
        """Return whether the server reports itself healthy."""
        resp = await self._client.get("/health")
        return resp.status_code in (200, 204)

    async def version(self) -> dict[str, Any]:
        """Return server version information."""
        return cast(dict[str, Any], await self.request("GET", "/version"))

    # ── Indexes ──

    async def list_indexes(self) -> list[IndexInfo]:
        """List all indexes."""
        data = await self.request("GET", "/indexes")
        return [IndexInfo.model_validate(item) for item in data or []]

    async def get_index(self, uid: str) -> IndexInfo:
        """Fetch a single index.

        Raises:
            IndexNotFoundError: If the index does not exist.
        """
        return IndexInfo.model_validate(await self.request("GET", f"/indexes/{uid}"))

    async def create_index(self, uid: str, primary_key: str | None = None) -> IndexInfo:
        """Create an index.

        Raises:
            IndexAlreadyExistsError: If the uid is already taken.
        """
        payload: dict[str, Any] = {"uid": uid}
        if primary_key:
            payload["primaryKey"] = primary_key
        data = await self.request("POST", "/indexes", expected_status=201, json=payload)
        logger.info("Created index '%s'", uid)
        return IndexInfo.model_validate(data)

    async def get_or_create_index(self, uid: str, primary_key: str | None = None) -> IndexInfo:
        """Fetch an index, creating it if it does not exist yet."""
        try:
            return await self.get_index(uid)
        except IndexNotFoundError:
            return await self.create_index(uid, primary_key)

    async def update_index(self, uid: str, primary_key: str) -> IndexInfo:
        """Set the primary key of an index."""
        data = await self.request("PUT", f"/indexes/{uid}", json={"primaryKey": primary_key})
        return IndexInfo.model_validate(data)

    async def delete_index(self, uid: str) -> None:
        """Delete an index and all its documents."""
        await self.request("DELETE", f"/indexes/{uid}", expected_status=204)
        logger.info("Deleted index '%s'", uid)

    # ── Documents ──

    async def get_document(self, uid: str, doc_id: str | int) -> Document:
        """Fetch a single document by primary key.

        Raises:
            DocumentNotFoundError: If the document does not exist.
        """
        return cast(Document, await self.request("GET", f"/indexes/{uid}/documents/{doc_id}"))

    async def get_documents(
        self,
        uid: str,
        *,
        offset: int | None = None,
        limit: int | None = None,
        attributes_to_retrieve: Sequence[str] | None = None,
    ) -> list[Document]:
        """Fetch a page of documents."""
        params: dict[str, Any] = {}
        if offset is not None:
            params["offset"] = offset
        if limit is not None:
            params["limit"] = limit
        if attributes_to_retrieve:
            params["attributesToRetrieve"] = ",".join(attributes_to_retrieve)
        data = await self.request("GET", f"/indexes/{uid}/documents", params=params or None)
        return cast(list[Document], data or [])

    async def add_documents(
        self,
        uid: str,
        documents: Sequence[Document],
        primary_key: str | None = None,
    ) -> TaskRef:
        """Add documents, replacing any existing document with the same key."""
        return await self._enqueue("POST", uid, "/documents", list(documents), primary_key)

    async def add_or_update_documents(
        self,
        uid: str,
        documents: Sequence[Document],
        primary_key: str | None = None,
    ) -> TaskRef:
        """Add documents, merging fields into any existing document with the same key."""
        return await self._enqueue("PUT", uid, "/documents", list(documents), primary_key)

    async def delete_document(self, uid: str, doc_id: str | int) -> TaskRef:
        """Delete one document by primary key."""
        return await self._enqueue("DELETE", uid, f"/documents/{doc_id}")

    async def delete_documents(self, uid: str, doc_ids: Sequence[str | int]) -> TaskRef:
        """Delete a batch of documents by primary key."""
        return await self._enqueue("POST", uid, "/documents/delete-batch", list(doc_ids))

    async def delete_all_documents(self, uid: str) -> TaskRef:
        """Delete every document of an index."""
        return await self._enqueue("DELETE", uid, "/documents")

    # ── Settings ──

    async def get_settings(self, uid: str) -> IndexSettings:
        """Fetch the settings of an index."""
        return IndexSettings.model_validate(await self.request("GET", f"/indexes/{uid}/settings"))

    async def set_settings(self, uid: str, settings: SettingsDelta | IndexSettings) -> TaskRef:
        """Apply a settings update.

        An ``IndexSettings`` sets every field it reports and leaves the rest
        unchanged; a ``SettingsDelta`` is sent as-is, so ``Cleared`` fields
        are reset on the server.
        """
        delta = settings.to_delta() if isinstance(settings, IndexSettings) else settings
        return await self._enqueue("POST", uid, "/settings", delta.to_wire())

    async def reset_settings(self, uid: str) -> TaskRef:
        """Reset every setting of an index to its default."""
        return await self._enqueue("DELETE", uid, "/settings")

    # ── Search ──

    async def search(self, uid: str, query: str | SearchQuery) -> SearchResults:
        """Search an index.

        Args:
            uid: Index uid.
            query: Query string or full ``SearchQuery``.
        """
        if isinstance(query, str):
            query = SearchQuery(q=query)
        data = await self.request("POST", f"/indexes/{uid}/search", json=query.to_payload())
        return SearchResults.model_validate(data)

    # ── Updates ──

    async def get_status(self, task: TaskRef) -> TaskStatus:
        """Read the current status of an update once."""
        return await self._poller.check(task)

    async def get_update_status(self, uid: str, update_id: int) -> TaskStatus:
        """Read the current status of update ``update_id`` on index ``uid``."""
        return await self._poller.check(TaskRef(task_id=update_id, index_uid=uid))

    async def get_all_update_status(self, uid: str) -> list[TaskStatus]:
        """Read the status of every update of an index."""
        return await self._poller.check_all(uid)

    # ── Helpers ──

    async def _enqueue(
        self,
        method: str,
        uid: str,
        subpath: str,
        json: Any = None,
        primary_key: str | None = None,
    ) -> TaskRef:
        params = {"primaryKey": primary_key} if primary_key else None
        data = await self.request(method, f"/indexes/{uid}{subpath}", expected_status=202, json=json, params=params)
        task = TaskRef.from_ack(data, uid)
        logger.debug("Enqueued update %d on '%s' (%s %s)", task.task_id, uid, method, subpath)
        return task


# ═══════════════════════════════════════════════════════════════════════════════
# Sync client (wraps AsyncMeiliClient)
# ═══════════════════════════════════════════════════════════════════════════════


class MeiliClient:
    """Synchronous Python client for a MeiliSearch server.

    Wraps :class:`AsyncMeiliClient` using ``asyncio.run``; every call opens
    and closes its own async client.

    Args:
        host: Server URL.
        api_key: API key sent as the ``X-Meili-API-Key`` header.
        timeout: Request timeout in seconds.
        **httpx_kwargs: Additional keyword arguments passed to ``httpx.AsyncClient``.

    Example::

        client = MeiliClient("http://localhost:7700")
        task = client.delete_all_documents("movies")
        print(client.get_status(task))
    """

    def __init__(
        self,
        host: str = "http://localhost:7700",
        api_key: str | None = None,
        *,
        timeout: float = 30.0,
        **httpx_kwargs: Any,
    ) -> None:
        self._host = host
        self._api_key = api_key
        self._timeout = timeout
        self._httpx_kwargs = httpx_kwargs

    def _run(self, coro: Coroutine[Any, Any, _T]) -> _T:
        """Run an async coroutine synchronously."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop and loop.is_running():
            # Already inside an event loop (e.g. Jupyter) — run in a worker thread
            import concurrent.futures

            with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
                return pool.submit(asyncio.run, coro).result()
        return asyncio.run(coro)

    def _make_client(self) -> AsyncMeiliClient:
        return AsyncMeiliClient(
            self._host,
            self._api_key,
            timeout=self._timeout,
            **self._httpx_kwargs,
        )

    def _call(self, method: str, *args: Any, **kwargs: Any) -> Any:
        async def _invoke() -> Any:
            async with self._make_client() as c:
                return await getattr(c, method)(*args, **kwargs)

        return self._run(_invoke())

    def health(self) -> bool:
        """Return whether the server reports itself healthy."""
        return cast(bool, self._call("health"))

    def version(self) -> dict[str, Any]:
        """Return server version information."""
        return cast(dict[str, Any], self._call("version"))

    def list_indexes(self) -> list[IndexInfo]:
        """List all indexes."""
        return cast(list[IndexInfo], self._call("list_indexes"))

    def get_index(self, uid: str) -> IndexInfo:
        """Fetch a single index."""
        return cast(IndexInfo, self._call("get_index", uid))

    def create_index(self, uid: str, primary_key: str | None = None) -> IndexInfo:
        """Create an index."""
        return cast(IndexInfo, self._call("create_index", uid, primary_key))

    def get_or_create_index(self, uid: str, primary_key: str | None = None) -> IndexInfo:
        """Fetch an index, creating it if it does not exist yet."""
        return cast(IndexInfo, self._call("get_or_create_index", uid, primary_key))

    def update_index(self, uid: str, primary_key: str) -> IndexInfo:
        """Set the primary key of an index."""
        return cast(IndexInfo, self._call("update_index", uid, primary_key))

    def delete_index(self, uid: str) -> None:
        """Delete an index and all its documents."""
        self._call("delete_index", uid)

    def get_document(self, uid: str, doc_id: str | int) -> Document:
        """Fetch a single document by primary key."""
        return cast(Document, self._call("get_document", uid, doc_id))

    def get_documents(
        self,
        uid: str,
        *,
        offset: int | None = None,
        limit: int | None = None,
        attributes_to_retrieve: Sequence[str] | None = None,
    ) -> list[Document]:
        """Fetch a page of documents."""
        return cast(
            list[Document],
            self._call(
                "get_documents",
                uid,
                offset=offset,
                limit=limit,
                attributes_to_retrieve=attributes_to_retrieve,
            ),
        )

    def add_documents(self, uid: str, documents: Sequence[Document], primary_key: str | None = None) -> TaskRef:
        """Add documents, replacing any existing document with the same key."""
        return cast(TaskRef, self._call("add_documents", uid, documents, primary_key))

    def add_or_update_documents(
        self, uid: str, documents: Sequence[Document], primary_key: str | None = None
    ) -> TaskRef:
        """Add documents, merging fields into any existing document with the same key."""
        return cast(TaskRef, self._call("add_or_update_documents", uid, documents, primary_key))

    def delete_document(self, uid: str, doc_id: str | int) -> TaskRef:
        """Delete one document by primary key."""
        return cast(TaskRef, self._call("delete_document", uid, doc_id))

    def delete_documents(self, uid: str, doc_ids: Sequence[str | int]) -> TaskRef:
        """Delete a batch of documents by primary key."""
        return cast(TaskRef, self._call("delete_documents", uid, doc_ids))

    def delete_all_documents(self, uid: str) -> TaskRef:
        """Delete every document of an index."""
        return cast(TaskRef, self._call("delete_all_documents", uid))

    def get_settings(self, uid: str) -> IndexSettings:
        """Fetch the settings of an index."""
        return cast(IndexSettings, self._call("get_settings", uid))

    def set_settings(self, uid: str, settings: SettingsDelta | IndexSettings) -> TaskRef:
        """Apply a settings update."""
        return cast(TaskRef, self._call("set_settings", uid, settings))

    def reset_settings(self, uid: str) -> TaskRef:
        """Reset every setting of an index to its default."""
        return cast(TaskRef, self._call("reset_settings", uid))

    def search(self, uid: str, query: str | SearchQuery) -> SearchResults:
        """Search an index."""
        return cast(SearchResults, self._call("search", uid, query))

    def get_status(self, task: TaskRef) -> TaskStatus:
        """Read the current status of an update once."""
        return cast(TaskStatus, self._call("get_status", task))

    def get_update_status(self, uid: str, update_id: int) -> TaskStatus:
        """Read the current status of update ``update_id`` on index ``uid``."""
        return cast(TaskStatus, self._call("get_update_status", uid, update_id))

    def get_all_update_status(self, uid: str) -> list[TaskStatus]:
        """Read the status of every update of an index."""
        return cast(list[TaskStatus], self._call("get_all_update_status", uid))
