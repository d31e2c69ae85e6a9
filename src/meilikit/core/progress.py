"""Update status poller — one status read per call.

Mutating index calls return a ``TaskRef``.  ``TaskStatusPoller.check`` reads
the current status of that update once and classifies it as processed or
enqueued.  The poller holds no state between calls: repeated checks, backoff
and deadlines belong to the caller.

Usage::

    task = await client.delete_all_documents("movies")
    status = await TaskStatusPoller(client).check(task)
    if status.is_terminal:
        ...
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ValidationError

from meilikit.exceptions import InvalidResponseError
from meilikit.models.status import EnqueuedStatus, ProcessedStatus, TaskRef, TaskStatus

if TYPE_CHECKING:
    from meilikit.client.client import AsyncMeiliClient

logger = logging.getLogger(__name__)

# A processed payload carries every enqueued field plus duration/processedAt,
# so the terminal shape must be tried first.
_DECODE_ORDER: tuple[type[BaseModel], ...] = (ProcessedStatus, EnqueuedStatus)


def decode_status(payload: Any) -> TaskStatus:
    """Decode an update status payload.

    Tries each status shape in ``_DECODE_ORDER`` and returns the first that
    validates.

    Raises:
        InvalidResponseError: If no shape matches.
    """
    for model in _DECODE_ORDER:
        try:
            return model.model_validate(payload)  # type: ignore[return-value]
        except ValidationError as e:
            logger.debug("Payload is not a %s (%d errors)", model.__name__, e.error_count())
    raise InvalidResponseError("Invalid server response: unrecognized update status")


class TaskStatusPoller:
    """Reads update statuses through an ``AsyncMeiliClient``.

    Args:
        client: Client used for the HTTP exchange.
    """

    def __init__(self, client: AsyncMeiliClient) -> None:
        self._client = client

    async def check(self, task: TaskRef) -> TaskStatus:
        """Fetch and classify the current status of ``task``.

        Issues exactly one ``GET /indexes/{uid}/updates/{id}``.

        Raises:
            ApiError: If the server answers with a non-200 status.
            InvalidResponseError: If the body matches no status shape.
            httpx.HTTPError: On transport failures (not wrapped).
        """
        payload = await self._client.request("GET", task.path, expected_status=200)
        status = decode_status(payload)
        logger.debug(
            "Update %d on '%s' is %s",
            task.task_id,
            task.index_uid,
            "processed" if status.is_terminal else "enqueued",
        )
        return status

    async def check_all(self, index_uid: str) -> list[TaskStatus]:
        """Fetch and classify every update of an index."""
        payload = await self._client.request("GET", f"/indexes/{index_uid}/updates", expected_status=200)
        if not isinstance(payload, list):
            raise InvalidResponseError("Invalid server response: expected a list of updates")
        return [decode_status(item) for item in payload]
