"""Update (task) references, operation kinds and statuses.

Every mutating call on an index is processed asynchronously by the server
and acknowledged with ``{"updateId": n}``.  The status of that update is
read back from ``/indexes/{uid}/updates/{n}`` and is either *enqueued*
(still waiting) or *processed* (terminal, possibly with an error).
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, ValidationError, field_validator

from meilikit.exceptions import InvalidResponseError
from meilikit.models.settings import SettingsDelta

# ═══════════════════════════════════════════════════════════════════════════════
# Task reference
# ═══════════════════════════════════════════════════════════════════════════════


class _UpdateAck(BaseModel):
    update_id: StrictInt = Field(alias="updateId", ge=0)


class TaskRef(BaseModel):
    """Handle on a pending update: the update id plus its owning index."""

    model_config = ConfigDict(frozen=True)

    task_id: int = Field(ge=0, description="Server-assigned update id")
    index_uid: str = Field(min_length=1, description="Uid of the index the update belongs to")

    @property
    def path(self) -> str:
        return f"/indexes/{self.index_uid}/updates/{self.task_id}"

    @classmethod
    def from_ack(cls, payload: Any, index_uid: str) -> TaskRef:
        """Build a reference from an ``{"updateId": n}`` acknowledgement.

        Raises:
            InvalidResponseError: If the payload carries no valid ``updateId``.
        """
        try:
            ack = _UpdateAck.model_validate(payload)
        except ValidationError as e:
            raise InvalidResponseError(f"Invalid update acknowledgement: {payload!r}") from e
        return cls(task_id=ack.update_id, index_uid=index_uid)


# ═══════════════════════════════════════════════════════════════════════════════
# Operation kinds (tagged on ``name``)
# ═══════════════════════════════════════════════════════════════════════════════


class _Operation(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class ClearAll(_Operation):
    """All documents of the index were removed."""

    name: Literal["ClearAll"] = "ClearAll"


class Customs(_Operation):
    """Custom (opaque) server-side update."""

    name: Literal["Customs"] = "Customs"


class DocumentsAddition(_Operation):
    """Documents added or replaced."""

    name: Literal["DocumentsAddition"] = "DocumentsAddition"
    count: StrictInt = Field(alias="number", ge=0, description="Number of documents")


class DocumentsPartial(_Operation):
    """Documents partially updated."""

    name: Literal["DocumentsPartial"] = "DocumentsPartial"
    count: StrictInt = Field(alias="number", ge=0, description="Number of documents")


class DocumentsDeletion(_Operation):
    """Documents deleted by id."""

    name: Literal["DocumentsDeletion"] = "DocumentsDeletion"
    count: StrictInt = Field(alias="number", ge=0, description="Number of documents")


class SettingsUpdate(_Operation):
    """Index settings changed."""

    name: Literal["Settings"] = "Settings"
    settings: SettingsDelta = Field(default_factory=SettingsDelta)


UpdateType = Annotated[
    Union[ClearAll, Customs, DocumentsAddition, DocumentsPartial, DocumentsDeletion, SettingsUpdate],
    Field(discriminator="name"),
]


# ═══════════════════════════════════════════════════════════════════════════════
# Statuses
# ═══════════════════════════════════════════════════════════════════════════════


class ProcessedStatus(BaseModel):
    """Terminal status: the server has applied (or failed to apply) the update.

    Timestamps are kept verbatim as sent by the server.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    update_id: StrictInt = Field(alias="updateId", ge=0)
    update_type: UpdateType = Field(alias="type")
    error: StrictStr | None = Field(default=None, description="Error message when the update failed")
    duration: float = Field(description="Processing time in seconds")
    enqueued_at: StrictStr = Field(alias="enqueuedAt")
    processed_at: StrictStr = Field(alias="processedAt")

    @field_validator("duration", mode="before")
    @classmethod
    def _numeric_duration(cls, value: Any) -> Any:
        # ints widen to float; numeric strings and booleans do not
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("duration must be a number")
        return value

    @property
    def is_terminal(self) -> bool:
        return True

    @property
    def failed(self) -> bool:
        return self.error is not None


class EnqueuedStatus(BaseModel):
    """Non-terminal status: the update is waiting in the server's queue."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    update_id: StrictInt = Field(alias="updateId", ge=0)
    update_type: UpdateType = Field(alias="type")
    enqueued_at: StrictStr = Field(alias="enqueuedAt")

    @property
    def is_terminal(self) -> bool:
        return False


TaskStatus = Union[ProcessedStatus, EnqueuedStatus]
