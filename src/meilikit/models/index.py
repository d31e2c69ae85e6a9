"""Index metadata model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class IndexInfo(BaseModel):
    """An index as listed by ``GET /indexes``.

    Timestamps are kept verbatim as sent by the server.
    """

    model_config = ConfigDict(populate_by_name=True)

    uid: str = Field(description="Unique index identifier")
    name: str | None = Field(default=None, description="Human-readable index name")
    created_at: str | None = Field(default=None, alias="createdAt")
    updated_at: str | None = Field(default=None, alias="updatedAt")
    primary_key: str | None = Field(default=None, alias="primaryKey", description="Document primary key")
