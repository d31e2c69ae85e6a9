"""Search request and response models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SearchQuery(BaseModel):
    """Parameters of a search request.

    Only the fields that are set are sent; the server applies its own
    defaults for the rest.
    """

    model_config = ConfigDict(populate_by_name=True)

    q: str = Field(default="", description="Query string")
    offset: int | None = Field(default=None, ge=0, description="Number of hits to skip")
    limit: int | None = Field(default=None, ge=0, description="Maximum number of hits")
    filters: str | None = Field(default=None, description="Filter expression")
    attributes_to_retrieve: list[str] | None = Field(default=None, alias="attributesToRetrieve")
    attributes_to_crop: list[str] | None = Field(default=None, alias="attributesToCrop")
    crop_length: int | None = Field(default=None, ge=0, alias="cropLength")
    attributes_to_highlight: list[str] | None = Field(default=None, alias="attributesToHighlight")
    matches: bool | None = Field(default=None, description="Return match positions")

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class SearchResults(BaseModel):
    """Search response body."""

    model_config = ConfigDict(populate_by_name=True)

    hits: list[dict[str, Any]] = Field(default_factory=list, description="Matching documents")
    offset: int = Field(default=0)
    limit: int = Field(default=20)
    nb_hits: int | None = Field(default=None, alias="nbHits", description="Total number of matches")
    exhaustive_nb_hits: bool | None = Field(default=None, alias="exhaustiveNbHits")
    processing_time_ms: int = Field(default=0, alias="processingTimeMs")
    query: str = Field(default="")
