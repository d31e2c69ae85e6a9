"""Index settings and the three-way settings delta.

A settings update is PATCH-like: for each field the server must tell apart
"not mentioned" from "explicitly reset" from "set to a value".  Those three
states are modelled as distinct classes (``Unchanged``, ``Cleared``,
``SetTo``) so the distinction survives a trip through the wire format::

    Unchanged   -> key omitted
    Cleared     -> null
    SetTo(v)    -> v

Settings updates reported back in an update status use the server's tagged
form instead (``"Nothing"``, ``"Clear"``, ``{"Update": v}``); both forms
decode to the same delta.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_serializer, model_validator

from meilikit.models.ranking import RankingRule

# ═══════════════════════════════════════════════════════════════════════════════
# Update states
# ═══════════════════════════════════════════════════════════════════════════════


class Unchanged:
    """The field is left as it is on the server."""

    __slots__ = ()

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Unchanged)

    def __hash__(self) -> int:
        return hash(Unchanged)

    def __repr__(self) -> str:
        return "Unchanged()"


class Cleared:
    """The field is reset to the server default."""

    __slots__ = ()

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Cleared)

    def __hash__(self) -> int:
        return hash(Cleared)

    def __repr__(self) -> str:
        return "Cleared()"


class SetTo:
    """The field is set to ``value``."""

    __slots__ = ("value",)

    def __init__(self, value: Any) -> None:
        self.value = value

    def __eq__(self, other: object) -> bool:
        return isinstance(other, SetTo) and self.value == other.value

    def __hash__(self) -> int:
        return hash((SetTo, _freeze(self.value)))

    def __repr__(self) -> str:
        return f"SetTo({self.value!r})"


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return frozenset((key, _freeze(item)) for key, item in value.items())
    if isinstance(value, (set, frozenset)):
        return frozenset(_freeze(item) for item in value)
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    return value


UpdateState = Union[Unchanged, Cleared, SetTo]

UNCHANGED = Unchanged()
CLEARED = Cleared()


# ═══════════════════════════════════════════════════════════════════════════════
# Full settings document
# ═══════════════════════════════════════════════════════════════════════════════


class IndexSettings(BaseModel):
    """Settings of an index as reported by ``GET /indexes/{uid}/settings``.

    ``None`` means the server did not report the field.
    """

    model_config = ConfigDict(populate_by_name=True)

    ranking_rules: list[RankingRule] | None = Field(default=None, alias="rankingRules")
    distinct_attribute: str | None = Field(default=None, alias="distinctAttribute")
    searchable_attributes: list[str] | None = Field(default=None, alias="searchableAttributes")
    displayed_attributes: list[str] | None = Field(default=None, alias="displayedAttributes")
    stop_words: list[str] | None = Field(default=None, alias="stopWords")
    synonyms: dict[str, list[str]] | None = Field(default=None)
    accept_new_fields: bool | None = Field(default=None, alias="acceptNewFields")

    def to_delta(self) -> SettingsDelta:
        """Build a delta that sets every reported field and leaves the rest untouched."""
        return SettingsDelta.from_settings(self)


# ═══════════════════════════════════════════════════════════════════════════════
# Settings delta
# ═══════════════════════════════════════════════════════════════════════════════

# python name -> (wire key, value type)
_DELTA_FIELDS: dict[str, tuple[str, Any]] = {
    "ranking_rules": ("rankingRules", list[RankingRule]),
    "distinct_attribute": ("distinctAttribute", str),
    "identifier": ("identifier", str),
    "searchable_attributes": ("searchableAttributes", list[str]),
    "displayed_attributes": ("displayedAttributes", set[str]),
    "stop_words": ("stopWords", set[str]),
    "synonyms": ("synonyms", dict[str, list[str]]),
    "accept_new_fields": ("acceptNewFields", bool),
}

_VALUE_ADAPTERS: dict[str, TypeAdapter[Any]] = {
    name: TypeAdapter(value_type) for name, (_, value_type) in _DELTA_FIELDS.items()
}


# Tagged update states used by the server when it reports a settings update.
_TAG_NOTHING = "Nothing"
_TAG_CLEAR = "Clear"
_TAG_UPDATE = "Update"

_STRING_FIELDS = frozenset({"distinct_attribute", "identifier"})
_MAPPING_FIELDS = frozenset({"synonyms"})


def _is_tagged_wrapper(raw: Any) -> bool:
    return isinstance(raw, Mapping) and list(raw) == [_TAG_UPDATE]


def _is_unambiguous_tag(name: str, raw: Any) -> bool:
    """Whether ``raw`` can only be read as a tagged state for field ``name``.

    ``"Clear"`` is a valid distinct attribute and ``{"Update": [...]}`` a
    valid synonyms map, so those fields never decide the form on their own.
    """
    if isinstance(raw, str) and raw in (_TAG_NOTHING, _TAG_CLEAR):
        return name not in _STRING_FIELDS
    if _is_tagged_wrapper(raw):
        return name not in _MAPPING_FIELDS
    return False


def _decode_state(name: str, raw: Any, *, tagged: bool = False) -> UpdateState:
    if isinstance(raw, (Unchanged, Cleared)):
        return raw
    if tagged:
        if raw == _TAG_NOTHING:
            return UNCHANGED
        if raw == _TAG_CLEAR:
            return CLEARED
        if _is_tagged_wrapper(raw):
            raw = raw[_TAG_UPDATE]
            if raw is None:
                raise ValueError(f"'{name}' update carries no value")
            return SetTo(_VALUE_ADAPTERS[name].validate_python(raw))
    if isinstance(raw, SetTo):
        raw = raw.value
    elif raw is None:
        return CLEARED
    return SetTo(_VALUE_ADAPTERS[name].validate_python(raw))


def _encode_value(name: str, value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    return _VALUE_ADAPTERS[name].dump_python(value, mode="json")


class SettingsDelta(BaseModel):
    """Partial settings update.

    Fields accept an ``UpdateState`` or a bare value; a bare ``None`` means
    ``Cleared`` and any other bare value means ``SetTo``.  Omitted fields are
    ``Unchanged``.

    A mapping in the server's tagged form is recognised when at least one
    field carries a marker that cannot be a plain value (``"Nothing"`` on a
    list field, ``{"Update": ...}`` on anything but ``synonyms``).  The whole
    mapping is then decoded as tagged.

    Example::

        delta = SettingsDelta(
            stop_words={"the", "a"},
            distinct_attribute=CLEARED,
        )
        delta.to_wire()  # {"distinctAttribute": None, "stopWords": ["a", "the"]}
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    ranking_rules: UpdateState = Field(default=UNCHANGED)
    distinct_attribute: UpdateState = Field(default=UNCHANGED)
    identifier: UpdateState = Field(default=UNCHANGED)
    searchable_attributes: UpdateState = Field(default=UNCHANGED)
    displayed_attributes: UpdateState = Field(default=UNCHANGED)
    stop_words: UpdateState = Field(default=UNCHANGED)
    synonyms: UpdateState = Field(default=UNCHANGED)
    accept_new_fields: UpdateState = Field(default=UNCHANGED)

    @model_validator(mode="before")
    @classmethod
    def _decode_wire(cls, data: Any) -> Any:
        if isinstance(data, SettingsDelta):
            return data
        if not isinstance(data, Mapping):
            raise ValueError("Settings delta must be an object")

        raw_values: dict[str, Any] = {}
        for name, (wire_key, _) in _DELTA_FIELDS.items():
            if wire_key in data:
                raw_values[name] = data[wire_key]
            elif name in data:
                raw_values[name] = data[name]

        tagged = any(_is_unambiguous_tag(name, raw) for name, raw in raw_values.items())
        return {name: _decode_state(name, raw, tagged=tagged) for name, raw in raw_values.items()}

    @model_serializer(mode="plain")
    def _encode_wire(self) -> dict[str, Any]:
        return self.to_wire()

    def to_wire(self) -> dict[str, Any]:
        """Encode the delta: omitted, ``null`` or value per field."""
        payload: dict[str, Any] = {}
        for name, (wire_key, _) in _DELTA_FIELDS.items():
            state = getattr(self, name)
            if isinstance(state, Cleared):
                payload[wire_key] = None
            elif isinstance(state, SetTo):
                payload[wire_key] = _encode_value(name, state.value)
        return payload

    def changed_fields(self) -> list[str]:
        """Python names of the fields this delta touches."""
        return [name for name in _DELTA_FIELDS if not isinstance(getattr(self, name), Unchanged)]

    @property
    def is_empty(self) -> bool:
        return not self.changed_fields()

    @classmethod
    def from_settings(cls, settings: IndexSettings) -> SettingsDelta:
        """Delta setting every field ``settings`` reports."""
        values: dict[str, UpdateState] = {}
        for name in _DELTA_FIELDS:
            value = getattr(settings, name, None)
            if value is not None:
                values[name] = SetTo(value)
        return cls(**values)
