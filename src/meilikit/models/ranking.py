"""Ranking rule model.

The settings API spells rules as plain strings (``"typo"``, ``"asc(price)"``)
while update payloads carry an externally tagged form (``"Typo"``,
``{"Asc": "price"}``).  Both decode to the same ``RankingRule``; encoding
always produces the string form.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_serializer, model_validator


class RankingRuleKind(str, Enum):
    """Built-in and custom ranking rule kinds."""

    TYPO = "typo"
    WORDS = "words"
    PROXIMITY = "proximity"
    ATTRIBUTE = "attribute"
    WORDS_POSITION = "wordsPosition"
    EXACTNESS = "exactness"
    ASC = "asc"
    DESC = "desc"


_CUSTOM_KINDS = frozenset({RankingRuleKind.ASC, RankingRuleKind.DESC})

_BY_NAME: dict[str, RankingRuleKind] = {kind.value.lower(): kind for kind in RankingRuleKind}
_BY_NAME["dsc"] = RankingRuleKind.DESC

_CUSTOM_RE = re.compile(r"^(asc|desc|dsc)\((.+)\)$", re.IGNORECASE)


def _parse_rule_string(raw: str) -> dict[str, Any]:
    text = raw.strip()
    match = _CUSTOM_RE.match(text)
    if match:
        return {"kind": _BY_NAME[match.group(1).lower()], "attribute": match.group(2).strip()}
    kind = _BY_NAME.get(text.lower())
    if kind is None or kind in _CUSTOM_KINDS:
        raise ValueError(f"Unknown ranking rule: {raw!r}")
    return {"kind": kind}


class RankingRule(BaseModel):
    """A single ranking rule.

    Example::

        RankingRule.model_validate("desc(release_date)")
        RankingRule.desc("release_date")      # same rule
        str(RankingRule(kind="typo"))         # "typo"
    """

    model_config = ConfigDict(frozen=True)

    kind: RankingRuleKind = Field(description="Rule kind")
    attribute: str | None = Field(default=None, description="Sort attribute for asc/desc rules")

    @model_validator(mode="before")
    @classmethod
    def _decode_wire(cls, data: Any) -> Any:
        if isinstance(data, str):
            return _parse_rule_string(data)
        if isinstance(data, dict) and len(data) == 1 and "kind" not in data:
            ((tag, value),) = data.items()
            kind = _BY_NAME.get(str(tag).lower())
            if kind is None:
                raise ValueError(f"Unknown ranking rule tag: {tag!r}")
            return {"kind": kind, "attribute": value}
        return data

    @model_validator(mode="after")
    def _check_attribute(self) -> RankingRule:
        if self.kind in _CUSTOM_KINDS and not self.attribute:
            raise ValueError(f"Ranking rule '{self.kind.value}' requires an attribute")
        if self.kind not in _CUSTOM_KINDS and self.attribute is not None:
            raise ValueError(f"Ranking rule '{self.kind.value}' takes no attribute")
        return self

    @model_serializer(mode="plain")
    def _encode_wire(self) -> str:
        return str(self)

    def __str__(self) -> str:
        if self.kind in _CUSTOM_KINDS:
            return f"{self.kind.value}({self.attribute})"
        return self.kind.value

    @classmethod
    def asc(cls, attribute: str) -> RankingRule:
        return cls(kind=RankingRuleKind.ASC, attribute=attribute)

    @classmethod
    def desc(cls, attribute: str) -> RankingRule:
        return cls(kind=RankingRuleKind.DESC, attribute=attribute)


DEFAULT_RANKING_RULES: tuple[RankingRule, ...] = tuple(
    RankingRule(kind=kind) for kind in RankingRuleKind if kind not in _CUSTOM_KINDS
)
