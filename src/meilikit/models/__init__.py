"""Data models exchanged with the server."""

from meilikit.models.index import IndexInfo
from meilikit.models.ranking import RankingRule, RankingRuleKind
from meilikit.models.search import SearchQuery, SearchResults
from meilikit.models.settings import (
    CLEARED,
    UNCHANGED,
    Cleared,
    IndexSettings,
    SetTo,
    SettingsDelta,
    Unchanged,
    UpdateState,
)
from meilikit.models.status import (
    ClearAll,
    Customs,
    DocumentsAddition,
    DocumentsDeletion,
    DocumentsPartial,
    EnqueuedStatus,
    ProcessedStatus,
    SettingsUpdate,
    TaskRef,
    TaskStatus,
    UpdateType,
)

__all__ = [
    "CLEARED",
    "UNCHANGED",
    "ClearAll",
    "Cleared",
    "Customs",
    "DocumentsAddition",
    "DocumentsDeletion",
    "DocumentsPartial",
    "EnqueuedStatus",
    "IndexInfo",
    "IndexSettings",
    "ProcessedStatus",
    "RankingRule",
    "RankingRuleKind",
    "SearchQuery",
    "SearchResults",
    "SetTo",
    "SettingsDelta",
    "SettingsUpdate",
    "TaskRef",
    "TaskStatus",
    "Unchanged",
    "UpdateState",
    "UpdateType",
]
