"""meilikit — Python client for the MeiliSearch update-queue API."""

from meilikit.client import AsyncMeiliClient, MeiliClient
from meilikit.core.progress import TaskStatusPoller, decode_status
from meilikit.exceptions import (
    ApiError,
    DocumentNotFoundError,
    IndexAlreadyExistsError,
    IndexNotFoundError,
    InvalidResponseError,
    MeiliError,
)

__version__ = "0.1.0"

__all__ = [
    "ApiError",
    "AsyncMeiliClient",
    "DocumentNotFoundError",
    "IndexAlreadyExistsError",
    "IndexNotFoundError",
    "InvalidResponseError",
    "MeiliClient",
    "MeiliError",
    "TaskStatusPoller",
    "__version__",
    "decode_status",
]
