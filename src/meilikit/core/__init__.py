"""Core client logic."""

from meilikit.core.progress import TaskStatusPoller, decode_status

__all__ = ["TaskStatusPoller", "decode_status"]
