"""meilikit client — Async and sync clients for a MeiliSearch server.

Quick start::

    from meilikit.client import MeiliClient

    client = MeiliClient("http://localhost:7700", "master-key")

    task = client.add_documents("movies", [{"id": 1, "title": "Carol"}])
    status = client.get_status(task)
    print(status.is_terminal)
"""

from meilikit.client.client import AsyncMeiliClient, MeiliClient

__all__ = ["AsyncMeiliClient", "MeiliClient"]
