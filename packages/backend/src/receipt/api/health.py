"""Health check endpoint.

Learn: Simple GET endpoint that verifies the server is running,
the database answers, and reports how many live subscribers there are.
"""

from fastapi import APIRouter, Depends

from receipt import __version__
from receipt.api.dependencies import get_hub, get_store
from receipt.db.store import EntryStore
from receipt.errors import StorageError
from receipt.realtime.hub import BroadcastHub

router = APIRouter()


@router.get("/health")
async def health_check(
    store: EntryStore = Depends(get_store),
    hub: BroadcastHub = Depends(get_hub),
):
    """Check server health and database connectivity."""
    checks = {"server": "ok", "version": __version__}

    try:
        await store.ping()
        checks["database"] = "ok"
    except StorageError as e:
        checks["database"] = f"error: {e}"

    status = "healthy" if checks["database"] == "ok" else "degraded"
    return {"status": status, **checks, "subscribers": hub.subscriber_count}
