"""FastAPI dependencies — pull the app-owned components off app.state.

The store, hub, and service are built once in the lifespan (main.py);
nothing here constructs them.
"""

from fastapi import Request

from receipt.db.store import EntryStore
from receipt.realtime.hub import BroadcastHub
from receipt.services.entry_service import EntryService


def get_store(request: Request) -> EntryStore:
    return request.app.state.store


def get_hub(request: Request) -> BroadcastHub:
    return request.app.state.hub


def get_entry_service(request: Request) -> EntryService:
    return request.app.state.entry_service
