"""Entry service — the only writer of entries.

Learn: Service layer separates business logic from HTTP routing.
Routes (and the CLI) call the service; the service validates,
stamps the time, writes through the store, and then tells the hub.
"""

import structlog
from pydantic import ValidationError as PydanticValidationError

from receipt.db.models import now_ms
from receipt.db.store import EntryStore
from receipt.errors import ValidationError
from receipt.realtime.hub import BroadcastHub
from receipt.schemas.entry import EntryCreate, EntryRead

logger = structlog.get_logger()


class EntryService:
    """Business logic for creating and listing entries."""

    def __init__(self, store: EntryStore, hub: BroadcastHub):
        self.store = store
        self.hub = hub

    async def add_entry(self, text) -> EntryRead:
        """Validate, persist, broadcast, and return the new entry.

        Raises ValidationError for missing/empty text and StorageError
        if the insert fails. Broadcast problems never surface here.
        """
        if text is None:
            raise ValidationError("Missing text")
        try:
            body = EntryCreate(text=text)
        except PydanticValidationError as e:
            raise ValidationError(_first_error(e)) from e

        row = await self.store.insert(body.text, created_at=now_ms())
        entry = EntryRead.model_validate(row)
        logger.info("receipt.entry_added", entry_id=entry.id, created_at=entry.created_at)

        delivered = await self.hub.broadcast(entry)
        logger.debug("receipt.entry_broadcast", entry_id=entry.id, delivered=delivered)
        return entry

    async def list_entries(self) -> list[EntryRead]:
        rows = await self.store.list_all()
        return [EntryRead.model_validate(row) for row in rows]


def _first_error(exc: PydanticValidationError) -> str:
    err = exc.errors()[0]
    if err["type"] == "string_type":
        return "text must be a string"
    return "text must not be empty"
