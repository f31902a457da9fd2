"""Entry API routes.

Learn: Routes handle HTTP concerns only — where the text comes from
and which status code goes back. Validation, persistence and the
WebSocket fan-out all live in EntryService. ValidationError and
StorageError are turned into JSON responses by the handlers in main.py.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from receipt.api.dependencies import get_entry_service
from receipt.errors import ValidationError
from receipt.schemas.entry import EntryRead, ErrorBody
from receipt.services.entry_service import EntryService

router = APIRouter()

_create_responses = {400: {"model": ErrorBody}, 500: {"model": ErrorBody}}


@router.get("/entries", response_model=list[EntryRead])
async def list_entries(svc: EntryService = Depends(get_entry_service)):
    """All entries, newest first."""
    return await svc.list_entries()


@router.get(
    "/addEntry",
    response_model=EntryRead,
    status_code=201,
    responses=_create_responses,
)
async def add_entry_from_query(
    text: Optional[str] = Query(default=None),
    svc: EntryService = Depends(get_entry_service),
):
    """Create an entry from ?text=..."""
    if text is None:
        raise ValidationError("Missing text parameter")
    return await svc.add_entry(text)


@router.post(
    "/addEntry",
    response_model=EntryRead,
    status_code=201,
    responses=_create_responses,
)
async def add_entry_from_body(
    request: Request,
    svc: EntryService = Depends(get_entry_service),
):
    """Create an entry from a JSON body {"text": "..."}."""
    try:
        data = await request.json()
    except ValueError as e:
        raise ValidationError("Request body is not valid JSON") from e
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    if "text" not in data:
        raise ValidationError("Missing text field")
    return await svc.add_entry(data["text"])
