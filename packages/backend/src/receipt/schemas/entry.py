"""Pydantic schemas for entries.

Learn: Separate "Create" schemas (input) from "Read" schemas (output).
EntryRead is also the exact payload pushed to WebSocket subscribers.
"""

from pydantic import BaseModel, field_validator


class EntryCreate(BaseModel):
    text: str

    @field_validator("text")
    @classmethod
    def text_not_blank(cls, value: str) -> str:
        # Whitespace-only counts as empty; the stored text is left as submitted
        if not value.strip():
            raise ValueError("text must not be empty")
        return value


class EntryRead(BaseModel):
    id: str
    text: str
    created_at: int

    model_config = {"from_attributes": True}


class Message(BaseModel):
    message: str


class ErrorBody(BaseModel):
    error: str
