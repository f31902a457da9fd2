"""Greeting probe."""

from fastapi import APIRouter

from receipt.schemas.entry import Message

router = APIRouter()


@router.get("/hello", response_model=Message)
async def hello():
    return {"message": "Hello from Receipt!"}
