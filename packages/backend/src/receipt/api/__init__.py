"""API route aggregation.

All routers registered here get mounted under /api in main.py.
The WebSocket route lives in receipt.realtime.websocket.
"""

from fastapi import APIRouter

from receipt.api.entries import router as entries_router
from receipt.api.health import router as health_router
from receipt.api.hello import router as hello_router

api_router = APIRouter(prefix="/api")

api_router.include_router(hello_router, tags=["health"])
api_router.include_router(health_router, tags=["health"])
api_router.include_router(entries_router, tags=["entries"])
