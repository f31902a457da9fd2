"""Real-time infrastructure — in-process broadcast hub + WebSocket.

Learn: Events flow one way:
1. EntryService → BroadcastHub.broadcast (after the row is committed)
2. BroadcastHub → every connected WebSocket (fire-and-forget)

Pushes are not queued or replayed. A client that connects late can
always GET /api/entries to catch up.
"""

from receipt.realtime.hub import BroadcastHub, Subscriber

__all__ = ["BroadcastHub", "Subscriber"]
