"""Receipt — a tiny running log of notes.

Clients post short text entries over HTTP, entries land in SQLite,
and every connected WebSocket client hears about each new one.
"""

__version__ = "0.1.0"
