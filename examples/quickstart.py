#!/usr/bin/env python3
"""
Receipt Quickstart — post a few entries and read them back.

Run with: python examples/quickstart.py

Requires: pip install httpx
Server must be running: receipt serve  (http://localhost:3123)
"""

import sys
import uuid

import httpx

BASE = "http://localhost:3123/api"


def main():
    run_id = uuid.uuid4().hex[:6]
    client = httpx.Client(base_url=BASE, timeout=10)

    # ── Health check ──────────────────────────────────────────────
    print("Checking server health...")
    try:
        resp = client.get("/health")
    except httpx.ConnectError:
        print(f"Server not reachable at {BASE}")
        print("Start it with:  receipt serve")
        sys.exit(1)
    health = resp.json()
    print(f"  Database:    {'✓' if health['database'] == 'ok' else '✗'}")
    print(f"  Subscribers: {health['subscribers']}")

    # ── Add entries (JSON body and query string) ──────────────────
    print("\n1. Adding entries...")
    resp = client.post("/addEntry", json={"text": f"milk ({run_id})"})
    assert resp.status_code == 201, f"Failed: {resp.text}"
    milk = resp.json()
    print(f"   {milk['text']} → {milk['id'][:8]}...")

    resp = client.get("/addEntry", params={"text": f"eggs ({run_id})"})
    assert resp.status_code == 201, f"Failed: {resp.text}"
    eggs = resp.json()
    print(f"   {eggs['text']} → {eggs['id'][:8]}...")

    # ── Validation ────────────────────────────────────────────────
    print("\n2. Empty text is rejected...")
    resp = client.post("/addEntry", json={"text": ""})
    print(f"   {resp.status_code}: {resp.json()['error']}")

    # ── Read back ─────────────────────────────────────────────────
    print("\n3. Latest entries:")
    for entry in client.get("/entries").json()[:5]:
        print(f"   {entry['created_at']}  {entry['text']}")

    print("\nDone. Connected WebSocket clients (ws://localhost:3123/api/ws) saw both entries live.")


if __name__ == "__main__":
    main()
