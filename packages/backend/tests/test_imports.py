"""Import smoke tests — every module loads and the default app is built."""

import importlib

import pytest

MODULES = [
    "receipt.config",
    "receipt.db.models",
    "receipt.db.engine",
    "receipt.db.migrate",
    "receipt.db.store",
    "receipt.services.entry_service",
    "receipt.realtime.hub",
    "receipt.realtime.websocket",
    "receipt.api",
    "receipt.cli.main",
    "receipt.main",
]


@pytest.mark.parametrize("name", MODULES)
def test_module_imports(name):
    importlib.import_module(name)


def test_entry_table_has_ms_default():
    from receipt.db.models import Entry

    default = Entry.__table__.c.created_at.server_default
    assert default is not None
    assert "julianday" in str(default.arg)


def test_default_app_exposes_routes():
    from receipt.main import app

    paths = {route.path for route in app.routes}
    assert {"/api/hello", "/api/entries", "/api/addEntry", "/api/ws"} <= paths
