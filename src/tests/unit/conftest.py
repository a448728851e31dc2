"""
Shared pytest fixtures and path setup for unit tests.
"""

import os
import sys
from pathlib import Path

# Test-only defaults, set BEFORE any fmailer_provider imports so Settings
# picks them up.
os.environ.setdefault("FMAILER_ENVIRONMENT", "test")
os.environ.setdefault("FMAILER_LOG_LEVEL", "DEBUG")

# Add src to sys.path so fmailer_provider imports work when running pytest from repo root.
PROJECT_SRC = Path(__file__).resolve().parents[2]
if str(PROJECT_SRC) not in sys.path:
    sys.path.insert(0, str(PROJECT_SRC))

import pytest

from fmailer_provider.core.logging import setup_logging
from fmailer_provider.testing import FakeApiBuilder

# Configure once up front; later calls are no-ops and leave caplog's handler alone
setup_logging()

TEMPLATES = "/api/domains/templates/"


def template_payload(**overrides):
    """Server representation of a domain template."""
    payload = {
        "id": 42,
        "uuid": "3f1c9a52-7d1e-4b8e-9a55-0c2b8f6e1a01",
        "created_at": "2024-05-01T10:00:00Z",
        "updated_at": "2024-05-01T10:00:00Z",
        "name": "Welcome",
        "slug": "welcome-1",
        "allow_copy": True,
        "editable": True,
        "domain": 5,
        "langs": [],
    }
    payload.update(overrides)
    return payload


def lang_payload(**overrides):
    payload = {
        "id": 7,
        "uuid": "9b7d0c1e-2f3a-4c5d-8e9f-0a1b2c3d4e5f",
        "created_at": "2024-05-01T10:00:01Z",
        "updated_at": "2024-05-01T10:00:01Z",
        "subject": "Hi",
        "body": "Hello",
        "lang": "en",
        "default": True,
        "template": 42,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def api() -> FakeApiBuilder:
    """A fresh fake API; register routes, then call ``api.build_client()``."""
    return FakeApiBuilder()


@pytest.fixture
def make_template():
    return template_payload


@pytest.fixture
def make_lang():
    return lang_payload


@pytest.fixture
def item_path():
    def _item_path(uuid: str = template_payload()["uuid"]) -> str:
        return f"{TEMPLATES}{uuid}/"

    return _item_path


@pytest.fixture(autouse=True)
def _clean_provider_env(monkeypatch):
    """Keep a developer's real credentials out of the tests."""
    monkeypatch.delenv("FMAILER_TOKEN", raising=False)
    monkeypatch.delenv("FMAILER_ENDPOINT", raising=False)
