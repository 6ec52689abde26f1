"""
Global pytest fixtures for the shortlink test suite.

Responsibilities:
    - Provide a fresh FastAPI TestClient via the app factory for integration tests
    - Provide isolated in-memory storage, generator and tracker fixtures
    - Provide a LinkService fixture wired to those fixtures

Why an app factory?
    Using `create_app()` ensures each test gets fresh in-memory state,
    eliminating cross-test flakiness.
"""

import itertools
from typing import Iterable, List, Optional

import pytest
from fastapi.testclient import TestClient

from main import create_app
from shortlink.context import RequestContext
from shortlink.idgen.base import BaseGenerator
from shortlink.idgen.generator import Generator
from shortlink.shortener.service import LinkService
from shortlink.storage.memory_storage import MemoryStorage
from shortlink.tracking.tracker import VisitTracker


class ScriptedGenerator(BaseGenerator):
    """
    Test double that returns codes from a fixed script (cycled) and records each call.
    """

    def __init__(self, codes: Iterable[str]):
        self._codes = itertools.cycle(list(codes))
        self.calls: List[str] = []

    def generate_short_code(self, long_url: str, ctx: Optional[RequestContext] = None) -> str:
        self.calls.append(long_url)
        return next(self._codes)


@pytest.fixture
def client():
    """
    Provide a TestClient with a fresh app instance.

    Entering the client runs the lifespan, so the store is closed on exit.
    """
    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture
def storage():
    store = MemoryStorage()
    yield store
    store.close()


@pytest.fixture
def generator() -> Generator:
    return Generator()


@pytest.fixture
def tracker(storage):
    t = VisitTracker(storage, max_workers=4)
    yield t
    t.shutdown(wait=True)


@pytest.fixture
def service(storage, generator, tracker) -> LinkService:
    """LinkService wired to the storage, generator and tracker fixtures."""
    return LinkService(storage=storage, generator=generator, tracker=tracker)


@pytest.fixture
def scripted_generator():
    """Factory for ScriptedGenerator: `scripted_generator(["abcde", "fghij"])`."""
    return ScriptedGenerator
