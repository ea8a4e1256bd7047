"""Pytest configuration and fixtures"""
import random
import sys
from pathlib import Path

import httpx
import pytest

# Add project root and tests directory to path for imports
tests_dir = Path(__file__).parent
project_root = tests_dir.parent
for path in (project_root, tests_dir):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

import i18n
from core.api_client import BackendClient, ResilientTransport
from core.models import EGGS
from game.incubation import IncubationStateMachine
from game.state import SessionStore
from fakes import FakeClock, create_fake_backend

USER_ID = "user-123"

# Assert against English messages regardless of XENOPETS_LANG
i18n.set_language("en")


@pytest.fixture
def language():
    """Switch the message language for one test"""
    yield i18n.set_language
    i18n.set_language("en")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def backend_app():
    """Fake backend with one registered profile"""
    app = create_fake_backend()
    app.state.profiles[USER_ID] = {"id": USER_ID, "username": "tester", "xenocoins": 0}
    return app


@pytest.fixture
def backend_client(backend_app, clock):
    """BackendClient wired to the fake backend; backoff advances the fake clock"""
    transport = ResilientTransport(
        timeout=10.0,
        retry_count=2,
        retry_delay=1.0,
        transport=httpx.ASGITransport(app=backend_app),
        sleep=clock.sleep
    )
    return BackendClient(base_url="http://backend.test", api_key="test-key", transport=transport)


@pytest.fixture
def session(backend_client, clock):
    return SessionStore(USER_ID, client=backend_client, clock=clock)


@pytest.fixture
def machine(session, clock):
    return IncubationStateMachine(session, rng=random.Random(42), clock=clock)


@pytest.fixture
def dragon_egg():
    return EGGS["dragon-egg"]
