"""
Pytest fixtures and test configuration for anon-diary tests.
"""

from typing import List, Optional

import pytest
from fastapi.testclient import TestClient

from anondiary.config import Settings
from anondiary.database import DiaryStorage
from anondiary.dependencies import get_generator
from anondiary.errors import GenerationError
from anondiary.main import create_app


class FakeGenerator:
    """Stand-in for GenerationClient that records prompts.

    Returns ``response`` on every call, or raises ``error`` when set.
    """

    def __init__(self, response: str = "", error: Optional[Exception] = None):
        self.response = response
        self.error = error
        self.prompts: List[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response

    @property
    def calls(self) -> int:
        return len(self.prompts)


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "diary_test.db"


@pytest.fixture
def storage(db_path):
    """Opened storage accessor on a fresh database."""
    with DiaryStorage(db_path) as s:
        yield s


@pytest.fixture
def settings(db_path):
    return Settings(
        _env_file=None,
        groq_api_key=None,
        database_path=str(db_path),
        rate_limit_enabled=False,
    )


@pytest.fixture
def failing_generator():
    return FakeGenerator(error=GenerationError("endpoint down", status_code=503, body="down"))


@pytest.fixture
def generator():
    return FakeGenerator(
        response=(
            ">be me\n>write diary\n>mfw it works\n\n"
            "[memory: keeps a diary]\n[memory: likes tea]"
        )
    )


@pytest.fixture
def make_client(settings):
    """Factory: a TestClient whose generation client is replaced by ``gen``."""
    clients = []

    def _make(gen, app_settings: Optional[Settings] = None) -> TestClient:
        app = create_app(app_settings or settings)
        app.dependency_overrides[get_generator] = lambda: gen
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client, generator):
    """Test client with a generator that always succeeds."""
    return make_client(generator)


@pytest.fixture
def make_generator():
    """The FakeGenerator class, for tests that need a custom response or error."""
    return FakeGenerator
