import pytest
from fastapi.testclient import TestClient

from bunktrack.core import load_app_settings
from bunktrack.engine.store import SubjectStore
from main import create_app


@pytest.fixture
def settings():
    return load_app_settings(ENABLE_BACKEND_WEB=False, DATABASE_URL=None)


@pytest.fixture
def store():
    return SubjectStore()


@pytest.fixture
def client(settings, store):
    with TestClient(create_app(settings=settings, store=store)) as test_client:
        yield test_client


@pytest.fixture
def make_client(settings):
    def _make(**overrides):
        app_settings = settings.model_copy(update=overrides)
        return TestClient(create_app(settings=app_settings))

    return _make
