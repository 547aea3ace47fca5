import pytest
from fastapi.testclient import TestClient

from conscript.api import get_connector
from conscript.config import ServerConfig
from conscript.server import create_app

from fakes import FakeDockerManager


@pytest.fixture
def fake_engine():
    return FakeDockerManager()


@pytest.fixture
def app(fake_engine):
    app = create_app(ServerConfig(app_version="9.9.9"))
    app.dependency_overrides[get_connector] = lambda: (lambda: fake_engine)
    return app


@pytest.fixture
def client(app):
    return TestClient(app)
