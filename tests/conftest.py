"""公共测试夹具."""

import jwt
import pytest
from fastapi.testclient import TestClient

from elasticgate.api import create_app
from elasticgate.config import Settings
from fakes import TEST_SECRET, FakeClock, FakeElasticsearch


@pytest.fixture
def engine():
    return FakeElasticsearch()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings(tmp_path, monkeypatch):
    # 避免读取工作目录下的 config.yaml
    monkeypatch.setenv("ELASTICGATE_CONFIG", str(tmp_path / "missing.yaml"))
    return Settings(elastic_search={"addresses": ["http://localhost:9200"]})


@pytest.fixture
def app(settings, engine, clock):
    application = create_app(settings, client=engine)
    application.state.services.indices.provisioner.clock = clock
    return application


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def make_token():
    def _make(secret=TEST_SECRET, **claims):
        return jwt.encode({"sub": "tester", **claims}, secret, algorithm="HS256")

    return _make
