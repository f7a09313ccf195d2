import pytest
import httpx

from runtrace.core.config import TracingSettings
from runtrace.observability.http_client import HttpRunClient
from runtrace.testing import RecordingTransport, build_collector_app, reset_settings

TEST_API_KEY = "test-api-key"
COLLECTOR_URL = "http://collector.test"

_ENV_VARS = [
    "LANGSMITH_TRACING",
    "LANGSMITH_ENDPOINT",
    "LANGSMITH_API_KEY",
    "LANGSMITH_PROJECT",
    "LANGSMITH_TENANT_ID",
    "LANGSMITH_TIMEOUT_MS",
    "LANGSMITH_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    # Keep the developer's environment and any local .env out of the tests
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def tracing_enabled(monkeypatch):
    monkeypatch.setenv("LANGSMITH_TRACING", "true")
    monkeypatch.setenv("LANGSMITH_API_KEY", TEST_API_KEY)
    reset_settings()


@pytest.fixture
def recorder():
    return RecordingTransport()


@pytest.fixture
def failing_recorder():
    return RecordingTransport(fail=True)


@pytest.fixture
def collector_app():
    return build_collector_app(api_key=TEST_API_KEY)


@pytest.fixture
def collector_client(collector_app):
    settings = TracingSettings(tracing=True, api_key=TEST_API_KEY, endpoint=COLLECTOR_URL)
    return HttpRunClient(settings, transport=httpx.ASGITransport(app=collector_app))
