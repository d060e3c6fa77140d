import pytest
from crpt_gateway.core.config import get_settings
from crpt_gateway.services import submission_gateway

CRPT_URL = "https://crpt.test/api/v3/lk/documents/create"


@pytest.fixture(autouse=True)
def _settings_env(monkeypatch):
    """
    Point the gateway at a stub host and give each test a fresh gateway.

    The process-wide gateway owns a ticker thread, so it is shut down after
    every test instead of leaking into the next one.
    """
    monkeypatch.setenv("CRPT_BASE_URL", "https://crpt.test")
    monkeypatch.setenv("CRPT_RL_TIME_UNIT", "second")
    monkeypatch.setenv("CRPT_RL_REQUEST_LIMIT", "100")

    # Clear cached Settings so env changes take effect
    get_settings.cache_clear()
    submission_gateway.shutdown_gateway()
    yield
    submission_gateway.shutdown_gateway()
    get_settings.cache_clear()
