import pytest


@pytest.fixture(autouse=True)
def isolated_provider_env(monkeypatch):
    """Keep every test away from real credentials and a real provider"""
    monkeypatch.setenv("GEMINI_API_KEY", "mock-key")
    monkeypatch.setenv("USE_VERTEX_AI", "false")
    monkeypatch.setenv("GENERATION_PROVIDER", "veo")
    monkeypatch.setenv("SWEEP_ENABLED", "false")
    monkeypatch.delenv("TASK_API_BASE_URL", raising=False)
    monkeypatch.delenv("TASK_API_KEY", raising=False)
