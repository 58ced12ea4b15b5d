"""
Tests for studio.config and the environment helpers it relies on.
"""

from datetime import timedelta

import pytest

from studio.config import GenerationProviderType, OrchestrationSettings, ProviderSettings, get_active_provider
from studio.core import assert_directory_writable, env_float, env_int, parse_bool_env, run_startup_runtime_checks


class TestEnvHelpers:
    @pytest.mark.parametrize("raw,expected", [("1", True), ("true", True), (" YES ", True), ("on", True), ("0", False), ("no", False)])
    def test_parse_bool_env(self, raw, expected):
        assert parse_bool_env(raw) is expected

    def test_parse_bool_env_default(self):
        assert parse_bool_env(None) is False
        assert parse_bool_env(None, default=True) is True

    def test_env_int_clamps_and_falls_back(self, monkeypatch):
        monkeypatch.setenv("STUDIO_TEST_INT", "-5")
        assert env_int("STUDIO_TEST_INT", 3, 1) == 1

        monkeypatch.setenv("STUDIO_TEST_INT", "abc")
        assert env_int("STUDIO_TEST_INT", 3, 1) == 3

        monkeypatch.delenv("STUDIO_TEST_INT")
        assert env_int("STUDIO_TEST_INT", 3, 1) == 3

    def test_env_float(self, monkeypatch):
        monkeypatch.setenv("STUDIO_TEST_FLOAT", "2.5")
        assert env_float("STUDIO_TEST_FLOAT", 1.0, 0.0) == 2.5


class TestProviderSettings:
    def test_defaults_to_veo(self, monkeypatch):
        monkeypatch.setenv("GENERATION_PROVIDER", "something-else")
        assert get_active_provider() == GenerationProviderType.VEO

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("GENERATION_PROVIDER", "task_api")
        monkeypatch.setenv("TASK_API_BASE_URL", "https://tasks.example.com/api/v1/jobs")
        monkeypatch.setenv("TASK_API_KEY", "secret")
        monkeypatch.setenv("TASK_API_MAX_WAIT_SECONDS", "300")

        settings = ProviderSettings.from_env()

        assert settings.provider == GenerationProviderType.TASK_API
        assert settings.task_api_base_url == "https://tasks.example.com/api/v1/jobs"
        assert settings.task_api_max_wait_seconds == 300.0

    def test_model_for_kind(self):
        veo = ProviderSettings(veo_ugc_model="ugc-model", veo_promo_model="promo-model")
        assert veo.model_for_kind("ugc_video") == "ugc-model"
        assert veo.model_for_kind("promo_video") == "promo-model"

        task_api = ProviderSettings(provider=GenerationProviderType.TASK_API, task_api_model="sora")
        assert task_api.model_for_kind("ugc_video") == "sora"


class TestOrchestrationSettings:
    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("SWEEP_ENABLED", "false")
        monkeypatch.setenv("SWEEP_INTERVAL_SECONDS", "0.1")
        monkeypatch.setenv("DOWNLOAD_MAX_ATTEMPTS", "5")
        monkeypatch.setenv("GENERATION_MAX_WAIT_MINUTES", "45")

        settings = OrchestrationSettings.from_env()

        assert settings.sweep_enabled is False
        assert settings.sweep_interval_seconds == 1.0
        assert settings.download_max_attempts == 5
        assert settings.max_generation_wait == timedelta(minutes=45)

    def test_zero_disables_generation_ceiling(self):
        assert OrchestrationSettings(generation_max_wait_minutes=0).max_generation_wait is None


class TestRuntimeChecks:
    def test_creates_and_reports_directories(self, tmp_path):
        jobs = tmp_path / "data" / "jobs"

        report = run_startup_runtime_checks([jobs])

        assert jobs.is_dir()
        assert report["directories"][str(jobs)] == "ok"
        assert list(jobs.iterdir()) == []

    def test_missing_directory_without_create(self, tmp_path):
        with pytest.raises(RuntimeError, match="missing"):
            assert_directory_writable(tmp_path / "absent", create=False)
