"""Unit tests for Settings and the cached accessor."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from tastychat.config import Settings, get_settings, reload_settings
from tastychat.config.models.engine import ContextWindowConfig
from tastychat.config.settings import set_toml_config


@pytest.fixture(autouse=True)
def reset_toml_config():
    """Leave no TOML values behind for other tests."""
    yield
    set_toml_config({})


class TestSettings:
    """Tests for Settings defaults and sources."""

    def test_defaults(self) -> None:
        settings = Settings()

        assert settings.app_name == "tastychat"
        assert settings.log_level == "INFO"
        assert settings.generation.escalation_confidence == 0.5
        assert settings.tools.max_iterations == 10
        assert settings.support.ticket_timeout_hours == 24
        assert settings.providers.llm.model == "openai/gpt-4o-mini"

    def test_toml_values_used(self) -> None:
        set_toml_config({"debug": True, "guardrails": {"max_messages_per_hour": 10}})

        settings = Settings()

        assert settings.debug is True
        assert settings.guardrails.max_messages_per_hour == 10

    def test_env_overrides_toml(self, env_override) -> None:
        set_toml_config({"log_level": "DEBUG"})

        with env_override({
            "TASTYCHAT_LOG_LEVEL": "WARNING",
            "TASTYCHAT_GENERATION__LLM_CALLS_PER_HOUR": "7",
        }):
            settings = Settings()

        assert settings.log_level == "WARNING"
        assert settings.generation.llm_calls_per_hour == 7

    def test_constructor_args_win(self, env_override) -> None:
        with env_override({"TASTYCHAT_DEBUG": "false"}):
            assert Settings(debug=True).debug is True

    def test_invalid_log_level_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings(log_level="LOUD")

    def test_context_window_ratios_ordered(self) -> None:
        with pytest.raises(ValidationError):
            ContextWindowConfig(warning_ratio=0.9, critical_ratio=0.8)


class TestGetSettings:
    """Tests for get_settings caching."""

    def test_cached(self, env_override, test_config_dir: Path, mock_toml_files) -> None:
        mock_toml_files({"default.toml": "app_name = 'cached'"})

        with env_override({"TASTYCHAT_CONFIG_DIR": str(test_config_dir)}):
            first = get_settings()
            second = get_settings()

        assert first is second
        assert first.app_name == "cached"

    def test_reload(self, env_override, test_config_dir: Path, mock_toml_files) -> None:
        mock_toml_files({"default.toml": "app_name = 'before'"})

        with env_override({"TASTYCHAT_CONFIG_DIR": str(test_config_dir)}):
            assert get_settings().app_name == "before"
            mock_toml_files({"default.toml": "app_name = 'after'"})
            assert get_settings().app_name == "before"
            assert reload_settings().app_name == "after"

    def test_repository_config_files_load(self, env_override) -> None:
        """The shipped default and test files parse into valid settings."""
        config_dir = Path(__file__).resolve().parents[3] / "config"

        with env_override({"TASTYCHAT_CONFIG_DIR": str(config_dir), "TASTYCHAT_ENV": "test"}):
            settings = get_settings()

        assert settings.providers.llm.model == "mock/test"
        assert settings.providers.llm.fallback_models == []
        assert settings.providers.embedding.provider == "mock"
        assert settings.context_window.max_tokens == 4000
