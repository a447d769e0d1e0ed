"""Tests for dataguardian.agents.config: LLM configuration validation."""

from __future__ import annotations

from unittest import mock

from dataguardian.agents.config import (
    AGENT_PRIVACY_SUMMARY,
    AzureOpenAIConfig,
    OpenAIConfig,
    validate_llm_config,
)


class TestAgentNames:
    def test_defined(self) -> None:
        assert isinstance(AGENT_PRIVACY_SUMMARY, str) and AGENT_PRIVACY_SUMMARY


class TestAzureOpenAIConfig:
    def test_defaults_are_empty(self) -> None:
        with mock.patch.dict("os.environ", {}, clear=True):
            cfg = AzureOpenAIConfig()
        assert cfg.validate_config() is False
        assert cfg.api_version == "2024-12-01-preview"

    def test_valid_when_all_set(self) -> None:
        env = {
            "AZURE_OPENAI_ENDPOINT": "https://test.openai.azure.com",
            "AZURE_OPENAI_API_KEY": "key123",
            "AZURE_OPENAI_DEPLOYMENT": "gpt-4o",
            "OPENAI_API_VERSION": "2025-01-01",
        }
        with mock.patch.dict("os.environ", env, clear=True):
            cfg = AzureOpenAIConfig()
        assert cfg.validate_config() is True
        assert cfg.api_version == "2025-01-01"

    def test_invalid_without_deployment(self) -> None:
        env = {
            "AZURE_OPENAI_ENDPOINT": "https://test.openai.azure.com",
            "AZURE_OPENAI_API_KEY": "key123",
        }
        with mock.patch.dict("os.environ", env, clear=True):
            cfg = AzureOpenAIConfig()
        assert cfg.validate_config() is False

    def test_unrelated_variables_ignored(self) -> None:
        env = {"DATAGUARDIAN_PORT": "8080", "AZURE_SOMETHING_ELSE": "x"}
        with mock.patch.dict("os.environ", env, clear=True):
            cfg = AzureOpenAIConfig()
        assert cfg.validate_config() is False


class TestOpenAIConfig:
    def test_defaults_are_empty(self) -> None:
        with mock.patch.dict("os.environ", {}, clear=True):
            cfg = OpenAIConfig()
        assert cfg.validate_config() is False
        assert cfg.base_url is None

    def test_valid_with_api_key(self) -> None:
        env = {"OPENAI_API_KEY": "sk-test-key", "OPENAI_MODEL": "gpt-4o-mini"}
        with mock.patch.dict("os.environ", env, clear=True):
            cfg = OpenAIConfig()
        assert cfg.validate_config() is True
        assert cfg.model == "gpt-4o-mini"


class TestValidateLlmConfig:
    def test_returns_error_when_nothing_set(self) -> None:
        with mock.patch.dict("os.environ", {}, clear=True):
            result = validate_llm_config()
        assert result is not None
        assert "not configured" in result.lower()

    def test_returns_none_when_azure_configured(self) -> None:
        env = {
            "AZURE_OPENAI_ENDPOINT": "https://test.openai.azure.com",
            "AZURE_OPENAI_API_KEY": "key123",
            "AZURE_OPENAI_DEPLOYMENT": "gpt-4o",
        }
        with mock.patch.dict("os.environ", env, clear=True):
            assert validate_llm_config() is None

    def test_returns_none_when_openai_configured(self) -> None:
        with mock.patch.dict("os.environ", {"OPENAI_API_KEY": "sk-test"}, clear=True):
            assert validate_llm_config() is None
