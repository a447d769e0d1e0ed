"""
LLM configuration for the privacy summary agent.

Centralises the environment variable names, default values and
configuration validation for both Azure OpenAI and standard
OpenAI backends.

Uses ``pydantic_settings.BaseSettings`` for automatic environment
variable binding, type coercion, and validation.
"""

from __future__ import annotations

import pydantic
import pydantic_settings

# ── Agent names ─────────────────────────────────────────────────────
AGENT_PRIVACY_SUMMARY = "PrivacySummaryAgent"


class AzureOpenAIConfig(pydantic_settings.BaseSettings):
    """Configuration for the Azure OpenAI chat client.

    Attributes:
        endpoint: Azure OpenAI service endpoint URL.
        api_key: API key for authentication.
        api_version: API version to use.
        deployment: Model deployment name.
    """

    model_config = pydantic_settings.SettingsConfigDict(extra="ignore")

    endpoint: str = pydantic.Field(default="", validation_alias="AZURE_OPENAI_ENDPOINT")
    api_key: str = pydantic.Field(default="", validation_alias="AZURE_OPENAI_API_KEY")
    api_version: str = pydantic.Field(default="2024-12-01-preview", validation_alias="OPENAI_API_VERSION")
    deployment: str = pydantic.Field(default="", validation_alias="AZURE_OPENAI_DEPLOYMENT")

    def validate_config(self) -> bool:
        """True when endpoint, api_key, and deployment are all set."""
        return bool(self.endpoint and self.api_key and self.deployment)


class OpenAIConfig(pydantic_settings.BaseSettings):
    """Configuration for the standard OpenAI chat client.

    Attributes:
        api_key: OpenAI API key.
        model: Model name (e.g. ``gpt-4o-mini``).
        base_url: Optional custom base URL.
    """

    model_config = pydantic_settings.SettingsConfigDict(extra="ignore")

    api_key: str = pydantic.Field(default="", validation_alias="OPENAI_API_KEY")
    model: str = pydantic.Field(default="", validation_alias="OPENAI_MODEL")
    base_url: str | None = pydantic.Field(default=None, validation_alias="OPENAI_BASE_URL")

    def validate_config(self) -> bool:
        """True when the API key is set."""
        return bool(self.api_key)


def validate_llm_config() -> str | None:
    """Check whether an LLM backend is configured.

    Returns:
        An explanatory message when no backend is configured,
        or ``None`` if one is.
    """
    if AzureOpenAIConfig().validate_config():
        return None
    if OpenAIConfig().validate_config():
        return None

    return (
        "LLM is not configured. Set either:\n"
        "  Azure OpenAI: AZURE_OPENAI_ENDPOINT, AZURE_OPENAI_API_KEY,"
        " AZURE_OPENAI_DEPLOYMENT\n"
        "  Standard OpenAI: OPENAI_API_KEY (and optionally"
        " OPENAI_MODEL, OPENAI_BASE_URL)"
    )
