"""Provider configuration loading and validation."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file
load_dotenv()

PROJECT_ROOT = Path(__file__).parent.parent.parent.parent


class AppSettings(BaseSettings):
    """Process-level settings read from WP_AUTOPUBLISHER_* environment variables."""

    model_config = SettingsConfigDict(env_prefix="WP_AUTOPUBLISHER_", env_file=".env", extra="ignore")

    config_path: Path = PROJECT_ROOT / "config" / "providers.yaml"
    data_dir: Path = PROJECT_ROOT / "data"
    log_dir: Path = PROJECT_ROOT / "logs"


class ProviderSettings(BaseModel):
    """Global provider settings."""

    timeout_seconds: int = 60
    max_retries: int = 3
    retry_delay_seconds: int = 2
    fallback_on_error: bool = True


class TextProviderConfig(BaseModel):
    """Configuration for a text generation provider.

    ``type`` selects the backend: ``perplexity`` talks to an
    OpenAI-compatible chat completions endpoint directly, anything else is
    routed through Agno (openai, anthropic, groq, gemini, ollama, ...).
    """

    priority: int
    enabled: bool = True
    type: str = "perplexity"
    model: str
    base_url: str | None = None
    base_url_env: str | None = None
    api_key: str | None = None
    api_key_env: str | None = None
    timeout: int = 120

    def get_api_key(self) -> str | None:
        """Get API key from config or environment."""
        if self.api_key:
            return self.api_key
        if self.api_key_env:
            return os.getenv(self.api_key_env)
        return None

    def get_base_url(self) -> str | None:
        """Get base URL from config or environment."""
        if self.base_url:
            return self.base_url
        if self.base_url_env:
            return os.getenv(self.base_url_env)
        return None


class ImageProviderConfig(BaseModel):
    """Configuration for an image acquisition stage."""

    priority: int
    enabled: bool = True
    type: str  # unsplash, dalle, placeholder
    model: str | None = None
    api_key_env: str | None = None
    timeout: int = 60
    settings: dict[str, Any] = Field(default_factory=dict)

    def get_api_key(self) -> str | None:
        """Get API key from environment."""
        if self.api_key_env:
            return os.getenv(self.api_key_env)
        return None


class WordPressSiteConfig(BaseModel):
    """Credentials and defaults for one WordPress site."""

    site_id: str
    site_url: str
    username: str
    password: str | None = None
    password_env: str | None = None
    default_status: str = "draft"
    author: int | None = None
    custom_fields: dict[str, Any] = Field(default_factory=dict)

    def get_password(self) -> str | None:
        """Get application password from config or environment."""
        if self.password:
            return self.password
        if self.password_env:
            return os.getenv(self.password_env)
        return None


class GenerationDefaults(BaseModel):
    """Default style and model parameters for article generation."""

    model: str = "sonar-pro"
    temperature: float = 0.7
    max_tokens: int | None = None
    language: str = "English"
    tone: str = "professional"
    style: str = "journalistic"
    target_audience: str = "general"
    generate_featured_image: bool = True
    image_size: str = "large"


def _default_text_providers() -> dict[str, TextProviderConfig]:
    return {
        "perplexity": TextProviderConfig(
            priority=1,
            type="perplexity",
            model="sonar-pro",
            base_url="https://api.perplexity.ai",
            api_key_env="PERPLEXITY_API_KEY",
        ),
    }


def _default_image_providers() -> dict[str, ImageProviderConfig]:
    return {
        "unsplash": ImageProviderConfig(priority=1, type="unsplash", api_key_env="UNSPLASH_ACCESS_KEY", timeout=30),
        "dalle": ImageProviderConfig(
            priority=2,
            type="dalle",
            model="dall-e-3",
            api_key_env="OPENAI_API_KEY",
            timeout=90,
            settings={"size": "1792x1024", "quality": "standard", "style": "natural"},
        ),
        "placeholder": ImageProviderConfig(priority=3, type="placeholder"),
    }


class ProviderConfig(BaseModel):
    """Full provider configuration."""

    provider_settings: ProviderSettings = Field(default_factory=ProviderSettings)
    text_providers: dict[str, TextProviderConfig] = Field(default_factory=_default_text_providers)
    image_providers: dict[str, ImageProviderConfig] = Field(default_factory=_default_image_providers)
    wordpress_sites: dict[str, WordPressSiteConfig] = Field(default_factory=dict)
    generation: GenerationDefaults = Field(default_factory=GenerationDefaults)

    def get_enabled_text_providers(self) -> list[tuple[str, TextProviderConfig]]:
        """Get enabled text providers sorted by priority."""
        enabled = [
            (name, config)
            for name, config in self.text_providers.items()
            if config.enabled
        ]
        return sorted(enabled, key=lambda x: x[1].priority)

    def get_enabled_image_providers(self) -> list[tuple[str, ImageProviderConfig]]:
        """Get enabled image providers sorted by priority."""
        enabled = [
            (name, config)
            for name, config in self.image_providers.items()
            if config.enabled
        ]
        return sorted(enabled, key=lambda x: x[1].priority)

    def get_wordpress_site(self, site_id: str) -> WordPressSiteConfig | None:
        """Look up a configured WordPress site by id."""
        return self.wordpress_sites.get(site_id)


def load_provider_config(config_path: Path | None = None) -> ProviderConfig:
    """Load provider configuration from YAML file."""
    if config_path is None:
        config_path = AppSettings().config_path

    if not config_path.exists():
        # Return default config if file doesn't exist
        return ProviderConfig()

    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    # Site ids default to their mapping keys
    for site_id, site in (data.get("wordpress_sites") or {}).items():
        if isinstance(site, dict):
            site.setdefault("site_id", site_id)

    return ProviderConfig(**data)
