"""Generation provider configuration and clients."""

from .config import ProviderConfig, load_provider_config
from .text import GenerationResponse, ProviderError, TextProvider

__all__ = [
    "ProviderConfig",
    "load_provider_config",
    "GenerationResponse",
    "ProviderError",
    "TextProvider",
]
