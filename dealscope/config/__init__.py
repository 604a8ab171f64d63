"""
Configuration: environment-driven settings and the chat model factory.
"""

from .settings import GatewayConfig, LLMConfig, LLMProviderType, Settings, get_settings
from .providers import DEFAULT_MODEL_NAMES, LLMProvider

__all__ = [
    "Settings",
    "LLMConfig",
    "LLMProviderType",
    "GatewayConfig",
    "get_settings",
    "DEFAULT_MODEL_NAMES",
    "LLMProvider"
]
