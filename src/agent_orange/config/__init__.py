"""Configuration loading for agent_orange."""

from agent_orange.config.settings import (
    LoggingConfig,
    RelayConfig,
    Settings,
    StoreConfig,
    VoiceConfig,
    WebConfig,
    load_settings,
)

__all__ = [
    "LoggingConfig",
    "RelayConfig",
    "Settings",
    "StoreConfig",
    "VoiceConfig",
    "WebConfig",
    "load_settings",
]
