"""Configuration system for Inflow."""

from .models import AgentNodeConfig, HttpRequestConfig, ManualTriggerConfig, NodeConfig
from .settings import Settings, load_settings, settings

__all__ = [
    "AgentNodeConfig",
    "HttpRequestConfig",
    "ManualTriggerConfig",
    "NodeConfig",
    "Settings",
    "load_settings",
    "settings",
]
