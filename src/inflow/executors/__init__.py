"""
Node Executors.

The executor contract, the dispatch registry and the built-in executors.
"""

from .agent import PROVIDERS, AgentExecutor, ProviderSpec
from .base import NodeExecutor
from .http_request import HttpRequestExecutor
from .manual_trigger import manual_trigger_executor
from .registry import ExecutorRegistry, ExecutorSpec, create_default_registry

__all__ = [
    "PROVIDERS",
    "AgentExecutor",
    "ExecutorRegistry",
    "ExecutorSpec",
    "HttpRequestExecutor",
    "NodeExecutor",
    "ProviderSpec",
    "create_default_registry",
    "manual_trigger_executor",
]
