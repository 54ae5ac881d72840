"""
Executor Dispatch Registry.

Maps node types to executors and to the configuration model each node
type's payload is validated against. A registry is built explicitly and
passed to the runner; tests build their own with fake executors.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Type, Union

from loguru import logger
from pydantic import BaseModel, ValidationError

from inflow.config.models import AgentNodeConfig, HttpRequestConfig, ManualTriggerConfig
from inflow.errors import ConfigurationError, UnknownNodeTypeError
from inflow.graph.node import NodeType
from .agent import AgentExecutor
from .base import NodeExecutor
from .http_request import HttpRequestExecutor
from .manual_trigger import manual_trigger_executor

NodeTypeKey = Union[NodeType, str]


def _key(node_type: NodeTypeKey) -> str:
    return node_type.value if isinstance(node_type, NodeType) else str(node_type)


@dataclass(frozen=True)
class ExecutorSpec:
    """An executor and the config model for its node type (None = raw dict)."""
    executor: NodeExecutor
    config_model: Optional[Type[BaseModel]] = None


class ExecutorRegistry:
    """
    Registry of node-type executors.

    Example:
        registry = ExecutorRegistry()
        registry.register(NodeType.HTTP_REQUEST, HttpRequestExecutor(), HttpRequestConfig)

        executor = registry.resolve(node.type)
        config = registry.validate_config(node.type, node.data)
    """

    def __init__(self, executors: Optional[Mapping[NodeTypeKey, Union[ExecutorSpec, NodeExecutor]]] = None):
        self._specs: Dict[str, ExecutorSpec] = {}
        for node_type, entry in (executors or {}).items():
            if isinstance(entry, ExecutorSpec):
                self.register(node_type, entry.executor, entry.config_model)
            else:
                self.register(node_type, entry)

    def register(
        self,
        node_type: NodeTypeKey,
        executor: NodeExecutor,
        config_model: Optional[Type[BaseModel]] = None,
    ) -> "ExecutorRegistry":
        """
        Register (or replace) the executor for a node type.

        Returns:
            Self for chaining.
        """
        key = _key(node_type)
        if key in self._specs:
            logger.warning(f"Replacing executor for node type {key}")
        self._specs[key] = ExecutorSpec(executor=executor, config_model=config_model)
        logger.debug(f"Registered executor for node type {key}")
        return self

    def resolve(self, node_type: NodeTypeKey) -> NodeExecutor:
        """
        Get the executor for a node type.

        Raises:
            UnknownNodeTypeError: If nothing is registered for the type.
        """
        return self._spec(node_type).executor

    def validate_config(self, node_type: NodeTypeKey, data: Optional[Mapping[str, Any]]) -> Any:
        """
        Validate a node's configuration payload.

        Returns:
            The config model instance, or a plain dict when the type has
            no config model.

        Raises:
            UnknownNodeTypeError: If nothing is registered for the type.
            ConfigurationError: If the payload does not fit the model.
        """
        spec = self._spec(node_type)
        payload = dict(data or {})
        if spec.config_model is None:
            return payload

        try:
            return spec.config_model.model_validate(payload)
        except ValidationError as e:
            problems = [
                {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
                for err in e.errors()
            ]
            summary = "; ".join(f"{p['field']}: {p['message']}" for p in problems)
            raise ConfigurationError(
                f"Invalid configuration for {_key(node_type)} node: {summary}",
                details={"node_type": _key(node_type), "errors": problems},
                original_error=e,
            ) from e

    def node_types(self) -> List[str]:
        return list(self._specs)

    def __contains__(self, node_type: object) -> bool:
        return isinstance(node_type, (NodeType, str)) and _key(node_type) in self._specs

    def _spec(self, node_type: NodeTypeKey) -> ExecutorSpec:
        try:
            return self._specs[_key(node_type)]
        except KeyError:
            raise UnknownNodeTypeError(_key(node_type)) from None


def create_default_registry(settings: Any = None) -> ExecutorRegistry:
    """
    Build a registry holding the built-in executors.

    Args:
        settings: Settings supplying HTTP timeout and provider API keys;
            the global settings when omitted.
    """
    if settings is None:
        from inflow.config.settings import settings

    api_keys = {
        "openai": settings.OPENAI_API_KEY,
        "anthropic": settings.ANTHROPIC_API_KEY,
        "google": settings.GOOGLE_API_KEY,
    }

    registry = ExecutorRegistry()
    registry.register(NodeType.INITIAL, manual_trigger_executor, ManualTriggerConfig)
    registry.register(NodeType.MANUAL_TRIGGER, manual_trigger_executor, ManualTriggerConfig)
    registry.register(NodeType.HTTP_REQUEST, HttpRequestExecutor(timeout=settings.HTTP_TIMEOUT), HttpRequestConfig)
    registry.register(NodeType.AGENT_NODE, AgentExecutor(api_keys=api_keys), AgentNodeConfig)

    logger.info(f"Created executor registry: {registry.node_types()}")
    return registry
