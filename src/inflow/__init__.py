"""
Inflow - A DAG-based workflow execution engine.

Orders a workflow's nodes by their dependencies, dispatches each node to
the executor registered for its type, threads a shared context from node
to node and records every side-effecting step so retried or resumed runs
do not repeat completed work.
"""

__version__ = "0.1.0"

# Graph
from .graph import Connection, Node, NodeType, Workflow, order

# Context pipeline and callbacks
from .core import BaseCallbackHandler, CallbackManager, RunTrace, StdOutCallbackHandler, merge

# Templates
from .templating import interpolate, interpolate_fields

# Executors
from .executors import (
    AgentExecutor,
    ExecutorRegistry,
    HttpRequestExecutor,
    NodeExecutor,
    create_default_registry,
    manual_trigger_executor,
)

# Durable steps
from .steps import (
    DurableStepRunner,
    ExecutionLog,
    InMemoryExecutionLog,
    RetryConfig,
    SQLiteExecutionLog,
    StepRunner,
)

# Storage
from .storage import InMemoryWorkflowStore, JsonWorkflowStore, WorkflowStore

# Engine
from .engine import (
    ExecutionResult,
    RunState,
    WorkflowRunner,
    create_workflow_runner,
    execute_workflow,
)

# Errors
from .errors import (
    ConfigurationError,
    CycleError,
    InflowError,
    PermanentError,
    RetryableError,
    StepRetriesExhaustedError,
    TransientError,
    UnknownNodeTypeError,
    WorkflowExecutionError,
    WorkflowNotFoundError,
)

__all__ = [
    # Version
    "__version__",
    # Graph
    "Connection",
    "Node",
    "NodeType",
    "Workflow",
    "order",
    # Context
    "BaseCallbackHandler",
    "CallbackManager",
    "RunTrace",
    "StdOutCallbackHandler",
    "merge",
    # Templates
    "interpolate",
    "interpolate_fields",
    # Executors
    "AgentExecutor",
    "ExecutorRegistry",
    "HttpRequestExecutor",
    "NodeExecutor",
    "create_default_registry",
    "manual_trigger_executor",
    # Steps
    "DurableStepRunner",
    "ExecutionLog",
    "InMemoryExecutionLog",
    "RetryConfig",
    "SQLiteExecutionLog",
    "StepRunner",
    # Storage
    "InMemoryWorkflowStore",
    "JsonWorkflowStore",
    "WorkflowStore",
    # Engine
    "ExecutionResult",
    "RunState",
    "WorkflowRunner",
    "create_workflow_runner",
    "execute_workflow",
    # Errors
    "ConfigurationError",
    "CycleError",
    "InflowError",
    "PermanentError",
    "RetryableError",
    "StepRetriesExhaustedError",
    "TransientError",
    "UnknownNodeTypeError",
    "WorkflowExecutionError",
    "WorkflowNotFoundError",
]
