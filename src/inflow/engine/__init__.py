"""
Workflow Engine Module.

The run orchestrator, its result types and the trigger entry point.
"""

from .factory import create_workflow_runner
from .orchestrator import (
    ExecutionResult,
    RunState,
    WorkflowRun,
    WorkflowRunner,
    execute_workflow,
)

__all__ = [
    "ExecutionResult",
    "RunState",
    "WorkflowRun",
    "WorkflowRunner",
    "create_workflow_runner",
    "execute_workflow",
]
