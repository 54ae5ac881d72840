"""Workflow storage: the read-only port the engine loads graphs from."""

from .base import WorkflowStore
from .in_memory import InMemoryWorkflowStore
from .json_file import JsonWorkflowStore

__all__ = ["InMemoryWorkflowStore", "JsonWorkflowStore", "WorkflowStore"]
