"""
Execution Context Pipeline.

The context is a flat mapping of JSON-compatible values accumulated over a
run. It is never mutated in place: each executor receives a read-only view
of the context valid at its turn and returns a complete replacement, which
the orchestrator adopts and hands to the next node.

Keys are not namespaced by node. When two nodes write the same key the
later write wins.
"""

import copy
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Optional

from inflow.errors import ConfigurationError, InvalidExecutorOutputError

Context = Dict[str, Any]


def initial_context(payload: Optional[Mapping[str, Any]] = None) -> Context:
    """Build the starting context from the trigger payload (empty if none)."""
    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise ConfigurationError(
            f"Initial context must be a mapping, got {type(payload).__name__}"
        )
    return copy.deepcopy(dict(payload))


def merge(previous: Mapping[str, Any], delta: Mapping[str, Any]) -> Context:
    """Return a new context: ``previous`` overlaid by ``delta``."""
    merged = dict(previous)
    merged.update(delta)
    return merged


def freeze(context: Mapping[str, Any]) -> Mapping[str, Any]:
    """
    Read-only view handed to an executor.

    The view is over a deep copy, so writes into nested values never reach
    the caller's context, even when the executor then fails.
    """
    return MappingProxyType(copy.deepcopy(dict(context)))


def adopt(returned: Any, node_id: str) -> Context:
    """
    Accept the context an executor returned.

    Raises:
        InvalidExecutorOutputError: If the executor did not return a mapping.
    """
    if not isinstance(returned, Mapping):
        raise InvalidExecutorOutputError(
            f"Executor for node '{node_id}' returned {type(returned).__name__}, expected a mapping",
            details={"node_id": node_id},
        )
    return dict(returned)


@dataclass
class RunTrace:
    """
    Per-run record of what each node did to the context.

    Example:
        trace = RunTrace()
        trace.record_node("fetch", before, after)
        trace.get("fetch")["added_keys"]
    """

    start_time: float = field(default_factory=time.perf_counter)
    _nodes: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    _errors: List[Dict[str, Any]] = field(default_factory=list)

    def record_node(self, node_id: str, before: Mapping[str, Any], after: Mapping[str, Any]) -> None:
        """Record the keys a node added or replaced."""
        changed = [k for k in after if k not in before or before[k] != after[k]]
        self._nodes[node_id] = {
            "added_keys": [k for k in after if k not in before],
            "changed_keys": changed,
            "removed_keys": [k for k in before if k not in after],
            "timestamp": time.perf_counter() - self.start_time,
        }

    def get(self, node_id: str) -> Optional[Dict[str, Any]]:
        return self._nodes.get(node_id)

    def record_error(self, node_id: Optional[str], error: Exception) -> None:
        """Record an error."""
        self._errors.append({
            "node_id": node_id,
            "error": str(error),
            "error_type": type(error).__name__,
            "timestamp": time.perf_counter() - self.start_time,
        })

    @property
    def errors(self) -> List[Dict[str, Any]]:
        return self._errors.copy()

    @property
    def nodes(self) -> Dict[str, Dict[str, Any]]:
        return self._nodes.copy()

    @property
    def elapsed_time(self) -> float:
        return time.perf_counter() - self.start_time

    def to_dict(self) -> Dict[str, Any]:
        return {
            "elapsed_time": self.elapsed_time,
            "nodes": self._nodes.copy(),
            "errors": self._errors.copy(),
        }
