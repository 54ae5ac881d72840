from abc import ABC
from typing import Any, Mapping


class BaseCallbackHandler(ABC):
    """
    Base callback handler for run and node status events.

    Node events correspond to the status an editor shows on a node while a
    run is in flight: ``loading`` on start, then ``success`` or ``error``.
    """

    def on_run_start(self, workflow_id: str, run_id: str, **kwargs: Any) -> Any:
        """Run when a workflow run starts preparing."""
        pass

    def on_node_start(self, node_id: str, node_type: str, run_id: str, **kwargs: Any) -> Any:
        """Run when a node starts executing."""
        pass

    def on_node_end(self, node_id: str, context: Mapping[str, Any], run_id: str, **kwargs: Any) -> Any:
        """Run when a node returns its context."""
        pass

    def on_node_error(self, node_id: str, error: Exception, run_id: str, **kwargs: Any) -> Any:
        """Run when a node fails."""
        pass

    def on_run_end(self, result: Any, run_id: str, **kwargs: Any) -> Any:
        """Run when a workflow run reaches a terminal state."""
        pass
