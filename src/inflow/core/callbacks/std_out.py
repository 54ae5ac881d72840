from typing import Any, Mapping

from loguru import logger

from .base import BaseCallbackHandler


class StdOutCallbackHandler(BaseCallbackHandler):
    """Callback Handler that logs to stdout using loguru."""

    def on_run_start(self, workflow_id: str, run_id: str, **kwargs: Any) -> Any:
        logger.info(f"[Callback] Run Start: workflow={workflow_id} (run_id={run_id})")

    def on_node_start(self, node_id: str, node_type: str, run_id: str, **kwargs: Any) -> Any:
        logger.info(f"[Callback] Node loading: {node_id} [{node_type}] (run_id={run_id})")

    def on_node_end(self, node_id: str, context: Mapping[str, Any], run_id: str, **kwargs: Any) -> Any:
        logger.info(f"[Callback] Node success: {node_id}, context keys={sorted(context)} (run_id={run_id})")

    def on_node_error(self, node_id: str, error: Exception, run_id: str, **kwargs: Any) -> Any:
        logger.error(f"[Callback] Node error: {node_id}: {error} (run_id={run_id})")

    def on_run_end(self, result: Any, run_id: str, **kwargs: Any) -> Any:
        logger.info(f"[Callback] Run End: {result.state.value} (run_id={run_id})")
