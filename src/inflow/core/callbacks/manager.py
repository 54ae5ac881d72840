from typing import Any, List, Mapping, Optional

from loguru import logger

from .base import BaseCallbackHandler


class CallbackManager(BaseCallbackHandler):
    """Callback Manager that fans events out to a list of handlers.

    A failing handler is logged and skipped; it never affects the run.
    """

    def __init__(self, handlers: Optional[List[BaseCallbackHandler]] = None):
        self.handlers = list(handlers or [])

    def add_handler(self, handler: BaseCallbackHandler):
        self.handlers.append(handler)

    def _dispatch(self, event: str, *args: Any, **kwargs: Any) -> None:
        for handler in self.handlers:
            try:
                getattr(handler, event)(*args, **kwargs)
            except Exception as e:
                logger.error(f"Error in callback handler {handler} ({event}): {e}")

    def on_run_start(self, workflow_id: str, run_id: str, **kwargs: Any) -> Any:
        self._dispatch("on_run_start", workflow_id, run_id, **kwargs)

    def on_node_start(self, node_id: str, node_type: str, run_id: str, **kwargs: Any) -> Any:
        self._dispatch("on_node_start", node_id, node_type, run_id, **kwargs)

    def on_node_end(self, node_id: str, context: Mapping[str, Any], run_id: str, **kwargs: Any) -> Any:
        self._dispatch("on_node_end", node_id, context, run_id, **kwargs)

    def on_node_error(self, node_id: str, error: Exception, run_id: str, **kwargs: Any) -> Any:
        self._dispatch("on_node_error", node_id, error, run_id, **kwargs)

    def on_run_end(self, result: Any, run_id: str, **kwargs: Any) -> Any:
        self._dispatch("on_run_end", result, run_id, **kwargs)
