"""Runner factory wiring storage, executors and the step log from settings."""

from typing import Any, List, Optional

from loguru import logger

from inflow.core.callbacks import BaseCallbackHandler
from inflow.executors.registry import ExecutorRegistry, create_default_registry
from inflow.steps.log import SQLiteExecutionLog
from inflow.steps.retry import RetryConfig
from inflow.steps.runner import DurableStepRunner
from inflow.storage.base import WorkflowStore
from inflow.storage.json_file import JsonWorkflowStore
from .orchestrator import WorkflowRunner


def create_workflow_runner(
    settings: Any = None,
    store: Optional[WorkflowStore] = None,
    registry: Optional[ExecutorRegistry] = None,
    callbacks: Optional[List[BaseCallbackHandler]] = None,
) -> WorkflowRunner:
    """
    Build a runner backed by the SQLite execution log.

    Args:
        settings: Application settings; the global settings when omitted.
        store: Workflow store; a JsonWorkflowStore over WORKFLOWS_DIR when omitted.
        registry: Executor registry; the built-in executors when omitted.
        callbacks: Status handlers.
    """
    if settings is None:
        from inflow.config.settings import settings

    store = store or JsonWorkflowStore(settings.WORKFLOWS_DIR)
    registry = registry or create_default_registry(settings)
    log = SQLiteExecutionLog(db_path=settings.STEP_LOG_PATH)
    retry_config = RetryConfig.from_settings(settings)

    logger.info(
        f"Creating workflow runner: step log={settings.STEP_LOG_PATH}, "
        f"max attempts={retry_config.max_attempts}"
    )
    return WorkflowRunner(
        store=store,
        registry=registry,
        step_runner_factory=DurableStepRunner.factory(log, retry_config),
        callbacks=callbacks,
    )
