"""
Workflow Run Orchestrator.

Drives one workflow run through its states:

    PENDING -> PREPARING -> EXECUTING -> SUCCEEDED | FAILED

Preparing loads the graph and orders it inside the durable
``prepare-workflow`` step. Executing runs the ordered nodes strictly one
after another, threading the context from each executor to the next. The
first failure ends the run; nodes after it never execute.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional
from uuid import uuid4

from inflow.core.callbacks import BaseCallbackHandler, CallbackManager
from inflow.core.context import Context, RunTrace, adopt, freeze, initial_context
from inflow.errors import (
    ConfigurationError,
    InflowError,
    RunStateError,
    WorkflowExecutionError,
    wrap_exception,
)
from inflow.executors.registry import ExecutorRegistry
from inflow.graph.node import Node, NodeType
from inflow.graph.scheduler import order
from inflow.steps.log import InMemoryExecutionLog
from inflow.steps.runner import DurableStepRunner, StepRunnerFactory
from inflow.storage.base import WorkflowStore

logger = logging.getLogger(__name__)

PREPARE_STEP = "prepare-workflow"


class RunState(str, Enum):
    """Lifecycle states of a workflow run."""
    PENDING = "pending"
    PREPARING = "preparing"
    EXECUTING = "executing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (RunState.SUCCEEDED, RunState.FAILED)


_TRANSITIONS: Dict[RunState, frozenset] = {
    RunState.PENDING: frozenset({RunState.PREPARING, RunState.FAILED}),
    RunState.PREPARING: frozenset({RunState.EXECUTING, RunState.FAILED}),
    RunState.EXECUTING: frozenset({RunState.SUCCEEDED, RunState.FAILED}),
    RunState.SUCCEEDED: frozenset(),
    RunState.FAILED: frozenset(),
}


@dataclass
class ExecutionResult:
    """
    Terminal record of a workflow run.

    Attributes:
        run_id: Run identifier (reuse it to resume the run).
        workflow_id: Workflow that was run.
        state: SUCCEEDED or FAILED.
        context: Final context, or the context as of the last node that
            completed when the run failed.
        error: The failure, classified as an InflowError.
        failed_node_id: Node that failed, None for preparation failures.
        execution_path: IDs of the nodes that completed, in order.
        trace: Per-node context changes and errors.
        elapsed_time: Wall time of the run in seconds.
    """
    run_id: str
    workflow_id: str
    state: RunState
    context: Context = field(default_factory=dict)
    error: Optional[InflowError] = None
    failed_node_id: Optional[str] = None
    execution_path: List[str] = field(default_factory=list)
    trace: Dict[str, Any] = field(default_factory=dict)
    elapsed_time: float = 0.0

    @property
    def success(self) -> bool:
        return self.state == RunState.SUCCEEDED

    @property
    def error_kind(self) -> Optional[str]:
        return type(self.error).__name__ if self.error is not None else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "runId": self.run_id,
            "workflowId": self.workflow_id,
            "state": self.state.value,
            "result": self.context,
            "error": self.error.to_dict() if self.error is not None else None,
            "failedNodeId": self.failed_node_id,
            "executionPath": list(self.execution_path),
            "elapsedTime": self.elapsed_time,
        }


class WorkflowRun:
    """State holder of a single run; rejects illegal transitions."""

    def __init__(self, workflow_id: str, run_id: str):
        self.workflow_id = workflow_id
        self.run_id = run_id
        self.state = RunState.PENDING

    def transition(self, new_state: RunState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise RunStateError(
                f"Illegal run state transition {self.state.value} -> {new_state.value}",
                details={"run_id": self.run_id},
            )
        logger.debug(f"[{self.run_id}] {self.state.value} -> {new_state.value}")
        self.state = new_state


class WorkflowRunner:
    """
    Executes workflow runs.

    Args:
        store: Where workflow graphs are loaded from.
        registry: Node type -> executor mapping.
        step_runner_factory: Builds the step runner session of a run from
            its run ID. Defaults to a durable runner over one in-memory
            log shared by all runs of this runner. That log keeps every
            run's steps for the runner's lifetime and is never cleared;
            long-lived processes should pass a factory over a persistent
            or clearable log.
        callbacks: Status handlers notified as nodes run.

    Example:
        runner = WorkflowRunner(store, create_default_registry())
        result = await runner.run("wf-1", {"user": {"name": "Ana"}})
        if result.success:
            print(result.context)
    """

    def __init__(
        self,
        store: WorkflowStore,
        registry: ExecutorRegistry,
        step_runner_factory: Optional[StepRunnerFactory] = None,
        callbacks: Optional[List[BaseCallbackHandler]] = None,
    ):
        self.store = store
        self.registry = registry
        self.step_runner_factory = step_runner_factory or DurableStepRunner.factory(InMemoryExecutionLog())
        self.callbacks = CallbackManager(callbacks)

    async def run(
        self,
        workflow_id: str,
        initial_data: Optional[Mapping[str, Any]] = None,
        run_id: Optional[str] = None,
    ) -> ExecutionResult:
        """
        Run a workflow to a terminal state.

        Failures do not raise; they come back as a FAILED result.

        Args:
            workflow_id: Workflow to run.
            initial_data: Trigger payload that seeds the context.
            run_id: Reuse a previous run's ID to resume it; completed steps
                return their recorded results.

        Returns:
            ExecutionResult in SUCCEEDED or FAILED state.
        """
        run = WorkflowRun(workflow_id, run_id or uuid4().hex)
        trace = RunTrace()
        context: Context = {}
        execution_path: List[str] = []

        def _finish(error: Optional[Exception] = None, node_id: Optional[str] = None) -> ExecutionResult:
            if error is not None:
                classified = wrap_exception(error)
                trace.record_error(node_id, classified)
                run.transition(RunState.FAILED)
            else:
                classified = None
                run.transition(RunState.SUCCEEDED)
            result = ExecutionResult(
                run_id=run.run_id,
                workflow_id=workflow_id,
                state=run.state,
                context=context,
                error=classified,
                failed_node_id=node_id,
                execution_path=execution_path,
                trace=trace.to_dict(),
                elapsed_time=trace.elapsed_time,
            )
            self.callbacks.on_run_end(result, run.run_id)
            return result

        self.callbacks.on_run_start(workflow_id, run.run_id)

        try:
            if not workflow_id:
                raise ConfigurationError("Workflow ID is missing")
            context = initial_context(initial_data)
        except InflowError as e:
            logger.error(f"[{run.run_id}] Run rejected: {e}")
            return _finish(e)

        step_runner = self.step_runner_factory(run.run_id)

        # Preparing
        run.transition(RunState.PREPARING)
        try:
            nodes = await self._prepare(workflow_id, step_runner)
        except Exception as e:
            logger.error(f"[{run.run_id}] Preparing workflow {workflow_id} failed: {e}")
            return _finish(e)

        # Executing
        run.transition(RunState.EXECUTING)
        logger.info(f"[{run.run_id}] Executing workflow {workflow_id}: {[n.id for n in nodes]}")

        for node in nodes:
            node_type = node.type.value if isinstance(node.type, NodeType) else str(node.type)
            self.callbacks.on_node_start(node.id, node_type, run.run_id)

            try:
                executor = self.registry.resolve(node.type)
                config = self.registry.validate_config(node.type, node.data)
                returned = await executor(
                    config=config,
                    node_id=node.id,
                    context=freeze(context),
                    step_runner=step_runner,
                )
                next_context = adopt(returned, node.id)
            except Exception as e:
                logger.exception(f"[{run.run_id}] Node {node.id} failed: {e}")
                self.callbacks.on_node_error(node.id, e, run.run_id)
                return _finish(e, node_id=node.id)

            trace.record_node(node.id, context, next_context)
            context = next_context
            execution_path.append(node.id)
            self.callbacks.on_node_end(node.id, freeze(context), run.run_id)

        logger.info(f"[{run.run_id}] Workflow {workflow_id} succeeded in {trace.elapsed_time:.2f}s")
        return _finish()

    async def _prepare(self, workflow_id: str, step_runner) -> List[Node]:
        """Load the graph and order it inside the durable prepare step."""

        def _load_and_order() -> List[Dict[str, Any]]:
            workflow = self.store.get_workflow(workflow_id)
            workflow.validate()
            return [node.to_dict() for node in order(workflow.nodes, workflow.connections)]

        ordered = await step_runner.run(PREPARE_STEP, _load_and_order)
        return [Node.from_dict(payload) for payload in ordered]


async def execute_workflow(event: Mapping[str, Any], runner: WorkflowRunner) -> Dict[str, Any]:
    """
    Trigger entry point.

    Args:
        event: ``{"workflowId": ..., "initialContext": {...}?, "runId": ...?}``.
            ``initialData`` is accepted as an alias of ``initialContext``.
        runner: The runner executing the workflow.

    Returns:
        ``{"workflowId": ..., "result": final_context}``

    Raises:
        WorkflowExecutionError: If the run ends FAILED; the exception
            carries the ExecutionResult.
    """
    workflow_id = event.get("workflowId")
    initial = event.get("initialContext")
    if initial is None:
        initial = event.get("initialData")
    result = await runner.run(workflow_id, initial, run_id=event.get("runId"))
    if not result.success:
        raise WorkflowExecutionError(result)
    return {"workflowId": workflow_id, "result": result.context}
