"""Workflow execution API."""

from functools import lru_cache
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from inflow.engine.factory import create_workflow_runner
from inflow.engine.orchestrator import ExecutionResult, WorkflowRunner
from inflow.errors import (
    InvalidExecutorOutputError,
    PermanentError,
    StepRetriesExhaustedError,
    WorkflowNotFoundError,
)

router = APIRouter(prefix="/api/workflows", tags=["workflows"])


class ExecuteRequest(BaseModel):
    initialContext: Optional[Dict[str, Any]] = None
    initialData: Optional[Dict[str, Any]] = Field(default=None, description="Alias of initialContext")
    runId: Optional[str] = Field(default=None, description="Resume an earlier run")


class ExecuteResponse(BaseModel):
    workflowId: str
    runId: str
    result: Dict[str, Any]


@lru_cache(maxsize=1)
def _default_runner() -> WorkflowRunner:
    return create_workflow_runner()


def get_runner() -> WorkflowRunner:
    """Dependency injection: the process-wide workflow runner."""
    return _default_runner()


def status_for(result: ExecutionResult) -> int:
    """HTTP status of a failed run."""
    error = result.error
    if isinstance(error, WorkflowNotFoundError):
        return 404
    if isinstance(error, StepRetriesExhaustedError):
        return 502
    if isinstance(error, InvalidExecutorOutputError):
        return 500
    # Cycles, unknown node types and bad configuration
    if isinstance(error, PermanentError):
        return 422
    return 500


@router.post("/{workflow_id}/execute", response_model=ExecuteResponse)
async def execute(
    workflow_id: str,
    req: Optional[ExecuteRequest] = None,
    runner: WorkflowRunner = Depends(get_runner),
):
    """Run a workflow and return its final context."""
    req = req or ExecuteRequest()
    initial = req.initialContext if req.initialContext is not None else req.initialData
    result = await runner.run(workflow_id, initial, run_id=req.runId)

    if not result.success:
        raise HTTPException(
            status_code=status_for(result),
            detail={
                "error_type": result.error_kind,
                "message": result.error.message if result.error else None,
                "runId": result.run_id,
                "failedNodeId": result.failed_node_id,
                "context": result.context,
            },
        )

    return ExecuteResponse(workflowId=workflow_id, runId=result.run_id, result=result.context)
