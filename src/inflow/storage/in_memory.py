from typing import Dict, Iterable, Optional

from inflow.errors import WorkflowNotFoundError
from inflow.graph.node import Workflow
from .base import WorkflowStore


class InMemoryWorkflowStore(WorkflowStore):
    """
    Simple In-Memory Workflow Store.
    Not persistent.
    """

    def __init__(self, workflows: Optional[Iterable[Workflow]] = None):
        self._store: Dict[str, Workflow] = {}
        for workflow in workflows or []:
            self.add(workflow)

    def add(self, workflow: Workflow) -> None:
        self._store[workflow.id] = workflow

    def get_workflow(self, workflow_id: str) -> Workflow:
        try:
            return self._store[workflow_id]
        except KeyError:
            raise WorkflowNotFoundError(workflow_id) from None
