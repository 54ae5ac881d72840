from abc import ABC, abstractmethod

from inflow.graph.node import Workflow


class WorkflowStore(ABC):
    """
    Abstract Base Class for read-only workflow storage.
    The engine only reads graphs; editing them happens elsewhere.
    """

    @abstractmethod
    def get_workflow(self, workflow_id: str) -> Workflow:
        """
        Load a workflow with its nodes and connections.

        Raises:
            WorkflowNotFoundError: If no workflow has this ID.
        """
        pass
