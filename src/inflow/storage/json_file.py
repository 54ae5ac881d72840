"""
JSON File Workflow Store.

Reads workflows from a directory holding one ``<workflow_id>.json`` file
per workflow:

    {
      "id": "wf-1",
      "name": "Fetch and summarize",
      "nodes": [
        {"id": "a", "type": "MANUAL_TRIGGER", "data": {}},
        {"id": "b", "type": "HTTP_REQUEST", "data": {"endpoint": "https://..."}}
      ],
      "connections": [{"fromNodeId": "a", "toNodeId": "b"}]
    }
"""

import json
import logging
import re
from pathlib import Path
from typing import List, Union

from inflow.errors import InvalidWorkflowError, WorkflowNotFoundError
from inflow.graph.node import Workflow
from .base import WorkflowStore

logger = logging.getLogger(__name__)

_SAFE_ID = re.compile(r"^[A-Za-z0-9_.-]+$")


class JsonWorkflowStore(WorkflowStore):
    """Workflow store backed by a directory of JSON files."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def _path_for(self, workflow_id: str) -> Path:
        if not workflow_id or not _SAFE_ID.match(workflow_id) or workflow_id.startswith("."):
            raise WorkflowNotFoundError(workflow_id)
        return self.directory / f"{workflow_id}.json"

    def get_workflow(self, workflow_id: str) -> Workflow:
        path = self._path_for(workflow_id)
        if not path.is_file():
            raise WorkflowNotFoundError(workflow_id)

        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
            payload.setdefault("id", workflow_id)
            workflow = Workflow.from_dict(payload)
        except (json.JSONDecodeError, KeyError, TypeError, AttributeError) as e:
            raise InvalidWorkflowError(
                f"Workflow file {path.name} is malformed",
                details={"workflow_id": workflow_id, "path": str(path)},
                original_error=e,
            ) from e

        logger.debug(f"Loaded workflow {workflow_id} from {path}")
        return workflow

    def list_ids(self) -> List[str]:
        if not self.directory.is_dir():
            return []
        return sorted(p.stem for p in self.directory.glob("*.json"))
