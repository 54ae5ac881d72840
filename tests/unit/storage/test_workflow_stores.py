"""Tests for the workflow stores."""

import json

import pytest

from inflow.errors import InvalidWorkflowError, WorkflowNotFoundError
from inflow.graph.node import Connection, NodeType
from inflow.storage.in_memory import InMemoryWorkflowStore
from inflow.storage.json_file import JsonWorkflowStore
from tests.utils.builders import WorkflowBuilder


@pytest.fixture
def workflows_dir(tmp_path):
    payload = {
        "id": "wf-1",
        "name": "Fetch",
        "nodes": [
            {"id": "a", "type": "MANUAL_TRIGGER", "data": {}},
            {"id": "b", "type": "HTTP_REQUEST", "data": {"endpoint": "https://x"}},
        ],
        "connections": [{"fromNodeId": "a", "toNodeId": "b"}],
    }
    (tmp_path / "wf-1.json").write_text(json.dumps(payload), encoding="utf-8")
    return tmp_path


class TestInMemoryWorkflowStore:
    """Tests for InMemoryWorkflowStore."""

    def test_get(self):
        workflow = WorkflowBuilder("wf-1").node("a").build()
        store = InMemoryWorkflowStore([workflow])
        assert store.get_workflow("wf-1") is workflow

    def test_add(self):
        store = InMemoryWorkflowStore()
        store.add(WorkflowBuilder("wf-2").build())
        assert store.get_workflow("wf-2").id == "wf-2"

    def test_missing(self):
        with pytest.raises(WorkflowNotFoundError) as exc_info:
            InMemoryWorkflowStore().get_workflow("nope")
        assert exc_info.value.workflow_id == "nope"


class TestJsonWorkflowStore:
    """Tests for JsonWorkflowStore."""

    def test_load(self, workflows_dir):
        workflow = JsonWorkflowStore(workflows_dir).get_workflow("wf-1")
        assert workflow.name == "Fetch"
        assert [n.type for n in workflow.nodes] == [NodeType.MANUAL_TRIGGER, NodeType.HTTP_REQUEST]
        assert workflow.connections == [Connection("a", "b")]

    def test_missing_file(self, workflows_dir):
        with pytest.raises(WorkflowNotFoundError):
            JsonWorkflowStore(workflows_dir).get_workflow("wf-404")

    @pytest.mark.parametrize("workflow_id", ["../secret", "a/b", "", ".hidden"])
    def test_unsafe_ids_not_found(self, workflows_dir, workflow_id):
        with pytest.raises(WorkflowNotFoundError):
            JsonWorkflowStore(workflows_dir).get_workflow(workflow_id)

    def test_id_defaults_to_file_name(self, tmp_path):
        (tmp_path / "anon.json").write_text('{"nodes": []}', encoding="utf-8")
        assert JsonWorkflowStore(tmp_path).get_workflow("anon").id == "anon"

    def test_malformed_json(self, tmp_path):
        (tmp_path / "bad.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(InvalidWorkflowError, match="malformed"):
            JsonWorkflowStore(tmp_path).get_workflow("bad")

    def test_node_without_type(self, tmp_path):
        (tmp_path / "bad.json").write_text('{"nodes": [{"id": "a"}]}', encoding="utf-8")
        with pytest.raises(InvalidWorkflowError):
            JsonWorkflowStore(tmp_path).get_workflow("bad")

    def test_list_ids(self, workflows_dir):
        (workflows_dir / "wf-0.json").write_text('{"nodes": []}', encoding="utf-8")
        assert JsonWorkflowStore(workflows_dir).list_ids() == ["wf-0", "wf-1"]

    def test_list_ids_missing_directory(self, tmp_path):
        assert JsonWorkflowStore(tmp_path / "nope").list_ids() == []
