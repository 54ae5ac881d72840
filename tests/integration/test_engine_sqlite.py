"""
Integration tests: JSON workflow files, the built-in executors and the
SQLite execution log working together.

External services are replaced by httpx.MockTransport and a fake SDK
client; everything else is real.
"""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from inflow.config.models import AgentNodeConfig, HttpRequestConfig, ManualTriggerConfig
from inflow.engine.orchestrator import WorkflowRunner, execute_workflow
from inflow.errors import StepRetriesExhaustedError, TransientError
from inflow.executors.agent import AgentExecutor
from inflow.executors.http_request import HttpRequestExecutor
from inflow.executors.manual_trigger import manual_trigger_executor
from inflow.executors.registry import ExecutorRegistry
from inflow.graph.node import NodeType
from inflow.steps.log import SQLiteExecutionLog
from inflow.steps.retry import RetryConfig
from inflow.steps.runner import DurableStepRunner
from inflow.storage.json_file import JsonWorkflowStore

WORKFLOW = {
    "id": "fetch-and-summarize",
    "name": "Fetch and summarize",
    "nodes": [
        {"id": "summarize", "type": "AGENT_NODE", "data": {"prompt": "Summarize: {{json httpResponse.data}}", "provider": "openai"}},
        {"id": "trigger", "type": "MANUAL_TRIGGER", "data": {}},
        {"id": "fetch", "type": "HTTP_REQUEST", "data": {"endpoint": "https://api.example.com/todos/{{todoId}}"}},
    ],
    "connections": [
        {"fromNodeId": "trigger", "toNodeId": "fetch"},
        {"fromNodeId": "fetch", "toNodeId": "summarize"},
    ],
}


async def _no_sleep(delay):
    return None


@pytest.fixture
def workflows_dir(tmp_path):
    directory = tmp_path / "workflows"
    directory.mkdir()
    (directory / "fetch-and-summarize.json").write_text(json.dumps(WORKFLOW), encoding="utf-8")
    return directory


@pytest.fixture
def http_calls():
    return []


@pytest.fixture
def transport(http_calls):
    def handler(request):
        http_calls.append(str(request.url))
        return httpx.Response(200, json={"id": 3, "title": "water plants"})

    return httpx.MockTransport(handler)


@pytest.fixture
def fake_client():
    client = MagicMock()
    client.chat.completions.create = AsyncMock(
        return_value=SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content="Plants need water."))],
            usage=SimpleNamespace(total_tokens=17),
        )
    )
    return client


@pytest.fixture
def sqlite_log(tmp_path):
    log = SQLiteExecutionLog(db_path=str(tmp_path / "steps.db"))
    yield log
    log.close()


@pytest.fixture
def runner(workflows_dir, transport, fake_client, sqlite_log):
    registry = ExecutorRegistry()
    registry.register(NodeType.MANUAL_TRIGGER, manual_trigger_executor, ManualTriggerConfig)
    registry.register(NodeType.HTTP_REQUEST, HttpRequestExecutor(transport=transport), HttpRequestConfig)
    registry.register(
        NodeType.AGENT_NODE,
        AgentExecutor(api_keys={"openai": "sk-test"}, client_factory=lambda provider, key: fake_client),
        AgentNodeConfig,
    )
    retry = RetryConfig(max_attempts=2, base_delay=0.0, max_delay=0.0, jitter=0.0)
    return WorkflowRunner(
        store=JsonWorkflowStore(workflows_dir),
        registry=registry,
        step_runner_factory=DurableStepRunner.factory(sqlite_log, retry, sleep=_no_sleep),
    )


class TestEngineWithSQLiteLog:
    """End-to-end runs against the SQLite execution log."""

    @pytest.mark.asyncio
    async def test_full_run(self, runner, http_calls, sqlite_log):
        response = await execute_workflow(
            {"workflowId": "fetch-and-summarize", "initialData": {"todoId": 3}, "runId": "run-1"},
            runner,
        )

        result = response["result"]
        assert response["workflowId"] == "fetch-and-summarize"
        assert result["todoId"] == 3
        assert result["httpResponse"]["data"] == {"id": 3, "title": "water plants"}
        assert result["agentResponse"]["text"] == "Plants need water."
        assert result["agentResponse"]["prompt"] == 'Summarize: {"id":3,"title":"water plants"}'
        assert result["agentResponse"]["model"] == "gpt-4o"
        assert http_calls == ["https://api.example.com/todos/3"]

        assert [s.step_key for s in sqlite_log.steps("run-1")] == [
            "prepare-workflow",
            "manual-trigger",
            "http-request",
            "agent-execution",
        ]

    @pytest.mark.asyncio
    async def test_resume_after_failure(self, runner, http_calls, fake_client):
        fake_client.chat.completions.create.side_effect = TransientError("overloaded")

        failed = await runner.run("fetch-and-summarize", {"todoId": 3}, run_id="run-2")

        assert failed.failed_node_id == "summarize"
        assert isinstance(failed.error, StepRetriesExhaustedError)
        assert failed.execution_path == ["trigger", "fetch"]
        assert fake_client.chat.completions.create.await_count == 2

        fake_client.chat.completions.create.side_effect = None
        resumed = await runner.run("fetch-and-summarize", {"todoId": 3}, run_id="run-2")

        assert resumed.success
        assert resumed.context["agentResponse"]["text"] == "Plants need water."
        # The HTTP step was recorded by the first attempt
        assert len(http_calls) == 1

    @pytest.mark.asyncio
    async def test_completed_run_replays_from_log(self, runner, http_calls, fake_client):
        first = await runner.run("fetch-and-summarize", {"todoId": 3}, run_id="run-3")
        second = await runner.run("fetch-and-summarize", {"todoId": 3}, run_id="run-3")

        assert second.context == first.context
        assert len(http_calls) == 1
        assert fake_client.chat.completions.create.await_count == 1

    @pytest.mark.asyncio
    async def test_separate_runs_execute_separately(self, runner, http_calls):
        await runner.run("fetch-and-summarize", {"todoId": 3}, run_id="run-a")
        await runner.run("fetch-and-summarize", {"todoId": 3}, run_id="run-b")
        assert len(http_calls) == 2
