"""Pytest configuration and global fixtures for Inflow tests."""

from pathlib import Path

import pytest

from inflow.steps.log import InMemoryExecutionLog
from inflow.steps.retry import RetryConfig
from inflow.steps.runner import DurableStepRunner


async def _no_sleep(delay: float) -> None:
    return None


@pytest.fixture
def no_sleep():
    return _no_sleep


@pytest.fixture
def fast_retry() -> RetryConfig:
    """Retry policy without backoff delays."""
    return RetryConfig(max_attempts=3, base_delay=0.0, max_delay=0.0, jitter=0.0)


@pytest.fixture
def step_log() -> InMemoryExecutionLog:
    return InMemoryExecutionLog()


@pytest.fixture
def step_runner(step_log, fast_retry) -> DurableStepRunner:
    return DurableStepRunner(step_log, run_id="run-test", retry_config=fast_retry, sleep=_no_sleep)


@pytest.fixture
def step_runner_factory(step_log, fast_retry):
    return DurableStepRunner.factory(step_log, fast_retry, sleep=_no_sleep)


# ==================== Pytest Configuration ====================

def pytest_configure(config):
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")


def pytest_collection_modifyitems(config, items):
    for item in items:
        rel_path = Path(item.fspath).relative_to(Path(__file__).parent)
        if "unit" in rel_path.parts:
            item.add_marker(pytest.mark.unit)
        elif "integration" in rel_path.parts:
            item.add_marker(pytest.mark.integration)
