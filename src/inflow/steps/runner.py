"""
Durable Step Runner.

Step runner backed by an ExecutionLog. One runner instance is one run's
session: it carries the run ID under which steps are recorded and the
per-run step name counters.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from .base import StepRunner, StepWork
from .log import ExecutionLog
from .retry import RetryConfig, run_with_retry

logger = logging.getLogger(__name__)

StepRunnerFactory = Callable[[str], StepRunner]


class DurableStepRunner(StepRunner):
    """
    Memoizing, retrying step runner.

    A step name used more than once in a run is recorded under suffixed
    keys in call order (``http-request``, ``http-request:1``, ...). Because
    a run calls its steps in the same order when it is resumed, each call
    finds its own recorded result.

    Example:
        log = SQLiteExecutionLog("steps.db")
        runner = DurableStepRunner(log, run_id="run-42")
        data = await runner.run("http-request", fetch)
    """

    def __init__(
        self,
        log: ExecutionLog,
        run_id: str,
        retry_config: Optional[RetryConfig] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.log = log
        self.run_id = run_id
        self.retry_config = retry_config or RetryConfig()
        self._sleep = sleep
        self._name_counts: Dict[str, int] = {}

    def _next_key(self, name: str) -> str:
        count = self._name_counts.get(name, 0)
        self._name_counts[name] = count + 1
        return name if count == 0 else f"{name}:{count}"

    async def run(self, name: str, work: StepWork) -> Any:
        step_key = self._next_key(name)

        recorded = self.log.get(self.run_id, step_key)
        if recorded is not None:
            logger.info(f"[{self.run_id}] Step '{step_key}' already completed, using recorded result")
            return recorded.result

        attempts = 0

        def _attempt():
            nonlocal attempts
            attempts += 1
            return work()

        logger.debug(f"[{self.run_id}] Running step '{step_key}'")
        result = await run_with_retry(_attempt, self.retry_config, name=step_key, sleep=self._sleep)

        record = self.log.record(self.run_id, step_key, result, attempts=attempts)
        logger.debug(f"[{self.run_id}] Step '{step_key}' completed after {attempts} attempt(s)")
        return record.result

    @classmethod
    def factory(
        cls,
        log: ExecutionLog,
        retry_config: Optional[RetryConfig] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> StepRunnerFactory:
        """Build a ``run_id -> runner`` factory sharing one log and policy."""

        def _create(run_id: str) -> "DurableStepRunner":
            return cls(log, run_id, retry_config=retry_config, sleep=sleep)

        return _create
