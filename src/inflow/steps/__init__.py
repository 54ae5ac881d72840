"""
Durable Step Execution.

The StepRunner port consumed by executors, and an adapter backed by a
persistent execution log.
"""

from .base import StepRunner, StepWork
from .log import ExecutionLog, InMemoryExecutionLog, SQLiteExecutionLog, StepRecord
from .retry import RetryConfig, RetryState, calculate_delay, run_with_retry, should_retry
from .runner import DurableStepRunner, StepRunnerFactory

__all__ = [
    "DurableStepRunner",
    "ExecutionLog",
    "InMemoryExecutionLog",
    "RetryConfig",
    "RetryState",
    "SQLiteExecutionLog",
    "StepRecord",
    "StepRunner",
    "StepRunnerFactory",
    "StepWork",
    "calculate_delay",
    "run_with_retry",
    "should_retry",
]
