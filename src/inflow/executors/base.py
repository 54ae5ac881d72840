from typing import Any, Mapping, Protocol

from inflow.steps.base import StepRunner


class NodeExecutor(Protocol):
    """
    Contract for node-type executors.

    An executor receives the validated configuration of its node, the node
    ID, a read-only view of the current context and the run's step runner.
    It returns the complete context for the next node, typically the
    received context plus its own keys. Side effects belong inside
    ``step_runner.run(...)``.

    Failures must be raised, classified as retryable (``TransientError`` and
    friends) or permanent (``ConfigurationError`` and friends), never
    swallowed.
    """

    async def __call__(
        self,
        *,
        config: Any,
        node_id: str,
        context: Mapping[str, Any],
        step_runner: StepRunner,
    ) -> Mapping[str, Any]:
        ...
