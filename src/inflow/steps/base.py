from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, TypeVar, Union

T = TypeVar("T")

StepWork = Callable[[], Union[T, Awaitable[T]]]


class StepRunner(ABC):
    """
    Durable, retryable execution of side-effecting work.

    Executors wrap every side effect in ``await step_runner.run(name, work)``.
    Implementations guarantee that:

    - work that completed under a step name is not executed again when the
      same run is retried or resumed; the recorded result is returned;
    - retryable failures are retried under a bounded policy;
    - permanent failures fail immediately.
    """

    @abstractmethod
    async def run(self, name: str, work: StepWork) -> Any:
        """Execute ``work`` as the step ``name`` and return its result."""
        pass
