from typing import Any, Mapping

from loguru import logger

from inflow.steps.base import StepRunner


async def manual_trigger_executor(
    *,
    config: Any,
    node_id: str,
    context: Mapping[str, Any],
    step_runner: StepRunner,
) -> Mapping[str, Any]:
    """Trigger nodes pass the trigger payload through unchanged."""
    logger.debug(f"Manual trigger node {node_id}")
    return await step_runner.run("manual-trigger", lambda: dict(context))
