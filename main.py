#!/usr/bin/env python3
"""
Inflow Demo Application

Runs a workflow from the workflows/ directory through the engine and
prints the final context.

    python main.py fetch-and-summarize '{"todoId": 1, "user": {"name": "Ana"}}'
"""

import asyncio
import json
import logging
import sys

from inflow import StdOutCallbackHandler, create_workflow_runner
from inflow.config.settings import settings

# Setup basic logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger("main")


async def main(workflow_id: str, initial_data: dict) -> int:
    runner = create_workflow_runner(settings, callbacks=[StdOutCallbackHandler()])
    result = await runner.run(workflow_id, initial_data)

    if result.success:
        logger.info(f"Run {result.run_id} succeeded: {' -> '.join(result.execution_path)}")
        print(json.dumps(result.context, indent=2, ensure_ascii=False))
        return 0

    logger.error(f"Run {result.run_id} failed at node {result.failed_node_id}: {result.error}")
    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False, default=str))
    return 1


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(2)

    payload = json.loads(sys.argv[2]) if len(sys.argv) > 2 else {}
    sys.exit(asyncio.run(main(sys.argv[1], payload)))
