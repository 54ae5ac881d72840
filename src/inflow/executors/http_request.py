"""
HTTP Request node executor.

Performs one HTTP call and stores the response in the context under
``httpResponse``, where later nodes can reference it as
``{{httpResponse.data}}``.
"""

from typing import Any, Mapping, Optional

import httpx
from loguru import logger

from inflow.config.models import BODY_METHODS, HttpRequestConfig
from inflow.errors import (
    ConfigurationError,
    ConnectionError,
    TimeoutError,
    classify_http_error,
)
from inflow.steps.base import StepRunner
from inflow.templating import interpolate_fields


class HttpRequestExecutor:
    """
    Executor for ``HTTP_REQUEST`` nodes.

    The endpoint and body are interpolated against the context before the
    request. JSON responses are parsed, anything else is kept as text.
    Rate limiting, timeouts, network and 5xx failures are retryable; other
    4xx responses and malformed URLs are permanent.
    """

    step_name = "http-request"

    def __init__(
        self,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self.transport = transport

    async def __call__(
        self,
        *,
        config: HttpRequestConfig,
        node_id: str,
        context: Mapping[str, Any],
        step_runner: StepRunner,
    ) -> Mapping[str, Any]:
        async def _request() -> dict[str, Any]:
            rendered = interpolate_fields(config.model_dump(), context, ("endpoint", "body"))
            endpoint = rendered["endpoint"]
            method = config.method
            body = rendered["body"] if method in BODY_METHODS else None

            logger.info(f"HTTP Request node {node_id}: {method} {endpoint}")
            response = await self._send(method, endpoint, body)

            if response.is_error:
                raise classify_http_error(
                    response.status_code,
                    f"HTTP Request node: {method} {endpoint} returned {response.status_code}",
                    dict(response.headers),
                )

            content_type = response.headers.get("content-type", "")
            data = response.json() if "application/json" in content_type else response.text

            return {
                **context,
                "httpResponse": {
                    "status": response.status_code,
                    "statusText": response.reason_phrase,
                    "data": data,
                },
            }

        return await step_runner.run(self.step_name, _request)

    async def _send(self, method: str, endpoint: str, body: Optional[str]) -> httpx.Response:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                return await client.request(method, endpoint, content=body)
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            raise ConfigurationError(
                f"HTTP Request node: invalid endpoint '{endpoint}'",
                original_error=e,
            ) from e
        except httpx.TimeoutException as e:
            logger.warning(f"HTTP request timed out after {self.timeout}s: {method} {endpoint}")
            raise TimeoutError(
                f"HTTP Request node: {method} {endpoint} timed out",
                timeout=self.timeout,
                original_error=e,
            ) from e
        except httpx.RequestError as e:
            logger.warning(f"HTTP request failed (network error): {e}")
            raise ConnectionError(
                f"HTTP Request node: {method} {endpoint} failed",
                original_error=e,
            ) from e
