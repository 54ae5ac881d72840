"""
AI Agent node executor.

Generates text from a templated prompt and stores the answer in the
context under ``agentResponse``. Every provider is reached through the
``openai`` SDK on its OpenAI-compatible endpoint.
"""

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

import openai
from loguru import logger
from openai import AsyncOpenAI

from inflow.config.models import AgentNodeConfig
from inflow.errors import (
    ConfigurationError,
    ConnectionError,
    TimeoutError,
    classify_http_error,
)
from inflow.steps.base import StepRunner
from inflow.templating import interpolate

SYSTEM_PROMPT = (
    "You are a helpful AI assistant integrated into a workflow automation system.\n"
    "You have access to data from previous workflow steps through the context.\n"
    "Provide clear, concise, and accurate responses."
)


@dataclass(frozen=True)
class ProviderSpec:
    """Endpoint and defaults of one model provider."""
    name: str
    default_model: str
    base_url: Optional[str] = None


PROVIDERS: dict[str, ProviderSpec] = {
    "anthropic": ProviderSpec("anthropic", "claude-3-5-sonnet-20241022", "https://api.anthropic.com/v1/"),
    "openai": ProviderSpec("openai", "gpt-4o"),
    "google": ProviderSpec("google", "gemini-2.0-flash-exp", "https://generativelanguage.googleapis.com/v1beta/openai/"),
}

ClientFactory = Callable[[ProviderSpec, str], AsyncOpenAI]


def default_client_factory(provider: ProviderSpec, api_key: str, timeout: float = 60.0) -> AsyncOpenAI:
    # Retries are the step runner's job
    return AsyncOpenAI(api_key=api_key, base_url=provider.base_url, timeout=timeout, max_retries=0)


class AgentExecutor:
    """
    Executor for ``AGENT_NODE`` nodes.

    Args:
        api_keys: Provider name -> API key.
        client_factory: Builds the SDK client for a provider; tests inject
            a fake here.
        timeout: Request timeout in seconds.
    """

    step_name = "agent-execution"

    def __init__(
        self,
        api_keys: Optional[Mapping[str, Optional[str]]] = None,
        client_factory: Optional[ClientFactory] = None,
        timeout: float = 60.0,
    ):
        self.api_keys = dict(api_keys or {})
        self.timeout = timeout
        self.client_factory = client_factory or (
            lambda provider, api_key: default_client_factory(provider, api_key, timeout=self.timeout)
        )

    async def __call__(
        self,
        *,
        config: AgentNodeConfig,
        node_id: str,
        context: Mapping[str, Any],
        step_runner: StepRunner,
    ) -> Mapping[str, Any]:
        provider = PROVIDERS.get(config.provider)
        if provider is None:
            raise ConfigurationError(f"Unsupported AI provider: {config.provider}")

        api_key = self.api_keys.get(provider.name)
        if not api_key:
            raise ConfigurationError(
                f"Agent node: no API key configured for provider '{provider.name}'",
                details={"node_id": node_id, "provider": provider.name},
            )

        model_name = config.model or provider.default_model

        async def _generate() -> dict[str, Any]:
            prompt = interpolate(config.prompt, context)
            logger.info(f"Agent node {node_id}: {provider.name}/{model_name}")

            client = self.client_factory(provider, api_key)
            completion = await self._complete(client, model_name, prompt, config)

            text = ""
            if completion.choices:
                text = completion.choices[0].message.content or ""
            usage = getattr(completion, "usage", None)

            return {
                **context,
                "agentResponse": {
                    "text": text,
                    "provider": provider.name,
                    "model": model_name,
                    "prompt": prompt,
                    "tokensUsed": (usage.total_tokens or 0) if usage else 0,
                },
            }

        return await step_runner.run(self.step_name, _generate)

    async def _complete(self, client: AsyncOpenAI, model: str, prompt: str, config: AgentNodeConfig):
        params: dict[str, Any] = {
            "model": model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "temperature": config.temperature,
        }
        if config.max_tokens is not None:
            params["max_tokens"] = config.max_tokens

        try:
            return await client.chat.completions.create(**params)
        except openai.APITimeoutError as e:
            raise TimeoutError(f"Agent node: {model} timed out", timeout=self.timeout, original_error=e) from e
        except openai.APIConnectionError as e:
            logger.warning(f"Agent request failed (network error): {e}")
            raise ConnectionError(f"Agent node: could not reach {model}", original_error=e) from e
        except openai.APIStatusError as e:
            logger.error(f"Agent API returned error status {e.status_code}: {e.message}")
            raise classify_http_error(e.status_code, f"Agent node: {e.message}", dict(e.response.headers)) from e
