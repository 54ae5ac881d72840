"""Configuration models for workflow node types.

Each node type carries its configuration as a JSON object in ``Node.data``.
The executor registry validates that payload against the model registered
for the node's type before the executor runs, so executors always receive
a typed configuration.

Field names follow the editor's camelCase payload (``maxTokens``); Python
code uses the snake_case attribute names.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]
AIProvider = Literal["anthropic", "openai", "google"]

# Methods that carry a request body
BODY_METHODS: tuple[str, ...] = ("POST", "PUT", "PATCH")


class NodeConfig(BaseModel):
    """Base class for node configuration payloads."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class ManualTriggerConfig(NodeConfig):
    """Trigger nodes take no configuration."""


class HttpRequestConfig(NodeConfig):
    """HTTP Request node configuration.

    Attributes:
        endpoint: Target URL, may contain ``{{ path }}`` templates
        method: HTTP method
        body: Raw request body (POST/PUT/PATCH only), may contain templates
    """

    endpoint: str = Field(min_length=1)
    method: HttpMethod = "GET"
    body: Optional[str] = None

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, value):
        if isinstance(value, str):
            return value.upper()
        return value

    @property
    def sends_body(self) -> bool:
        return self.method in BODY_METHODS and self.body is not None


class AgentNodeConfig(NodeConfig):
    """AI agent node configuration.

    Attributes:
        prompt: User prompt, may contain ``{{ path }}`` templates
        provider: Model provider
        model: Model name (provider default when omitted)
        temperature: Sampling temperature
        max_tokens: Completion token limit
    """

    prompt: str = Field(min_length=1)
    provider: AIProvider = "anthropic"
    model: Optional[str] = None
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: Optional[int] = Field(default=None, alias="maxTokens", ge=1)
