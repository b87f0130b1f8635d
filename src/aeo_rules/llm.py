"""Structured-output clients for the LLM-backed rules.

Every provider takes a prompt and a pydantic schema and returns a validated
instance of that schema, or raises :class:`StructuredOutputError`. Nothing
partial is ever returned; retries are left to the caller.
"""

import logging
import os
import time
from abc import ABC, abstractmethod
from typing import Any, Optional, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_TOKENS = 1000


class StructuredOutputError(Exception):
    """A structured-output call failed for any reason."""

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider


def json_schema(schema: type[BaseModel]) -> dict[str, Any]:
    """JSON schema for ``schema`` with additional properties forbidden."""
    result = schema.model_json_schema()
    result.setdefault("additionalProperties", False)
    return result


class StructuredOutputProvider(ABC):
    """Base class for structured-output providers."""

    name: str
    api_key_env: tuple[str, ...] = ()
    default_model: str

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key or next(
            (os.getenv(var) for var in self.api_key_env if os.getenv(var)), None
        )
        self.model = model or self.default_model
        self.timeout = timeout
        self._client = client

    def __repr__(self) -> str:
        return f"<{type(self).__name__} model={self.model!r}>"

    def is_configured(self) -> bool:
        return bool(self.api_key)

    @abstractmethod
    def _request(
        self,
        prompt: str,
        schema: type[BaseModel],
        model: str,
        temperature: float,
        system_prompt: Optional[str],
    ) -> tuple[str, dict[str, str], dict[str, Any]]:
        """Return url, headers and JSON payload for one call."""

    @abstractmethod
    def _parse(self, data: dict[str, Any], schema: type[T]) -> T:
        """Validate the provider response body against ``schema``."""

    async def get_structured_output(
        self,
        prompt: str,
        schema: type[T],
        *,
        temperature: float,
        system_prompt: Optional[str] = None,
        model: Optional[str] = None,
    ) -> T:
        if not self.is_configured():
            raise StructuredOutputError(self.name, f"{self.api_key_env[0]} not set")

        model = model or self.model
        url, headers, payload = self._request(prompt, schema, model, temperature, system_prompt)

        start = time.time()
        try:
            response = await self._post(url, headers, payload)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise StructuredOutputError(self.name, f"timeout after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise StructuredOutputError(self.name, f"HTTP {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise StructuredOutputError(self.name, f"request failed: {e}") from e

        try:
            parsed = self._parse(response.json(), schema)
        except ValidationError as e:
            raise StructuredOutputError(self.name, f"response does not match {schema.__name__}: {e}") from e
        except (KeyError, IndexError, TypeError, ValueError, StopIteration) as e:
            raise StructuredOutputError(self.name, f"malformed response: {e!r}") from e

        logger.debug(
            "%s/%s structured output %s in %dms",
            self.name, model, schema.__name__, int((time.time() - start) * 1000),
        )
        return parsed

    async def _post(self, url: str, headers: dict[str, str], payload: dict[str, Any]) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(url, headers=headers, json=payload, timeout=self.timeout)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(url, headers=headers, json=payload)


class OpenAIProvider(StructuredOutputProvider):
    """OpenAI chat completions with a strict JSON schema response format."""

    name = "OpenAI"
    api_key_env = ("OPENAI_API_KEY",)
    default_model = "gpt-4o-mini"
    base_url = "https://api.openai.com/v1"

    def _request(self, prompt, schema, model, temperature, system_prompt):
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})
        return (
            f"{self.base_url}/chat/completions",
            {
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            {
                "model": model,
                "messages": messages,
                "temperature": temperature,
                "max_tokens": DEFAULT_MAX_TOKENS,
                "response_format": {
                    "type": "json_schema",
                    "json_schema": {
                        "name": schema.__name__,
                        "schema": json_schema(schema),
                        "strict": True,
                    },
                },
            },
        )

    def _parse(self, data, schema):
        content = data["choices"][0]["message"]["content"]
        return schema.model_validate_json(content)


class AnthropicProvider(StructuredOutputProvider):
    """Anthropic messages API, forcing a single tool call shaped by the schema."""

    name = "Anthropic"
    api_key_env = ("ANTHROPIC_API_KEY",)
    default_model = "claude-3-5-haiku-20241022"
    base_url = "https://api.anthropic.com/v1"
    tool_name = "record_result"

    def _request(self, prompt, schema, model, temperature, system_prompt):
        payload = {
            "model": model,
            "max_tokens": DEFAULT_MAX_TOKENS,
            "temperature": temperature,
            "messages": [{"role": "user", "content": prompt}],
            "tools": [{
                "name": self.tool_name,
                "description": f"Record the {schema.__name__} result",
                "input_schema": json_schema(schema),
            }],
            "tool_choice": {"type": "tool", "name": self.tool_name},
        }
        if system_prompt:
            payload["system"] = system_prompt
        return (
            f"{self.base_url}/messages",
            {
                "x-api-key": self.api_key,
                "anthropic-version": "2023-06-01",
                "Content-Type": "application/json",
            },
            payload,
        )

    def _parse(self, data, schema):
        block = next(b for b in data["content"] if b.get("type") == "tool_use")
        return schema.model_validate(block["input"])


class GoogleProvider(StructuredOutputProvider):
    """Google Gemini generateContent with a JSON response schema."""

    name = "Google"
    api_key_env = ("GOOGLE_API_KEY", "GEMINI_API_KEY")
    default_model = "gemini-2.0-flash"
    base_url = "https://generativelanguage.googleapis.com/v1beta"

    def _request(self, prompt, schema, model, temperature, system_prompt):
        payload: dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": DEFAULT_MAX_TOKENS,
                "responseMimeType": "application/json",
                "responseJsonSchema": json_schema(schema),
            },
        }
        if system_prompt:
            payload["systemInstruction"] = {"parts": [{"text": system_prompt}]}
        return (
            f"{self.base_url}/models/{model}:generateContent",
            {"x-goog-api-key": self.api_key, "Content-Type": "application/json"},
            payload,
        )

    def _parse(self, data, schema):
        text = data["candidates"][0]["content"]["parts"][0]["text"]
        return schema.model_validate_json(text)


PROVIDERS: dict[str, type[StructuredOutputProvider]] = {
    "openai": OpenAIProvider,
    "anthropic": AnthropicProvider,
    "google": GoogleProvider,
}


def get_provider(name: str, **kwargs) -> StructuredOutputProvider:
    """Instantiate a provider by its short name (openai, anthropic, google)."""
    try:
        provider_cls = PROVIDERS[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown provider {name!r}, expected one of {', '.join(PROVIDERS)}") from None
    return provider_cls(**kwargs)


def get_all_providers() -> list[StructuredOutputProvider]:
    return [provider_cls() for provider_cls in PROVIDERS.values()]


def get_configured_providers() -> list[StructuredOutputProvider]:
    """Get only providers that have an API key."""
    return [p for p in get_all_providers() if p.is_configured()]


async def get_structured_output(
    provider: StructuredOutputProvider,
    prompt: str,
    schema: type[T],
    *,
    temperature: float,
    system_prompt: Optional[str] = None,
    model: Optional[str] = None,
) -> T:
    """Run one structured-output call against ``provider``."""
    return await provider.get_structured_output(
        prompt,
        schema,
        temperature=temperature,
        system_prompt=system_prompt,
        model=model,
    )
