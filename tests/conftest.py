"""Shared fixtures: in-memory stand-ins for the LLM providers."""

from typing import Optional

import pytest


class FakeProvider:
    """Structured-output provider that answers from memory."""

    name = "Fake"
    api_key_env = ("FAKE_API_KEY",)

    def __init__(self, response=None, error: Optional[Exception] = None, configured: bool = True):
        self.response = response
        self.error = error
        self.configured = configured
        self.calls: list[dict] = []

    def is_configured(self) -> bool:
        return self.configured

    async def get_structured_output(self, prompt, schema, *, temperature, system_prompt=None, model=None):
        self.calls.append({
            "prompt": prompt,
            "schema": schema,
            "temperature": temperature,
            "system_prompt": system_prompt,
            "model": model,
        })
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def failing_provider():
    return FakeProvider(error=TimeoutError("model did not answer"))


@pytest.fixture
def fake_provider():
    return FakeProvider
