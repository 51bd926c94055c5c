"""
Pytest configuration and fixtures.
"""
from __future__ import annotations

import asyncio
import json

import pytest
from fastapi.testclient import TestClient

from risk_analyzer.core.settings import Settings
from risk_analyzer.main import create_app

VALID_COMPLETION = "```json\n" + json.dumps(
    {
        "summary": "A migration of the billing platform to a managed cloud database.",
        "risks": ["Data loss during cut-over", "Vendor lock-in"],
        "ragStatus": "Amber",
    }
) + "\n```"


def words(n: int) -> str:
    return " ".join(f"word{i}" for i in range(n))


class StubLLM:
    """Stands in for a provider adapter: records prompts and returns or raises."""

    def __init__(self, completion: str = VALID_COMPLETION, error: Exception | None = None, delay: float = 0.0):
        self.completion = completion
        self.error = error
        self.delay = delay
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.completion


@pytest.fixture
def make_settings():
    def _make(**overrides) -> Settings:
        # pinned so a local .env, environment or config.yaml cannot change results
        values = {
            "OPENAI_API_KEY": "sk-default",
            "GEMINI_API_KEY": None,
            "llm_provider": "openai",
            "llm_model": "gpt-4o-mini",
            "llm_temperature": 0.7,
            "llm_max_tokens": 900,
            "llm_timeout_seconds": None,
            "min_description_words": 500,
            "legacy_error_status": False,
            "log_level": "INFO",
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make


@pytest.fixture
def make_client(make_settings):
    def _make(stub: StubLLM | None = None, **overrides):
        stub = stub or StubLLM()
        configs = []

        def factory(cfg):
            configs.append(cfg)
            return stub

        app = create_app(make_settings(**overrides), llm_factory=factory)
        client = TestClient(app, raise_server_exceptions=False)
        return client, stub, configs

    return _make
