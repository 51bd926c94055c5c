from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol


class LLMProviderError(Exception):
    """Raised when the model provider cannot produce a completion."""


class LLMTimeoutError(LLMProviderError):
    pass


class TextLLM(Protocol):
    async def generate(self, prompt: str) -> str: ...


@dataclass
class LLMConfig:
    provider: str
    model: str
    temperature: float = 0.7
    max_tokens: int = 900
    api_key: Optional[str] = None


class OpenAILLM:
    def __init__(self, api_key: str, model: str, temperature: float, max_tokens: int):
        from openai import AsyncOpenAI

        self.client = AsyncOpenAI(api_key=api_key)
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def generate(self, prompt: str) -> str:
        import openai

        try:
            resp = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except openai.APITimeoutError as e:
            raise LLMTimeoutError(str(e)) from e
        except openai.OpenAIError as e:
            raise LLMProviderError(str(e)) from e

        if not resp.choices:
            return ""
        return resp.choices[0].message.content or ""


class GeminiLLM:
    def __init__(self, api_key: str, model: str, temperature: float, max_tokens: int):
        from google import genai
        from google.genai import types

        self._types = types
        self.client = genai.Client(api_key=api_key)
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def generate(self, prompt: str) -> str:
        import httpx
        from google.genai import errors

        try:
            resp = await self.client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=self._types.GenerateContentConfig(
                    temperature=self.temperature,
                    max_output_tokens=self.max_tokens,
                ),
            )
        except httpx.TimeoutException as e:
            raise LLMTimeoutError(str(e) or "Model provider request timed out") from e
        except (errors.APIError, httpx.HTTPError) as e:
            raise LLMProviderError(str(e)) from e

        return resp.text or ""


def build_llm(cfg: LLMConfig) -> TextLLM:
    provider = (cfg.provider or "").lower().strip()

    if provider == "openai":
        if not cfg.api_key:
            raise LLMProviderError("OpenAI API key is missing. Pass openAIApiKey or set OPENAI_API_KEY in .env")
        return OpenAILLM(
            api_key=cfg.api_key,
            model=cfg.model,
            temperature=cfg.temperature,
            max_tokens=cfg.max_tokens,
        )

    if provider == "gemini":
        if not cfg.api_key:
            raise LLMProviderError("Gemini API key is missing. Pass openAIApiKey or set GEMINI_API_KEY in .env")
        return GeminiLLM(
            api_key=cfg.api_key,
            model=cfg.model,
            temperature=cfg.temperature,
            max_tokens=cfg.max_tokens,
        )

    raise ValueError(f"Unsupported llm provider: {cfg.provider}. Use provider: openai or gemini")
