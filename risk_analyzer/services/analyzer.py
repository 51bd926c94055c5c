from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Callable, Optional

import structlog

from risk_analyzer.core.settings import Settings
from risk_analyzer.schemas.analysis import AnalysisResponse
from risk_analyzer.services.errors import (
    AnalysisError,
    DescriptionTooShortError,
    OutputParseError,
    UpstreamError,
    UpstreamTimeoutError,
)
from risk_analyzer.services.llm_client import (
    LLMConfig,
    LLMProviderError,
    LLMTimeoutError,
    TextLLM,
    build_llm,
)
from risk_analyzer.services.output_contract import build_output_contract

logger = structlog.get_logger(__name__)

PROMPT_TEMPLATE = "Analyze project description as best as possible.\n{format_instructions}\n{project_description}"

RISK_CONTRACT = build_output_contract(AnalysisResponse)


def count_words(text: str) -> int:
    return len((text or "").split())


def check_description_length(text: str, min_words: int) -> None:
    words = count_words(text)
    if words < min_words:
        raise DescriptionTooShortError(min_words=min_words, actual=words)


def build_prompt(project_description: str) -> str:
    return PROMPT_TEMPLATE.format(
        format_instructions=RISK_CONTRACT.instructions,
        project_description=project_description,
    )


@dataclass
class AnalysisOutcome:
    result: Optional[AnalysisResponse] = None
    error: Optional[AnalysisError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ProjectRiskAnalyzer:
    def __init__(self, settings: Settings, llm_factory: Callable[[LLMConfig], TextLLM] = build_llm):
        self.settings = settings
        self.llm_factory = llm_factory

    def _llm_config(self, api_key: Optional[str]) -> LLMConfig:
        s = self.settings
        return LLMConfig(
            provider=s.llm_provider,
            model=s.llm_model,
            temperature=float(s.llm_temperature),
            max_tokens=int(s.llm_max_tokens),
            api_key=api_key if api_key is not None else s.default_api_key(),
        )

    async def _complete(self, llm: TextLLM, prompt: str) -> str:
        timeout = self.settings.llm_timeout_seconds
        if not timeout:
            return await llm.generate(prompt)
        try:
            return await asyncio.wait_for(llm.generate(prompt), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise LLMTimeoutError(f"Model provider did not respond within {timeout} seconds") from e

    async def analyze(self, project_description: str, api_key: Optional[str] = None) -> AnalysisOutcome:
        try:
            check_description_length(project_description, self.settings.min_description_words)
        except DescriptionTooShortError as e:
            logger.info("Description rejected", words=e.actual, min_words=e.min_words)
            return AnalysisOutcome(error=e)

        log = logger.bind(provider=self.settings.llm_provider, model=self.settings.llm_model)
        log.info("Analyzing project description", words=count_words(project_description))

        try:
            llm = self.llm_factory(self._llm_config(api_key))
            completion = await self._complete(llm, build_prompt(project_description))
        except LLMTimeoutError as e:
            log.warning("Model provider timed out", error=str(e))
            return AnalysisOutcome(error=UpstreamTimeoutError(str(e)))
        except LLMProviderError as e:
            log.warning("Model provider failed", error=str(e))
            return AnalysisOutcome(error=UpstreamError(str(e)))

        try:
            result = RISK_CONTRACT.parse(completion)
        except OutputParseError as e:
            log.warning("Completion did not match output schema", error=e.message)
            return AnalysisOutcome(error=e)

        log.info("Analysis complete", risks=len(result.risks), rag_status=result.rag_status)
        return AnalysisOutcome(result=result)
