"""
Structured output for text completions.

A pydantic model is the single source for both halves of the contract: the
format instructions embedded in the prompt and the parser applied to the
completion that comes back.
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Generic, Type, TypeVar

from json_repair import repair_json
from pydantic import BaseModel, ValidationError

from risk_analyzer.services.errors import OutputParseError

T = TypeVar("T", bound=BaseModel)

_FENCED = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)
_OBJECT = re.compile(r"\{.*\}", re.DOTALL)

_INSTRUCTIONS = """You must format your output as a JSON value that adheres to the JSON Schema instance below.
Every property is required. Use the property descriptions to decide what to write.
Return only the JSON value wrapped in a ```json fenced block, with no other text before or after it.

Here is the output schema:
```json
{schema}
```"""


def _strip_titles(node: Any) -> Any:
    if isinstance(node, dict):
        return {k: _strip_titles(v) for k, v in node.items() if k != "title"}
    if isinstance(node, list):
        return [_strip_titles(v) for v in node]
    return node


def _extract_candidate(text: str) -> str:
    m = _FENCED.search(text)
    if m:
        return m.group(1).strip()
    m = _OBJECT.search(text)
    return m.group(0) if m else text.strip()


def _safe_json_loads(text: str) -> Any:
    """
    Strict parse → extract fenced block or {...} → repair → parse.
    """
    try:
        return json.loads(text)
    except ValueError:
        pass

    candidate = _extract_candidate(text)

    try:
        return json.loads(candidate)
    except ValueError:
        pass

    # Repair malformed JSON (missing commas, trailing commas, etc.)
    try:
        return json.loads(repair_json(candidate))
    except Exception as e:
        raise OutputParseError(
            f"Model returned invalid JSON even after repair. "
            f"Repair error: {type(e).__name__}: {e}. "
            f"First 400 chars: {candidate[:400]!r}"
        ) from e


def format_instructions(model: Type[BaseModel]) -> str:
    schema = _strip_titles(model.model_json_schema(by_alias=True))
    return _INSTRUCTIONS.format(schema=json.dumps(schema, ensure_ascii=False))


@dataclass(frozen=True)
class OutputContract(Generic[T]):
    model: Type[T]
    instructions: str

    def parse(self, text: str) -> T:
        data = _safe_json_loads(text or "")
        try:
            return self.model.model_validate(data)
        except ValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) or "<root>" for err in e.errors())
            raise OutputParseError(
                f"Model output does not match the expected schema "
                f"({e.error_count()} error(s) at: {fields}). "
                f"First 400 chars: {(text or '')[:400]!r}"
            ) from e


def build_output_contract(model: Type[T]) -> OutputContract[T]:
    return OutputContract(model=model, instructions=format_instructions(model))
