from __future__ import annotations

import json

import pytest

from risk_analyzer.schemas.analysis import AnalysisResponse
from risk_analyzer.services.errors import OutputParseError
from risk_analyzer.services.output_contract import build_output_contract, format_instructions

CONTRACT = build_output_contract(AnalysisResponse)


def _schema_from_instructions(text: str) -> dict:
    block = text.split("```json\n", 1)[1].rsplit("\n```", 1)[0]
    return json.loads(block)


def test_instructions_embed_schema_with_descriptions():
    schema = _schema_from_instructions(CONTRACT.instructions)

    assert set(schema["properties"]) == {"summary", "risks", "ragStatus"}
    assert schema["properties"]["risks"]["type"] == "array"
    assert schema["properties"]["risks"]["items"] == {"type": "string"}
    assert "10 sentences" in schema["properties"]["summary"]["description"]
    assert "color" in schema["properties"]["ragStatus"]["description"]
    assert sorted(schema["required"]) == ["ragStatus", "risks", "summary"]
    assert "title" not in json.dumps(schema)


def test_instructions_are_deterministic():
    assert format_instructions(AnalysisResponse) == CONTRACT.instructions


def test_parse_fenced_block_with_chatter():
    text = 'Here you go:\n```json\n{"summary": "s", "risks": ["r1"], "ragStatus": "Green"}\n```\nThanks!'
    out = CONTRACT.parse(text)
    assert out.summary == "s"
    assert out.risks == ["r1"]
    assert out.rag_status == "Green"


def test_parse_bare_object_inside_text():
    out = CONTRACT.parse('Result: {"summary": "s", "risks": [], "ragStatus": "Red"} end')
    assert out.rag_status == "Red"


def test_parse_repairs_trailing_commas():
    out = CONTRACT.parse('{"summary": "s", "risks": ["a", "b",], "ragStatus": "Amber",}')
    assert out.risks == ["a", "b"]


def test_parse_serializes_with_camel_case_key():
    out = CONTRACT.parse('{"summary": "s", "risks": [], "ragStatus": "Red"}')
    assert out.model_dump(by_alias=True) == {"summary": "s", "risks": [], "ragStatus": "Red"}


@pytest.mark.parametrize(
    "text",
    [
        "",
        "Sorry, I cannot help with that.",
        '{"summary": "s", "risks": "not a list", "ragStatus": "Red"}',
        '["summary", "risks", "ragStatus"]',
    ],
)
def test_parse_failures_raise_output_parse_error(text):
    with pytest.raises(OutputParseError):
        CONTRACT.parse(text)
