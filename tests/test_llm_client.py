from types import SimpleNamespace

import pytest
from google.genai import errors

from app.core.errors import EmptyResponseError, UpstreamError
from app.schemas.analysis import ANALYSIS_SCHEMA
from app.services.llm_client import (
    GeminiGenerationClient,
    GenerationPayload,
    LLMConfig,
    build_generation_client,
    extract_text,
)
from conftest import FakeModels


def _response(text):
    part = SimpleNamespace(text=text)
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))])


def _client_with(models):
    gc = GeminiGenerationClient(api_key="test-key", model="gemini-test")
    gc.client = SimpleNamespace(aio=SimpleNamespace(models=models))
    return gc


PAYLOAD = GenerationPayload(instruction="instruction", query="query", schema=ANALYSIS_SCHEMA)


@pytest.mark.asyncio
async def test_sends_one_schema_constrained_request():
    models = FakeModels(result=_response("```json\n[]\n```"))
    text = await _client_with(models).generate(PAYLOAD)

    assert text == "```json\n[]\n```"
    assert len(models.calls) == 1
    call = models.calls[0]
    assert call["model"] == "gemini-test"
    assert call["contents"] == "query"
    config = call["config"]
    assert config.system_instruction == "instruction"
    assert config.response_mime_type == "application/json"
    assert config.response_schema == ANALYSIS_SCHEMA


@pytest.mark.asyncio
async def test_non_success_status_becomes_upstream_error():
    body = {"error": {"code": 429, "message": "Resource exhausted", "status": "RESOURCE_EXHAUSTED"}}
    models = FakeModels(exc=errors.ClientError(429, body))

    with pytest.raises(UpstreamError) as exc:
        await _client_with(models).generate(PAYLOAD)

    assert exc.value.status == 429
    assert "RESOURCE_EXHAUSTED" in exc.value.raw_body
    assert str(exc.value) == "Erreur API Gemini: 429"
    assert len(models.calls) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "resp",
    [
        SimpleNamespace(candidates=[]),
        SimpleNamespace(candidates=None),
        SimpleNamespace(candidates=[SimpleNamespace(content=None)]),
        SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[]))]),
        _response(""),
        _response(None),
    ],
)
async def test_missing_text_is_empty_response(resp):
    with pytest.raises(EmptyResponseError):
        await _client_with(FakeModels(result=resp)).generate(PAYLOAD)


def test_extract_text_reads_first_part_of_first_candidate():
    resp = SimpleNamespace(
        candidates=[
            SimpleNamespace(content=SimpleNamespace(parts=[SimpleNamespace(text="a"), SimpleNamespace(text="b")])),
            SimpleNamespace(content=SimpleNamespace(parts=[SimpleNamespace(text="c")])),
        ]
    )
    assert extract_text(resp) == "a"


def test_build_generation_client():
    gc = build_generation_client(LLMConfig(provider="Gemini", model="m", gemini_api_key="k"))
    assert isinstance(gc, GeminiGenerationClient)

    with pytest.raises(ValueError):
        build_generation_client(LLMConfig(provider="gemini", model="m"))
    with pytest.raises(ValueError):
        build_generation_client(LLMConfig(provider="openai", model="m", gemini_api_key="k"))
