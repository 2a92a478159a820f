"""Tests for request validation, instruction composition and the rewrite graph."""

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.runnables import RunnableLambda

from pipeline import (
    InvalidRequest,
    LangChainRewriteProvider,
    OracleAuthFailure,
    OracleFailure,
    OracleQuotaExceeded,
    OracleRateLimited,
    RewriteOrchestrator,
    RewriteRequest,
    create_app,
    create_initial_state,
)
from pipeline.errors import classify_oracle_error
from pipeline.nodes import build_system_instruction, compose_instruction, validate_request
from pipeline.nodes.compose import MODE_DIRECTIVES, RESPONSE_SCHEMA
from pipeline.oracle import parse_oracle_payload
from pipeline.state import Highlight

from conftest import CAT_PAYLOAD, FakeRewriteProvider


class FakeHTTPError(Exception):
    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class FakeResponse:
    def __init__(self, status_code):
        self.status_code = status_code


# ----- Validation -----

def test_validate_applies_defaults():
    request = validate_request({"text": "Hello there.", "mode": "formal"})
    assert request == RewriteRequest(
        text="Hello there.",
        mode="formal",
        language="English",
        citation_format="APA",
        style_matching=False,
    )


def test_validate_accepts_camel_case_keys():
    request = validate_request({
        "text": "Hello",
        "mode": "seo",
        "language": "German",
        "citationFormat": "MLA",
        "styleMatching": True,
    })
    assert request.citation_format == "MLA"
    assert request.style_matching is True
    assert request.language == "German"


def test_validate_reports_every_bad_field():
    with pytest.raises(InvalidRequest) as exc_info:
        validate_request({"text": "", "mode": "poetic", "citationFormat": "IEEE"})

    fields = {error["field"] for error in exc_info.value.errors}
    assert fields == {"text", "mode", "citationFormat"}
    assert exc_info.value.message == "Invalid request data"


def test_validate_rejects_non_boolean_style_matching():
    with pytest.raises(InvalidRequest):
        validate_request({"text": "Hi", "mode": "creative", "style_matching": "yes"})


# ----- Instruction composition -----

@pytest.mark.parametrize("mode", sorted(MODE_DIRECTIVES))
def test_instruction_names_mode_language_and_citation_format(mode):
    instruction = build_system_instruction(mode, "Spanish", "Chicago")
    assert MODE_DIRECTIVES[mode] in instruction
    assert "Spanish" in instruction
    assert "Chicago" in instruction
    assert "STYLE MATCHING" not in instruction


def test_style_matching_adds_directive():
    instruction = build_system_instruction("academic", "English", "APA", style_matching=True)
    assert "STYLE MATCHING" in instruction


def test_compose_node_fills_oracle_inputs():
    state = create_initial_state(RewriteRequest(text="The cat sat.", mode="simplify"))
    update = compose_instruction(state)
    assert "The cat sat." in update["user_content"]
    assert update["response_schema"] is RESPONSE_SCHEMA
    assert update["node_history"] == ["compose_instruction"]


# ----- Oracle payloads and errors -----

def test_parse_payload_accepts_json_string():
    response = parse_oracle_payload('{"paraphrasedText": "Hi.", "changes": []}')
    assert response.paraphrasedText == "Hi."
    assert response.changes == []


@pytest.mark.parametrize("payload", [None, {}, "not json", {"changes": []}, {"paraphrasedText": 3}])
def test_parse_payload_rejects_malformed(payload):
    with pytest.raises(OracleFailure):
        parse_oracle_payload(payload)


@pytest.mark.parametrize(
    "exc, expected",
    [
        (FakeHTTPError("Unauthorized", status_code=401), OracleAuthFailure),
        (Exception("Incorrect API key provided"), OracleAuthFailure),
        (FakeHTTPError("You exceeded your current quota", status_code=429), OracleQuotaExceeded),
        (FakeHTTPError("Too many requests", status_code=429), OracleRateLimited),
        (Exception("rate limit reached for model"), OracleRateLimited),
        (Exception("connection reset"), OracleFailure),
    ],
)
def test_classify_oracle_error(exc, expected):
    assert type(classify_oracle_error(exc)) is expected


def test_classify_reads_status_from_response():
    exc = Exception("throttled")
    exc.response = FakeResponse(429)
    assert isinstance(classify_oracle_error(exc), OracleRateLimited)


def test_classify_keeps_message_of_generic_failure():
    error = classify_oracle_error(Exception("socket closed"))
    assert "socket closed" in error.message


# ----- LangChain provider -----

@pytest.mark.asyncio
async def test_langchain_provider_parses_model_json():
    llm = FakeListChatModel(responses=['{"paraphrasedText": "Hi.", "changes": []}'])
    provider = LangChainRewriteProvider(llm=llm)

    payload = await provider.rewrite("instruction", RESPONSE_SCHEMA, "Please paraphrase: Hello.")
    assert payload == {"paraphrasedText": "Hi.", "changes": []}


@pytest.mark.asyncio
async def test_langchain_provider_classifies_client_errors():
    def boom(_messages):
        raise FakeHTTPError("invalid x-api-key", status_code=401)

    provider = LangChainRewriteProvider(llm=RunnableLambda(boom))

    with pytest.raises(OracleAuthFailure):
        await provider.rewrite("instruction", RESPONSE_SCHEMA, "text")


# ----- Graph -----

@pytest.mark.asyncio
async def test_graph_runs_nodes_in_order():
    provider = FakeRewriteProvider()
    state = create_initial_state(RewriteRequest(text="The cat sat on the mat.", mode="formal"))

    final_state = await create_app().ainvoke(state, {"configurable": {"provider": provider}})

    assert final_state["node_history"] == ["compose_instruction", "call_oracle", "reconstruct"]
    assert final_state["highlights"] == [Highlight(8, 16, "grammar")]
    assert len(provider.calls) == 1


@pytest.mark.asyncio
async def test_orchestrator_returns_reconstructed_result():
    orchestrator = RewriteOrchestrator(FakeRewriteProvider())

    result = await orchestrator.rewrite({"text": "The cat sat on the mat.", "mode": "simplify"})

    assert result.rewritten_text == CAT_PAYLOAD["paraphrasedText"]
    assert result.highlights_as_dicts() == [{"start": 8, "end": 16, "type": "grammar"}]


@pytest.mark.asyncio
async def test_orchestrator_validates_before_calling_oracle():
    provider = FakeRewriteProvider()
    orchestrator = RewriteOrchestrator(provider)

    with pytest.raises(InvalidRequest):
        await orchestrator.rewrite({"text": "", "mode": "formal"})
    assert provider.calls == []


@pytest.mark.asyncio
async def test_orchestrator_does_not_retry_oracle_errors():
    provider = FakeRewriteProvider(error=OracleRateLimited("Rate limit exceeded."))
    orchestrator = RewriteOrchestrator(provider)

    with pytest.raises(OracleRateLimited):
        await orchestrator.rewrite({"text": "Hello", "mode": "formal"})
    assert len(provider.calls) == 1


@pytest.mark.asyncio
async def test_orchestrator_rejects_malformed_oracle_payload():
    orchestrator = RewriteOrchestrator(FakeRewriteProvider(payload={"changes": []}))

    with pytest.raises(OracleFailure):
        await orchestrator.rewrite({"text": "Hello", "mode": "formal"})


@pytest.mark.asyncio
async def test_non_json_model_output_is_malformed_not_classified():
    # Model text mentioning "quota" must not look like a quota error
    llm = FakeListChatModel(responses=["Fishing quota rules changed in 2020 (not JSON)"])
    provider = LangChainRewriteProvider(llm=llm)

    with pytest.raises(OracleFailure) as exc_info:
        await provider.rewrite("instruction", RESPONSE_SCHEMA, "Fishing quota rules changed.")
    assert type(exc_info.value) is OracleFailure


def test_parse_payload_rejects_infinite_offset():
    payload = {
        "paraphrasedText": "hi world",
        "changes": [{"paraphrased": "world", "type": "tone", "startIndex": float("inf")}],
    }
    with pytest.raises(OracleFailure):
        parse_oracle_payload(payload)


@pytest.mark.asyncio
async def test_orchestrator_reports_infinite_offset_as_oracle_failure():
    payload = {
        "paraphrasedText": "hi world",
        "changes": [{"paraphrased": "world", "type": "tone", "startIndex": float("inf")}],
    }
    orchestrator = RewriteOrchestrator(FakeRewriteProvider(payload=payload))

    with pytest.raises(OracleFailure):
        await orchestrator.rewrite({"text": "hi world", "mode": "formal"})
