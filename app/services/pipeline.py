"""
Analysis pipeline as an explicit state machine.

    validating ─┬─> rejected
                └─> composing ─> requesting ─┬─> upstream_failed
                                             └─> parsing ─┬─> parse_failed
                                                          └─> completed

Each node sets the next ``Stage``; ``next_step`` is the only transition
function and routes terminal stages to END. Known failures become terminal
stages, anything else escaping the graph is caught once in ``handle``.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, List, Optional, TypedDict

from langgraph.graph import END, StateGraph

from app.core.errors import (
    AnalysisError,
    EmptyResponseError,
    MalformedResponseError,
    UnhandledError,
    UpstreamError,
    ValidationError,
)
from app.core.settings import Settings, require_api_key
from app.schemas.analysis import ANALYSIS_SCHEMA
from app.services.llm_client import (
    GenerationClient,
    GenerationPayload,
    LLMConfig,
    build_generation_client,
)
from app.services.prompts import DEFAULT_ROSTER, ThinkerRoster, compose_prompt
from app.services.responses import AnalysisOutcome, failure, success
from app.services.sanitizer import parse_records, validate_records as check_records
from app.services.validation import validate_subject

logger = logging.getLogger(__name__)


class Stage(str, Enum):
    VALIDATING = "validating"
    REJECTED = "rejected"
    COMPOSING = "composing"
    REQUESTING = "requesting"
    UPSTREAM_FAILED = "upstream_failed"
    PARSING = "parsing"
    PARSE_FAILED = "parse_failed"
    COMPLETED = "completed"


TERMINAL_STAGES = {Stage.REJECTED, Stage.UPSTREAM_FAILED, Stage.PARSE_FAILED, Stage.COMPLETED}

# stage -> node that handles it
_NODE_FOR_STAGE = {
    Stage.VALIDATING: "validate",
    Stage.COMPOSING: "compose",
    Stage.REQUESTING: "request",
    Stage.PARSING: "parse",
}


class AnalysisState(TypedDict, total=False):
    stage: Stage
    raw_subject: Any
    subject: str
    payload: GenerationPayload
    raw_text: str
    records: List[Any]
    error: AnalysisError


def next_step(state: AnalysisState) -> str:
    return _NODE_FOR_STAGE.get(state.get("stage"), END)


class AnalysisService:
    def __init__(
        self,
        client: GenerationClient,
        roster: ThinkerRoster = DEFAULT_ROSTER,
        schema: Any = ANALYSIS_SCHEMA,
        validate_records: bool = False,
    ):
        self.client = client
        self.roster = roster
        self.schema = schema
        self.validate_records = validate_records
        self.graph = self._build_graph()

    @classmethod
    def from_settings(cls, settings: Settings) -> "AnalysisService":
        client = build_generation_client(
            LLMConfig(
                provider=settings.llm_provider,
                model=settings.llm_model,
                gemini_api_key=require_api_key(settings),
            )
        )
        return cls(
            client,
            roster=ThinkerRoster.of(settings.thinkers),
            validate_records=settings.validate_records,
        )

    # -----------------------------
    # Nodes
    # -----------------------------
    def node_validate(self, state: AnalysisState) -> AnalysisState:
        try:
            subject = validate_subject(state.get("raw_subject"))
        except ValidationError as e:
            return {**state, "stage": Stage.REJECTED, "error": e}
        logger.info("Analyzing subject %r", subject)
        return {**state, "stage": Stage.COMPOSING, "subject": subject}

    def node_compose(self, state: AnalysisState) -> AnalysisState:
        prompt = compose_prompt(state["subject"], self.roster)
        payload = GenerationPayload(instruction=prompt.instruction, query=prompt.query, schema=self.schema)
        return {**state, "stage": Stage.REQUESTING, "payload": payload}

    async def node_request(self, state: AnalysisState) -> AnalysisState:
        try:
            raw_text = await self.client.generate(state["payload"])
        except UpstreamError as e:
            logger.error("Gemini API error %s: %s", e.status, e.raw_body)
            return {**state, "stage": Stage.UPSTREAM_FAILED, "error": e}
        except EmptyResponseError as e:
            logger.error("Gemini API returned no text for %r", state["subject"])
            return {**state, "stage": Stage.UPSTREAM_FAILED, "error": e}
        return {**state, "stage": Stage.PARSING, "raw_text": raw_text}

    def node_parse(self, state: AnalysisState) -> AnalysisState:
        try:
            records = parse_records(state["raw_text"])
            if self.validate_records:
                records = check_records(records)
        except MalformedResponseError as e:
            logger.error("Unparseable model output (%s). First chars: %r", e, e.snippet)
            return {**state, "stage": Stage.PARSE_FAILED, "error": e}
        if not records:
            logger.warning("Model returned an empty analysis for %r", state["subject"])
        logger.info("Analysis completed for %r (%d entries)", state["subject"], len(records))
        return {**state, "stage": Stage.COMPLETED, "records": records}

    def _build_graph(self):
        g = StateGraph(AnalysisState)

        g.add_node("validate", self.node_validate)
        g.add_node("compose", self.node_compose)
        g.add_node("request", self.node_request)
        g.add_node("parse", self.node_parse)

        g.set_entry_point("validate")
        routes = {name: name for name in _NODE_FOR_STAGE.values()}
        routes[END] = END
        for name in _NODE_FOR_STAGE.values():
            g.add_conditional_edges(name, next_step, routes)

        return g.compile()

    # -----------------------------
    # Entry point
    # -----------------------------
    async def run(self, raw_subject: Any) -> AnalysisState:
        return await self.graph.ainvoke({"stage": Stage.VALIDATING, "raw_subject": raw_subject})

    async def handle(self, raw_subject: Any) -> AnalysisOutcome:
        try:
            final = await self.run(raw_subject)
        except Exception as e:
            logger.exception("Unhandled error during analysis")
            return failure(UnhandledError(e))
        return build_outcome(final)


def build_outcome(state: AnalysisState) -> AnalysisOutcome:
    stage: Optional[Stage] = state.get("stage")

    if stage == Stage.COMPLETED:
        return success(state["subject"], state.get("records", []))

    error = state.get("error")
    if stage in TERMINAL_STAGES and isinstance(error, AnalysisError):
        return failure(error)

    name = stage.value if isinstance(stage, Stage) else stage
    return failure(UnhandledError(RuntimeError(f"pipeline stopped in stage {name}")))
