"""
LangGraph Graph Definition
==========================
Defines the StateGraph that runs one rewrite.

Flow:
    compose_instruction
        → call_oracle
        → reconstruct
        → END

Errors raised inside a node (oracle failures, malformed payloads)
propagate out of the graph unchanged.
"""

from typing import Any, Dict, Mapping, Union

import structlog
from langgraph.graph import StateGraph, END

from pipeline.state import (
    RewriteRequest,
    RewriteResult,
    RewriteState,
    create_initial_state,
)
from pipeline.nodes import (
    validate_request,
    compose_instruction,
    call_oracle,
    reconstruct,
)
from pipeline.oracle import RewriteProvider

logger = structlog.get_logger(__name__)


# ----- Build the Graph -----

def build_graph() -> StateGraph:
    """
    Build and return the rewrite StateGraph.
    
    START → compose_instruction → call_oracle → reconstruct → END
    """
    graph = StateGraph(RewriteState)
    
    graph.add_node("compose_instruction", compose_instruction)
    graph.add_node("call_oracle", call_oracle)
    graph.add_node("reconstruct", reconstruct)
    
    graph.set_entry_point("compose_instruction")
    graph.add_edge("compose_instruction", "call_oracle")
    graph.add_edge("call_oracle", "reconstruct")
    graph.add_edge("reconstruct", END)
    
    return graph


def create_app():
    """
    Create the compiled graph.
    
    No checkpointer: every rewrite is independent.
    """
    return build_graph().compile()


# Singleton instance
_app_instance = None


def get_app():
    """Get or create the singleton compiled graph."""
    global _app_instance
    if _app_instance is None:
        _app_instance = create_app()
    return _app_instance


class RewriteOrchestrator:
    """
    Runs the rewrite pipeline against one rewrite provider.
    
    Usage:
        orchestrator = RewriteOrchestrator(LangChainRewriteProvider())
        request = orchestrator.validate({"text": "...", "mode": "formal"})
        result = await orchestrator.rewrite(request)
    """
    
    def __init__(self, provider: RewriteProvider):
        self.provider = provider
        self._graph = get_app()
    
    def validate(self, data: Union[RewriteRequest, Mapping[str, Any]]) -> RewriteRequest:
        """Validate a request. Raises InvalidRequest."""
        if isinstance(data, RewriteRequest):
            data = {
                "text": data.text,
                "mode": data.mode,
                "language": data.language,
                "citation_format": data.citation_format,
                "style_matching": data.style_matching,
            }
        return validate_request(data)
    
    async def rewrite(
        self,
        request: Union[RewriteRequest, Mapping[str, Any]],
    ) -> RewriteResult:
        """
        Rewrite the text and reconstruct its highlights.
        
        No retries: oracle errors go straight to the caller.
        
        Raises:
            InvalidRequest: bad input, before the oracle is called
            OracleError: any oracle-side failure
        """
        request = self.validate(request)
        
        final_state: Dict[str, Any] = await self._graph.ainvoke(
            create_initial_state(request),
            {"configurable": {"provider": self.provider}},
        )
        
        logger.info(
            "Rewrite completed",
            mode=request.mode,
            language=request.language,
            highlight_count=len(final_state["highlights"]),
            node_history=final_state.get("node_history", []),
        )
        
        return RewriteResult(
            rewritten_text=final_state["rewritten_text"],
            highlights=list(final_state["highlights"]),
        )
