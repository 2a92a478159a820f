"""
Rewrite Pipeline Package
========================
The rewrite core: instruction composition, the oracle call and
highlight reconstruction, wired together as a LangGraph graph.

Usage:
    from pipeline import RewriteOrchestrator, LangChainRewriteProvider
    
    orchestrator = RewriteOrchestrator(LangChainRewriteProvider(provider="openai"))
    result = await orchestrator.rewrite({
        "text": "The cat sat on the mat.",
        "mode": "simplify",
    })
"""

from pipeline.state import (
    Claim,
    CitationFormat,
    Highlight,
    HighlightKind,
    RewriteMode,
    RewriteRequest,
    RewriteResult,
    RewriteState,
    create_initial_state,
)
from pipeline.errors import (
    PipelineError,
    InvalidRequest,
    OracleError,
    OracleAuthFailure,
    OracleQuotaExceeded,
    OracleRateLimited,
    OracleFailure,
)
from pipeline.highlights import reconstruct_highlights
from pipeline.oracle import RewriteProvider, LangChainRewriteProvider
from pipeline.graph import build_graph, create_app, get_app, RewriteOrchestrator
from pipeline.llm import get_llm

__all__ = [
    "Claim",
    "CitationFormat",
    "Highlight",
    "HighlightKind",
    "RewriteMode",
    "RewriteRequest",
    "RewriteResult",
    "RewriteState",
    "create_initial_state",
    "PipelineError",
    "InvalidRequest",
    "OracleError",
    "OracleAuthFailure",
    "OracleQuotaExceeded",
    "OracleRateLimited",
    "OracleFailure",
    "reconstruct_highlights",
    "RewriteProvider",
    "LangChainRewriteProvider",
    "build_graph",
    "create_app",
    "get_app",
    "RewriteOrchestrator",
    "get_llm",
]
