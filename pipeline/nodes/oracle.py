"""
Oracle Nodes
============
Calls the rewrite provider and post-processes its claims.
"""

from typing import Any, Dict

import structlog
from langchain_core.runnables import RunnableConfig

from pipeline.errors import OracleFailure
from pipeline.highlights import reconstruct_highlights
from pipeline.oracle import RewriteProvider, parse_oracle_payload
from pipeline.state import Claim, RewriteState

logger = structlog.get_logger(__name__)


async def call_oracle(state: RewriteState, config: RunnableConfig) -> Dict[str, Any]:
    """
    Send the composed instruction to the rewrite provider.
    
    The provider comes from config["configurable"]["provider"].
    This is the only node that waits on the network.
    """
    provider: RewriteProvider = config.get("configurable", {}).get("provider")
    if provider is None:
        raise OracleFailure("Paraphrasing failed: no rewrite provider configured")
    
    payload = await provider.rewrite(
        state["system_instruction"],
        state["response_schema"],
        state["user_content"],
    )
    response = parse_oracle_payload(payload)
    
    logger.debug(
        "Oracle responded",
        mode=state["mode"],
        text_length=len(response.paraphrasedText),
        change_count=len(response.changes),
    )
    
    return {
        "rewritten_text": response.paraphrasedText,
        "claims": [Claim.from_change(change.model_dump()) for change in response.changes],
        "current_node": "call_oracle",
        "node_history": ["call_oracle"],
    }


def reconstruct(state: RewriteState) -> Dict[str, Any]:
    """Validate the oracle's claims against the rewritten text."""
    claims = state.get("claims", [])
    highlights = reconstruct_highlights(state["rewritten_text"], claims)
    
    dropped = len(claims) - len(highlights)
    if dropped > 0:
        logger.debug("Claims dropped or merged", claims=len(claims), highlights=len(highlights))
    
    return {
        "highlights": highlights,
        "current_node": "reconstruct",
        "node_history": ["reconstruct"],
    }
