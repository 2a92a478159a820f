"""
Rewrite Nodes Package
=====================
All node implementations for the rewrite pipeline.

Nodes:
- compose_instruction: Build the oracle instruction for the mode/language/citation style
- call_oracle: Run the rewrite provider and parse its payload
- reconstruct: Turn claimed changes into validated highlights

validate_request runs before the graph so a bad request does no work.
"""

from pipeline.nodes.ingest import validate_request
from pipeline.nodes.compose import compose_instruction, build_system_instruction
from pipeline.nodes.oracle import call_oracle, reconstruct

__all__ = [
    # Validation
    "validate_request",
    # Instruction
    "compose_instruction",
    "build_system_instruction",
    # Oracle
    "call_oracle",
    "reconstruct",
]
