"""
Rewrite Pipeline State
======================
Defines the types and the state that flows through the rewrite graph.

The state contains everything needed for:
- The validated rewrite request
- The composed oracle instruction
- The oracle's raw claims
- The reconstructed highlights
"""

from typing import TypedDict, List, Dict, Any, Optional, Annotated
from dataclasses import dataclass
from enum import Enum
import operator


class RewriteMode(str, Enum):
    """Rewrite styles the oracle can be asked for."""
    ACADEMIC = "academic"
    FORMAL = "formal"
    CREATIVE = "creative"
    SEO = "seo"
    SIMPLIFY = "simplify"


class CitationFormat(str, Enum):
    """Citation styles preserved verbatim in the rewrite."""
    APA = "APA"
    MLA = "MLA"
    CHICAGO = "Chicago"


class HighlightKind(str, Enum):
    """Why a span of the rewritten text changed."""
    SYNONYM = "synonym"      # Word or phrase replacement
    GRAMMAR = "grammar"      # Grammatical fix or restructuring
    TONE = "tone"            # Style, formality or voice


DEFAULT_LANGUAGE = "English"
DEFAULT_CITATION_FORMAT = CitationFormat.APA.value


@dataclass(frozen=True)
class RewriteRequest:
    """A validated request for one rewrite."""
    text: str
    mode: str
    language: str = DEFAULT_LANGUAGE
    citation_format: str = DEFAULT_CITATION_FORMAT
    style_matching: bool = False


@dataclass(frozen=True)
class Claim:
    """
    One edit as reported by the oracle.

    Not trusted: `approx_start` is only a hint for where to start
    searching for `rewritten_phrase` in the rewritten text.
    """
    original_phrase: str
    rewritten_phrase: str
    kind: str
    approx_start: int = 0

    @classmethod
    def from_change(cls, change: Dict[str, Any]) -> "Claim":
        """Build a claim from an oracle change object."""
        return cls(
            original_phrase=change.get("original", ""),
            rewritten_phrase=change.get("paraphrased", ""),
            kind=change.get("type", ""),
            approx_start=change.get("startIndex", 0),
        )


@dataclass(frozen=True)
class Highlight:
    """A validated span [start, end) over the rewritten text."""
    start: int
    end: int
    kind: str

    def to_dict(self) -> Dict[str, Any]:
        """Wire format used by the API and the database."""
        return {"start": self.start, "end": self.end, "type": self.kind}


@dataclass
class RewriteResult:
    """Output of one rewrite."""
    rewritten_text: str
    highlights: List[Highlight]

    def highlights_as_dicts(self) -> List[Dict[str, Any]]:
        return [h.to_dict() for h in self.highlights]


class RewriteState(TypedDict):
    """
    The state object that flows through the rewrite graph.
    """
    
    # ----- Input -----
    text: str
    mode: str
    language: str
    citation_format: str
    style_matching: bool
    
    # ----- Oracle Call -----
    system_instruction: Optional[str]
    response_schema: Optional[Dict[str, Any]]
    user_content: Optional[str]
    
    # ----- Oracle Output -----
    rewritten_text: Optional[str]
    claims: List[Claim]
    
    # ----- Output -----
    highlights: List[Highlight]
    
    # ----- Metadata -----
    current_node: str
    node_history: Annotated[List[str], operator.add]  # Append-only


def create_initial_state(request: RewriteRequest) -> RewriteState:
    """Create initial state for a new rewrite."""
    return RewriteState(
        text=request.text,
        mode=request.mode,
        language=request.language,
        citation_format=request.citation_format,
        style_matching=request.style_matching,
        # Oracle call
        system_instruction=None,
        response_schema=None,
        user_content=None,
        # Oracle output
        rewritten_text=None,
        claims=[],
        # Output
        highlights=[],
        # Metadata
        current_node="start",
        node_history=[],
    )
