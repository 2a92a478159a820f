"""
Paraphrase Schemas
==================
Pydantic models for the paraphrase endpoint.
"""

from typing import List, Literal
from pydantic import BaseModel, Field

from .base import CamelModel


class HighlightSchema(BaseModel):
    """A changed span [start, end) of the paraphrased text."""
    
    start: int = Field(..., ge=0)
    end: int = Field(..., gt=0)
    type: Literal["synonym", "grammar", "tone"]


class ParaphraseRequest(CamelModel):
    """Request body for the paraphrase endpoint."""
    
    text: str = Field(
        ...,
        min_length=1,
        description="Text to paraphrase",
    )
    mode: Literal["academic", "formal", "creative", "seo", "simplify"] = Field(
        ...,
        description="Rewrite style",
    )
    language: str = Field(
        "English",
        description="Output language",
    )
    citation_format: Literal["APA", "MLA", "Chicago"] = Field(
        "APA",
        description="Citation style to preserve",
    )
    style_matching: bool = Field(
        False,
        description="Keep the author's own voice",
    )


class ParaphraseResponse(CamelModel):
    """Response body for the paraphrase endpoint."""
    
    session_id: str
    original_text: str
    paraphrased_text: str
    highlights: List[HighlightSchema]
    mode: str
    language: str
    citation_format: str
