"""
Instruction Composition
=======================
Builds the system instruction, response schema and user content for the oracle.
"""

from typing import Any, Dict

from pipeline.state import RewriteState


MODE_DIRECTIVES = {
    "academic": (
        "Rewrite this text in an academic style, using scholarly language, formal tone, "
        "and maintaining citation integrity. Focus on clarity, precision, and academic conventions."
    ),
    "formal": (
        "Rewrite this text in a formal professional style, using polished language "
        "appropriate for business or official communications."
    ),
    "creative": (
        "Rewrite this text in a creative and engaging style, using varied sentence structures, "
        "vivid language, and compelling expressions while maintaining the core meaning."
    ),
    "seo": (
        "Rewrite this text optimized for search engines, using relevant keywords naturally, "
        "improving readability, and maintaining engaging content structure."
    ),
    "simplify": (
        "Rewrite this text in simple, clear language that is easy to understand for beginners, "
        "using shorter sentences and common vocabulary."
    ),
}


STYLE_MATCHING_DIRECTIVE = (
    "STYLE MATCHING: keep the author's own voice. Stay close to their sentence rhythm, "
    "vocabulary level and use of person while applying the requested mode."
)


SYSTEM_PROMPT = """You are an expert paraphrasing assistant specializing in {mode} writing style.

Your task is to:
1. Rewrite the provided text according to the specified mode: {mode_directive}
2. Preserve any citations in {citation_format} format exactly as they appear
3. Maintain the original meaning and key information
4. Generate appropriate highlights for changes made
5. Ensure the output is in {language} language
6. Provide detailed change tracking for visualization
{style_matching}
IMPORTANT: Preserve all in-text citations (Author, Year), reference numbers [1], and bibliographic information exactly as they appear in the original text.

Respond with JSON in this exact format:
{{
  "paraphrasedText": "the rewritten text",
  "changes": [
    {{
      "original": "original phrase",
      "paraphrased": "rewritten phrase",
      "type": "synonym|grammar|tone",
      "startIndex": number,
      "endIndex": number
    }}
  ]
}}

"startIndex" and "endIndex" are character offsets of the rewritten phrase in "paraphrasedText".

Change types:
- "synonym": Word or phrase replacements with similar meaning
- "grammar": Grammatical improvements, sentence restructuring
- "tone": Changes in writing style, formality, or voice"""


USER_PROMPT = "Please paraphrase the following text:\n\n{text}"


RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "paraphrasedText": {"type": "string"},
        "changes": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "original": {"type": "string"},
                    "paraphrased": {"type": "string"},
                    "type": {"type": "string", "enum": ["synonym", "grammar", "tone"]},
                    "startIndex": {"type": "number"},
                    "endIndex": {"type": "number"},
                },
                "required": ["original", "paraphrased", "type", "startIndex", "endIndex"],
            },
        },
    },
    "required": ["paraphrasedText", "changes"],
}


def build_system_instruction(
    mode: str,
    language: str,
    citation_format: str,
    style_matching: bool = False,
) -> str:
    """Compose the oracle's system instruction for one request."""
    return SYSTEM_PROMPT.format(
        mode=mode,
        mode_directive=MODE_DIRECTIVES[mode],
        citation_format=citation_format,
        language=language,
        style_matching=f"7. {STYLE_MATCHING_DIRECTIVE}\n" if style_matching else "",
    )


def compose_instruction(state: RewriteState) -> Dict[str, Any]:
    """
    Prepare the oracle call.
    
    This node fills in the system instruction, the response schema
    and the user content.
    """
    return {
        "system_instruction": build_system_instruction(
            mode=state["mode"],
            language=state["language"],
            citation_format=state["citation_format"],
            style_matching=state.get("style_matching", False),
        ),
        "response_schema": RESPONSE_SCHEMA,
        "user_content": USER_PROMPT.format(text=state["text"]),
        "current_node": "compose_instruction",
        "node_history": ["compose_instruction"],
    }
