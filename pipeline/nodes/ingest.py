"""
Request Validation
==================
Checks an incoming rewrite request before any work is done.
"""

from typing import Any, Dict, List, Mapping, Optional

from pipeline.errors import InvalidRequest
from pipeline.state import (
    CitationFormat,
    DEFAULT_CITATION_FORMAT,
    DEFAULT_LANGUAGE,
    RewriteMode,
    RewriteRequest,
)

VALID_MODES = [mode.value for mode in RewriteMode]
VALID_CITATION_FORMATS = [fmt.value for fmt in CitationFormat]


def validate_request(data: Mapping[str, Any]) -> RewriteRequest:
    """
    Validate raw request fields and apply defaults.
    
    Accepts both snake_case and the API's camelCase keys for the
    citation format and style matching flags.
    
    Raises:
        InvalidRequest: listing every field that failed
    """
    errors: List[Dict[str, Any]] = []
    
    text = data.get("text")
    if not isinstance(text, str) or not text:
        errors.append({"field": "text", "message": "Text is required"})
    
    mode = data.get("mode")
    if mode not in VALID_MODES:
        errors.append({
            "field": "mode",
            "message": f"Mode must be one of: {', '.join(VALID_MODES)}",
        })
    
    language = data.get("language")
    if language is None or language == "":
        language = DEFAULT_LANGUAGE
    elif not isinstance(language, str):
        errors.append({"field": "language", "message": "Language must be a string"})
    
    citation_format = _first_present(data, "citation_format", "citationFormat")
    if citation_format is None:
        citation_format = DEFAULT_CITATION_FORMAT
    elif citation_format not in VALID_CITATION_FORMATS:
        errors.append({
            "field": "citationFormat",
            "message": f"Citation format must be one of: {', '.join(VALID_CITATION_FORMATS)}",
        })
    
    style_matching = _first_present(data, "style_matching", "styleMatching")
    if style_matching is None:
        style_matching = False
    elif not isinstance(style_matching, bool):
        errors.append({"field": "styleMatching", "message": "styleMatching must be a boolean"})
    
    if errors:
        raise InvalidRequest("Invalid request data", errors=errors)
    
    return RewriteRequest(
        text=text,
        mode=mode,
        language=language,
        citation_format=citation_format,
        style_matching=style_matching,
    )


def _first_present(data: Mapping[str, Any], *keys: str) -> Optional[Any]:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None
