"""
Highlight Reconstruction
========================
Turns the oracle's claimed edits into validated spans over the rewritten text.

The oracle reports each edit with a position, but those positions are
often wrong. Every claim is re-located by searching the rewritten text
for the rewritten phrase, starting at the claimed position:

    "The cat sat down on the mat."
             ^ "sat down" claimed at 4, found at 8 -> [8, 16)

Claims that cannot be found are dropped. Surviving spans are sorted
and same-kind spans that touch or overlap are merged.
"""

from typing import Iterable, List, Optional

from pipeline.state import Claim, Highlight, HighlightKind

VALID_KINDS = frozenset(kind.value for kind in HighlightKind)


def locate_claim(rewritten_text: str, claim: Claim) -> Optional[Highlight]:
    """
    Find where a claim's rewritten phrase actually sits.

    Returns None if the phrase is empty, the kind is unknown, or the
    phrase does not occur at or after the claimed offset.
    """
    phrase = claim.rewritten_phrase
    if not phrase or claim.kind not in VALID_KINDS:
        return None

    try:
        hint = max(0, int(claim.approx_start))
    except (TypeError, ValueError, OverflowError):
        hint = 0

    index = rewritten_text.find(phrase, hint)
    if index == -1:
        return None

    return Highlight(start=index, end=index + len(phrase), kind=claim.kind)


def merge_highlights(highlights: Iterable[Highlight]) -> List[Highlight]:
    """
    Coalesce overlapping or adjacent spans of the same kind.

    Spans of different kinds are emitted as they are, even when they
    overlap.
    """
    # sorted() is stable: equal starts keep claim order
    ordered = sorted(highlights, key=lambda h: h.start)
    if not ordered:
        return []

    merged: List[Highlight] = []
    current = ordered[0]

    for nxt in ordered[1:]:
        if nxt.start <= current.end and nxt.kind == current.kind:
            current = Highlight(
                start=current.start,
                end=max(current.end, nxt.end),
                kind=current.kind,
            )
        else:
            merged.append(current)
            current = nxt

    merged.append(current)
    return merged


def reconstruct_highlights(rewritten_text: str, claims: Iterable[Claim]) -> List[Highlight]:
    """
    Build the final highlight list for a rewritten text.

    Args:
        rewritten_text: The text returned by the oracle
        claims: The oracle's claimed edits, in the order it reported them

    Returns:
        Highlights sorted by start, each with 0 <= start < end <= len(text)
    """
    located = []
    for claim in claims:
        highlight = locate_claim(rewritten_text, claim)
        if highlight is not None:
            located.append(highlight)

    return merge_highlights(located)
