"""Section locator - finds the ingredients and steps regions of a caption."""

import re
from dataclasses import dataclass

INGREDIENT_HEADER = re.compile(
    r"\b(ingredients?|what you need|you(?:'|’)ll need)\b[:\-–—]?\s*", re.IGNORECASE
)
STEP_HEADER = re.compile(
    r"\b(instructions?|directions?|steps?|method|how\s+to\s+make\s+it)\b[:\-–—]?\s*",
    re.IGNORECASE,
)

# A hashtag block or a "less" (collapsed caption) marker starts the tail
TAIL_NOISE = re.compile(r"\n[^\S\n]*(?:#|less\b)", re.IGNORECASE)


@dataclass
class SectionSlice:
    """Ingredient and step regions of a caption.

    Header positions are -1 when the header is absent.
    """
    ingredient_blob: str
    step_blob: str
    ingredient_header_pos: int = -1
    step_header_pos: int = -1


def strip_tail_noise(text: str) -> str:
    """Cut text at the first trailing hashtag block or "less" line."""
    match = TAIL_NOISE.search(text)
    return text[:match.start()] if match else text


def find_ingredient_header(text: str) -> int:
    """Position of the first ingredients header, or -1."""
    match = INGREDIENT_HEADER.search(text or "")
    return match.start() if match else -1


def find_step_header(text: str) -> int:
    """Position of the first steps header, or -1."""
    match = STEP_HEADER.search(text or "")
    return match.start() if match else -1


def _after_header(text: str, pattern: re.Pattern) -> str:
    """Text with the leading header match removed."""
    return pattern.sub("", text, count=1)


def slice_sections(text: str) -> SectionSlice:
    """Slice normalized text into an ingredient blob and a step blob.

    Four cases:
        both headers   -> ingredients between the headers (empty when the
                          steps header comes first), steps after their header
        ingredients    -> everything after the header
        steps only     -> text before the header is taken as ingredients
        neither        -> the whole text is the ingredient blob

    Args:
        text: Normalized caption text

    Returns:
        SectionSlice with both blobs trimmed of tail noise
    """
    text = text or ""
    ing_pos = find_ingredient_header(text)
    step_pos = find_step_header(text)

    ingredient_blob = ""
    step_blob = ""
    if ing_pos >= 0 and step_pos >= 0:
        if step_pos > ing_pos:
            ingredient_blob = _after_header(text[ing_pos:step_pos], INGREDIENT_HEADER)
        step_blob = _after_header(text[step_pos:], STEP_HEADER)
    elif ing_pos >= 0:
        ingredient_blob = _after_header(text[ing_pos:], INGREDIENT_HEADER)
    elif step_pos >= 0:
        ingredient_blob = text[:step_pos]
        step_blob = _after_header(text[step_pos:], STEP_HEADER)
    else:
        ingredient_blob = text

    return SectionSlice(
        ingredient_blob=strip_tail_noise(ingredient_blob),
        step_blob=strip_tail_noise(step_blob),
        ingredient_header_pos=ing_pos,
        step_header_pos=step_pos,
    )
