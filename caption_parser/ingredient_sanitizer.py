"""Ingredient line sanitizer - scrubs candidate lines and tags section headers.

Used by the full caption parser, and on its own by callers that already
found an ingredients section and just need the lines cleaned up.
"""

import re
from dataclasses import dataclass
from typing import List

from caption_parser.normalizer import trim_trailing
from caption_parser.vocabulary import (
    HEADER_UNIT_WORDS,
    INLINE_INGREDIENT_WORDS,
    NUMBER_WORDS,
    SECTION_HINTS,
    word_pattern,
)

DASHES = re.compile(r"[–—−]")
MULTI_SPACE = re.compile(r"\s{2,}")
BOLD_MD = re.compile(r"\*{1,3}([^*]+)\*{1,3}")
TRAIL_DECOR = "-–—•"
LEAD_BULLET = re.compile(r"^\s*[-–—•*]+\s*")
MARKUP = re.compile(r"[_`~]")
DASH_JOIN = re.compile(r"\s[-–—]\s")

# "warmed to 110F" left on its own after a split
TEMP_FRAGMENT = re.compile(
    r"^(?:warmed|warm|heated|heat|cooled|cool)\s+to\s+[-~]?\s*\d+\s*(?:°\s*)?(?:f|c)\b",
    re.IGNORECASE,
)

HEADER_UNIT = word_pattern(HEADER_UNIT_WORDS)
INLINE_INGREDIENT = word_pattern(INLINE_INGREDIENT_WORDS)
NUMBER_WORD = word_pattern(NUMBER_WORDS)

GENERIC_HEADER_SKIP = re.compile(r"title/captions", re.IGNORECASE)
TITLE_CASE_HEADER = re.compile(r"^[A-Z][A-Za-z]+(?:\s+[A-Z][A-Za-z]+){0,5}$")
SHORT_TITLE_CASE_HEADER = re.compile(r"^[A-Z][A-Za-z]+(?:\s+[A-Z][A-Za-z]+){0,3}$")
FOR_THE = re.compile(r"^for\s+(?:the\s+)?", re.IGNORECASE)

NAKED_INGREDIENTS = re.compile(r"^\s*(ingredients?|ingredient\s+list)\b", re.IGNORECASE)
INLINE_HEADER = re.compile(r"([A-Z][A-Za-z\s]{0,80}):")
HEADER_AT_END = re.compile(r"([A-Za-z][A-Za-z\s]{1,60}):\s*$")

LEADING_QTY = re.compile(r"^(\d+/\d+|\d+(?:\s+\d+/\d+)?)")
INGREDIENT_HINTS = re.compile(r"[-•\d]")
SECTIONISH_HINTS = re.compile(r"(?:recipe|details|makes|serves|yield)\b", re.IGNORECASE)
LONG_LINE_LIMIT = 160
MAX_HEADER_LENGTH = 80


@dataclass(frozen=True)
class IngredientCandidate:
    """One sanitized line. Headers name a section and are never ingredients."""
    text: str
    is_section_header: bool = False
    is_low_confidence: bool = False


def basic_clean(text: str) -> str:
    """Unify dashes, drop markdown and bullets, squeeze spaces."""
    text = DASHES.sub("-", text)
    text = BOLD_MD.sub(r"\1", text)
    text = MARKUP.sub("", text)
    text = MULTI_SPACE.sub(" ", text)
    text = LEAD_BULLET.sub("", text)
    text = trim_trailing(text, TRAIL_DECOR)
    return text.strip()


def _has_section_hint(header: str) -> bool:
    lower = header.lower()
    return any(hint in lower for hint in SECTION_HINTS)


def looks_like_section_header(text: str) -> bool:
    """Check if a line is a sub-header such as "For the Ganache:".

    Only lines ending in a colon qualify. The part before the colon must
    be free of digits and units, and either carry a section hint word,
    be Title Case, or start with "for the".
    """
    trimmed = (text or "").strip()
    if not trimmed or GENERIC_HEADER_SKIP.search(trimmed):
        return False
    if not trimmed.endswith(":"):
        return False

    base = trimmed[:-1].strip()
    if not base or re.search(r"\d", base):
        return False
    if HEADER_UNIT.search(base):
        return False

    return _has_section_hint(base) or bool(TITLE_CASE_HEADER.match(base)) or bool(FOR_THE.match(base))


def _normalize_header(raw: str) -> str:
    """Trim decoration and a lowercase lead-in ("and Filling" -> "Filling")."""
    stripped = trim_trailing(raw or "", TRAIL_DECOR).strip()
    if not stripped:
        return ""
    first_upper = re.search(r"[A-Z]", stripped)
    if first_upper and first_upper.start() > 0:
        prefix = stripped[:first_upper.start()].strip()
        if prefix and re.fullmatch(r"[a-z\s]+", prefix):
            return stripped[first_upper.start():].strip()
    return stripped


def _tail_looks_like_ingredient(tail: str) -> bool:
    core = re.sub(r"^[-•*]+\s*", "", tail or "").strip()
    if not core:
        return False
    return bool(
        LEADING_QTY.match(core) or NUMBER_WORD.search(core) or INLINE_INGREDIENT.search(core)
    )


def _should_split_inline_header(header_raw: str, tail: str) -> bool:
    header = _normalize_header(header_raw)
    if not header or GENERIC_HEADER_SKIP.search(header):
        return False
    if not (_has_section_hint(header) or SHORT_TITLE_CASE_HEADER.match(header)):
        return False
    return _tail_looks_like_ingredient(tail)


def split_inline_header_segments(raw: str) -> List[str]:
    """Split "Filling: 2 cups cream" into ["Filling:", "2 cups cream"]."""
    if not raw or not raw.strip():
        return []

    naked = NAKED_INGREDIENTS.match(raw)
    if naked:
        after = raw[naked.end():].lstrip(" :-").strip()
        if _tail_looks_like_ingredient(after):
            header = _normalize_header(naked.group(0))
            return [part for part in (f"{header}:" if header else "", after) if part]

    parts = []
    cursor = 0
    for match in INLINE_HEADER.finditer(raw):
        if not _should_split_inline_header(match.group(1), raw[match.end():]):
            continue
        before = raw[cursor:match.start()].strip()
        if before:
            parts.append(before)
        header = _normalize_header(match.group(1))
        if header:
            parts.append(f"{header}:")
        cursor = match.end()

    tail = raw[cursor:].strip()
    if tail:
        parts.append(tail)
    return parts or [raw]


def _expand_headers(lines: List[str]) -> List[str]:
    """Put inline and trailing sub-headers on their own lines."""
    expanded = []
    for raw in lines:
        if not raw:
            continue
        for segment in split_inline_header_segments(raw):
            trimmed = segment.rstrip()
            if not trimmed:
                continue
            tail_match = HEADER_AT_END.search(trimmed)
            if tail_match and not re.search(r"\d", tail_match.group(1)):
                before = trimmed[:tail_match.start()].strip()
                if before:
                    expanded.append(before)
                header = _normalize_header(tail_match.group(1))
                if header:
                    expanded.append(f"{header}:")
            else:
                expanded.append(segment)
    return expanded


def fix_leading_slash_fraction(text: str) -> str:
    """Scan error: "/2 cup milk" -> "1/2 cup milk"."""
    return re.sub(r"^/(\d)\b", r"1/\1", text)


def fix_leading_spoon(text: str) -> tuple[str, bool]:
    """Scan error: "spoon sugar" -> "1 tablespoon sugar", flagged as a guess."""
    if re.match(r"^\s*spoon\b", text, re.IGNORECASE):
        return re.sub(r"^\s*spoon\b", "1 tablespoon", text, flags=re.IGNORECASE), True
    return text, False


def trim_dangling_paren(text: str) -> str:
    """Drop one trailing ")" that has no opening partner."""
    if text.count(")") > text.count("(") and text.endswith(")"):
        return text[:-1].strip()
    return text


def split_dash_joined(text: str) -> List[str]:
    """Split "A - B" glued items into ["A", "B"]."""
    parts = [part.strip() for part in DASH_JOIN.split(text) if part.strip()]
    return parts if len(parts) > 1 else [text.strip()]


def sanitize_and_split_ingredient_candidates(lines: List[str]) -> List[IngredientCandidate]:
    """Clean raw ingredient lines into candidates, tagging section headers.

    Args:
        lines: Raw lines from an ingredients region

    Returns:
        Ordered candidates. Header candidates carry the section name without
        its colon. Duplicates are dropped inside each section but kept
        across sections.
    """
    pieces: List[IngredientCandidate] = []

    for raw in _expand_headers(lines or []):
        if not raw or not raw.strip():
            continue

        text = basic_clean(raw)
        if not text:
            continue
        if (
            len(text) > LONG_LINE_LIMIT
            and not INGREDIENT_HINTS.search(text)
            and not SECTIONISH_HINTS.search(text)
        ):
            continue

        if looks_like_section_header(text):
            colon = text.find(":")
            after_colon = text[colon + 1:].strip()
            name = _normalize_header(trim_trailing(text[:colon], TRAIL_DECOR).strip())
            if name and len(name) <= MAX_HEADER_LENGTH:
                pieces.append(IngredientCandidate(name, is_section_header=True))
            if not after_colon:
                continue
            text = after_colon

        text = fix_leading_slash_fraction(text)
        text, guessed = fix_leading_spoon(text)
        text = trim_dangling_paren(text)

        for part in split_dash_joined(text):
            part = basic_clean(part)
            if not part:
                continue
            pieces.append(IngredientCandidate(part, is_low_confidence=guessed))
            # only the first piece keeps the guess flag
            guessed = False

    merged: List[IngredientCandidate] = []
    for piece in pieces:
        if TEMP_FRAGMENT.match(piece.text) and merged and not merged[-1].is_section_header:
            prev = merged[-1]
            merged[-1] = IngredientCandidate(
                f"{prev.text} {piece.text}".strip(),
                is_low_confidence=prev.is_low_confidence or piece.is_low_confidence,
            )
        else:
            merged.append(piece)

    result = []
    seen = set()
    for piece in merged:
        if piece.is_section_header:
            seen = set()
            result.append(piece)
            continue
        key = piece.text.lower()
        if key in seen:
            continue
        seen.add(key)
        result.append(piece)
    return result
