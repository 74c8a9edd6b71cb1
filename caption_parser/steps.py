"""Step pipeline - splits the steps region into short instruction lines."""

import re
from typing import List

from caption_parser.ingredients import is_likely_promo_line, looks_like_ingredient_shape
from caption_parser.normalizer import (
    ENTITY_DECODES,
    INVISIBLE_CHARS,
    INVISIBLE_ENTITIES,
    PLACEHOLDERS,
    squeeze_whitespace,
    strip_emoji,
    tidy_spaces,
)
from caption_parser.vocabulary import (
    COOKING_VERBS,
    CUE_VERBS,
    IMPERATIVE_VERBS,
    META_LABELS,
    META_PRODUCT_NOUNS,
    PERIOD_STEP_VERBS,
    STEP_TRANSITION_WORDS,
    word_pattern,
)

MAX_STEPS = 60
LONG_SENTENCE = 140

INLINE_NUMBER = re.compile(r"(\s)(\d{1,2}[.)]\s+)")
INLINE_BULLET = re.compile(r"(?<!\d)\s([-*•]\s+)")
SEPARATORS = re.compile(r"\s*[;|]+\s*")
TRANSITION_BREAK = re.compile(
    r"(?<=\.)\s+(?=(?:" + "|".join(STEP_TRANSITION_WORDS) + r")\b)"
)
NUMBER_TOKEN_SPLIT = re.compile(r"(?=\b\d{1,2}[.)]\s+)")

LEAD_BULLET = re.compile(r"^\s*(?:[•\-*]\s+)+")
LEAD_NUMBER = re.compile(r"^\s*\d{1,2}\s*[.):]\s+")
HASHTAG_WORD = re.compile(r"#[\w-]+")
STEP_LABEL = re.compile(r"^steps?\b\s*\d*\s*[:.)-]?\s*", re.IGNORECASE)

IMPERATIVE_START = re.compile(r"^(?:" + "|".join(IMPERATIVE_VERBS) + r")\b", re.IGNORECASE)
PERIOD_STEP_VERB = word_pattern(PERIOD_STEP_VERBS)
VERB_ANYWHERE = word_pattern(COOKING_VERBS)

META_LABEL = re.compile(r"^(?:" + "|".join(META_LABELS) + r")\b", re.IGNORECASE)
META_INLINE = re.compile(r"(?:^|\s)(?:prep time:|cook time:|total time:|kcal\b|calories\b)", re.IGNORECASE)
META_COUNT = re.compile(r"^\d+\s+(?:" + "|".join(META_PRODUCT_NOUNS) + r")\b", re.IGNORECASE)

SENTENCE_SPLIT = re.compile(r"(?<=\.)\s+(?=[A-Z])")
_CUES = "|".join(CUE_VERBS)
CUE_CHECK = re.compile(rf"\b(?:{_CUES})\b", re.IGNORECASE)
CLAUSE_SPLIT = re.compile(
    rf",\s+(?:(?:and\s+)?then\s+|and\s+)?(?=(?:{_CUES})\b)", re.IGNORECASE
)
CLAUSE_LEAD = re.compile(r"^(?:and|then)\s+", re.IGNORECASE)

PAN_LOOSE_X = re.compile(r"\b\d+\s*x\s*$", re.IGNORECASE)
PAN_DIMENSION = re.compile(
    r"^[-–—]?\s*(?:inch(?:es)?\b|in\.)|^\d+\s*x\s*\d+|^\d+\s*-?\s*(?:inch(?:es)?\b|in\.)",
    re.IGNORECASE,
)


def force_inline_step_breaks(text: str) -> str:
    """Put inline numbering, bullets, ";" and "|" separators on new lines.

    Periods only break when followed by a transition word such as
    "Then" or "Next", so ordinary sentences stay together.
    """
    if not text:
        return ""
    text = squeeze_whitespace(text)
    text = INLINE_NUMBER.sub(r"\n\2", text)
    text = INLINE_BULLET.sub(r"\n\1", text)
    text = SEPARATORS.sub("\n", text)
    text = TRANSITION_BREAK.sub("\n", text)
    return re.sub(r"\n{2,}", "\n", text).strip()


def strip_editor_artifacts(text: str) -> str:
    """Remove leftover entities, zero-width chars, placeholders and markdown."""
    for pattern, replacement in ENTITY_DECODES:
        text = pattern.sub(replacement, text)
    text = INVISIBLE_ENTITIES.sub("", text)
    text = INVISIBLE_CHARS.sub("", text)
    for pattern in PLACEHOLDERS:
        text = pattern.sub("", text)
    text = re.sub(r"\*{2,}", "", text)
    text = re.sub(r"\s{2,}", " ", text).strip()
    if text.endswith(";"):
        text = text[:-1].rstrip()
    # a lonely trailing "&" goes, "salt & pepper" stays
    if text.endswith("&"):
        text = text[:-1].rstrip()
    return text


def clean_step_line(line: str) -> str:
    """Strip emoji, numbering, bullets, "Step 2:" labels and trailing hashtags."""
    text = tidy_spaces(strip_emoji(line))
    text = LEAD_NUMBER.sub("", text)
    text = LEAD_BULLET.sub("", text)
    words = text.split(" ")
    while words and HASHTAG_WORD.fullmatch(words[-1]):
        words.pop()
    return STEP_LABEL.sub("", " ".join(words))


def split_mixed_step_line(line: str) -> List[str]:
    """Final safeguard: split a line on ";", "|" and missed inline numbering."""
    if not line:
        return []
    pieces = []
    for part in re.split(r"[;|]+", line):
        part = part.strip()
        if not part:
            continue
        pieces.extend(piece.strip() for piece in NUMBER_TOKEN_SPLIT.split(part) if piece.strip())
    return pieces


def is_meta_line(line: str) -> bool:
    """Servings, timing and "4 croissants" lines that are not instructions."""
    text = (line or "").strip()
    if not text:
        return True
    if META_LABEL.match(text) or META_INLINE.search(text):
        return True
    return bool(META_COUNT.match(text)) and not re.search(r"[.!?]$", text)


def looks_like_step(line: str) -> bool:
    """Numbered or bulleted, verb-led, or a sentence with a cooking verb."""
    text = (line or "").strip()
    if not text:
        return False
    if re.match(r"^\d{1,2}[.)]\s+", text) or re.match(r"^\s*[-*•]\s+", text):
        return True
    if looks_like_ingredient_shape(text):
        return False
    if IMPERATIVE_START.match(text):
        return True
    return text.endswith(".") and bool(PERIOD_STEP_VERB.search(text))


def _prepare(lines: List[str]) -> List[str]:
    """Clean, re-split and filter raw lines into step candidates."""
    steps = []
    for line in lines:
        first = strip_editor_artifacts(clean_step_line(line))
        for piece in split_mixed_step_line(first):
            piece = strip_editor_artifacts(clean_step_line(piece))
            if piece.endswith(":"):
                piece = piece[:-1].rstrip() + ":"
            if len(piece) <= 1 or is_meta_line(piece):
                continue
            if looks_like_step(piece) or VERB_ANYWHERE.search(piece):
                steps.append(piece)
    return steps


def explode_compound_steps(paragraphs: List[str]) -> List[str]:
    """Break paragraphs at sentence ends, then at clauses before a cue verb.

    "Whisk the eggs, then add the milk." becomes two steps. Sentences
    longer than LONG_SENTENCE, or holding any cue verb, get the clause split.
    """
    out = []
    for paragraph in paragraphs:
        base = (paragraph or "").strip()
        if not base:
            continue
        sentences = SENTENCE_SPLIT.split(re.sub(r"\s*:\s+", ". ", base))
        for sentence in sentences:
            sentence = sentence.strip()
            if not sentence:
                continue
            if len(sentence) > LONG_SENTENCE or CUE_CHECK.search(sentence):
                pieces = CLAUSE_SPLIT.split(sentence)
            else:
                pieces = [sentence]
            for piece in pieces:
                piece = CLAUSE_LEAD.sub("", piece.strip())
                piece = re.sub(r"^\d+[.)]\s*", "", piece).strip()
                if piece:
                    out.append(piece)
    return out


def fix_wrapped_pan_sizes(text: str) -> str:
    """Rejoin "9x" + "13 inch pan" split across lines."""
    lines = (text or "").split("\n")
    fixed = []
    i = 0
    while i < len(lines):
        cur = lines[i]
        nxt = lines[i + 1] if i + 1 < len(lines) else ""
        if PAN_LOOSE_X.search(cur) and PAN_DIMENSION.search(nxt.lstrip()):
            fixed.append(f"{cur.rstrip()} {nxt.lstrip()}")
            i += 2
            continue
        fixed.append(cur)
        i += 1
    return "\n".join(fixed)


def merge_orphan_pan_size_steps(steps: List[str]) -> List[str]:
    """Merge a step ending in "9x" with a following "13 inch..." step."""
    out = []
    i = 0
    while i < len(steps):
        cur = steps[i]
        nxt = steps[i + 1] if i + 1 < len(steps) else ""
        if PAN_LOOSE_X.search(cur) and nxt and PAN_DIMENSION.search(nxt):
            out.append(f"{cur} {nxt}".strip())
            i += 2
            continue
        out.append(cur)
        i += 1
    return out


def _dedupe(steps: List[str]) -> List[str]:
    seen = set()
    out = []
    for step in steps:
        text = step.strip()
        key = text.lower()
        if text and key not in seen:
            seen.add(key)
            out.append(text)
    return out


def build_steps(step_blob: str, step_seeds: List[str] = None) -> List[str]:
    """Run the step pipeline.

    Args:
        step_blob: Steps region of the normalized caption (may be empty)
        step_seeds: Instruction-looking lines found in the ingredients region

    Returns:
        Ordered, de-duplicated steps, at most MAX_STEPS
    """
    blob = force_inline_step_breaks(step_blob or "")
    raw_lines = [line.strip() for line in re.split(r"\n+", blob) if line.strip()]
    steps = _prepare(raw_lines)

    if len(steps) < 2 and blob:
        exploded = _prepare(explode_compound_steps(raw_lines))
        if len(exploded) > len(steps):
            steps = exploded

    seeds = [seed for seed in _prepare(step_seeds or []) if not is_likely_promo_line(seed)]
    steps = steps + seeds

    if len(steps) >= 2:
        steps = merge_orphan_pan_size_steps(steps)
    return _dedupe(steps)[:MAX_STEPS]
