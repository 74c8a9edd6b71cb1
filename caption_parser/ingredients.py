"""Ingredient pipeline - turns an ingredients blob into ordered, grouped lines.

Stages run in a fixed order: split, orphan glue, sanitize, classify,
run-on split, dedupe and final glue, section assembly, junk filter.
Lines that fail classification are handed back as step seeds, since
misplaced instructions often land in the ingredients region.
"""

import re
from dataclasses import dataclass, field
from itertools import groupby
from typing import List, Optional, Tuple

from caption_parser.ingredient_sanitizer import sanitize_and_split_ingredient_candidates
from caption_parser.normalizer import squeeze_whitespace, strip_emoji, tidy_spaces
from caption_parser.vocabulary import (
    CONTINUATION_ADVERBS,
    CONTINUATION_WORDS,
    FRACTION_GLYPHS,
    HEADER_UNIT_WORDS,
    INGREDIENT_LEAD_PHRASES,
    LOOSE_INGREDIENT_NOUNS,
    PROMO_PHRASES,
    UNIT_WORDS,
    word_pattern,
)

MAX_INGREDIENTS = 60
MAX_PAREN_PASSES = 10

FRACTION = f"[{FRACTION_GLYPHS}]"
# Integer, decimal or range ("2", "1.5", "2-3"); never list numbering like "2." or "2)"
QTY_START = r"\d+(?:\.\d+)?(?![\d.)])(?:\s*[-–—]\s*\d+(?:\.\d+)?)?"
QTY_TOKEN = rf"(?:{QTY_START}|\d+\s*/\s*\d+|{FRACTION})"

LEAD_QTY = re.compile(rf"^{QTY_TOKEN}")
UNIT_WORD = word_pattern(UNIT_WORDS)
HEADER_UNIT = word_pattern(HEADER_UNIT_WORDS)
FRACTION_CHAR = re.compile(FRACTION)
LOOSE_INGREDIENT = word_pattern(LOOSE_INGREDIENT_NOUNS)
STEP_CLUE = re.compile(r"\bstep\s*\d+", re.IGNORECASE)
LEAD_NUMBERING = re.compile(r"^\s*\d{1,2}[.)]\s+")
TO_TASTE = re.compile(r"\bto taste\b", re.IGNORECASE)
SALT_AND_PEPPER = re.compile(r"\b(salt|pepper)\s+(and|&)\s+(pepper|salt)\b", re.IGNORECASE)
PINCH_OR_DASH = re.compile(r"\b(pinch|pinches|dash|dashes)(\s+of)?\s+[a-z]", re.IGNORECASE)

# Orphan glue
BARE_NUMBER = re.compile(r"^\d+$")
BARE_QTY = re.compile(
    rf"^\s*(?:\d+\s+\d+\s*/\s*\d+|\d+\s*{FRACTION}|{QTY_TOKEN})\s*$"
)
TEMP_LINE = re.compile(
    r"^\s*[-~]?\s*\d+\s*(?:°|º)?\s*(?:deg\b\.?\s*)?(?:f|c)\b(?!\s*[a-z])", re.IGNORECASE
)
WARMED_TO_END = re.compile(r"\b(?:warm|warmed|heat|heated|cool|cooled)\s+to\s*$", re.IGNORECASE)
ENDS_WITH_OR = re.compile(r"\bor\s*[•)\]]?\s*$", re.IGNORECASE)
STARTS_WITH_OR = re.compile(r"^\s*[•(\[]?\s*or\b", re.IGNORECASE)

# Blob splitting
MIXED_ACROSS_NEWLINE = re.compile(rf"(\b\d+)[^\S\n]*\n\s*(?:[-*•]\s*)?(\d+\s*/\s*\d+|{FRACTION})")
DASH_BEFORE_DIGIT = re.compile(r"\s+-\s+(?=\d)")

# Run-on splitting
ALT_ING_SPLIT = re.compile(
    rf"[,;]\s+(?=(?:{QTY_TOKEN}|" + "|".join(INGREDIENT_LEAD_PHRASES) + r"|(?:and|&)\s+\d))",
    re.IGNORECASE,
)
AND_QTY_SPLIT = re.compile(r"\s+(?=(?:and|&)\s+\d)", re.IGNORECASE)
LEAD_CONJUNCTION = re.compile(r"^(?:and|&)\s+(?=\d)", re.IGNORECASE)
INTERNAL_QTY_SPLIT = re.compile(rf"\s+(?=(?:\d+\s*(?:/\s*\d+)?|{FRACTION})\s*(?:[a-zA-Z(°]|$))")
PUNCT_THEN_CAP_SPLIT = re.compile(r"\s*[,;]\s+(?=[A-Z])")
BULLET_SPLIT = re.compile(r"\s*•\s+")
BULLET_PART_QTY = re.compile(
    rf"^(?:\d+(?:\s+\d+/\d+)?|\d+/\d+|{FRACTION}|\d+(?:\.\d+)?\s*[-–—]\s*\d+(?:\.\d+)?)"
)
MIXED_NUMBER_MARK = "@@MN@@"
MIXED_NUMBER = re.compile(rf"(\b\d+)\s+(\d+\s*/\s*\d+\b|{FRACTION})")
OR_WORD = re.compile(r"\bor\b", re.IGNORECASE)
OR_SPACED = re.compile(r"\s+(or)\s+", re.IGNORECASE)
OR_PAREN = re.compile(r"\(\s*(or)\s+", re.IGNORECASE)
OR_MARK_PAREN = re.compile(r"\(@@(or)@@", re.IGNORECASE)
OR_MARK = re.compile(r"@@(or)@@", re.IGNORECASE)
FALLBACK_QTY = re.compile(rf"\d+\s*/\s*\d+|{QTY_START}|{FRACTION}")

# "peeled and deveined", "finely chopped, ..." continuing the previous ingredient
_ADVERB = r"(?:(?:" + "|".join(CONTINUATION_ADVERBS) + r")\s+)?"
_PREP = r"(?:" + "|".join(CONTINUATION_WORDS) + r")\b"
CONTINUATION_CLAUSE = re.compile(
    rf"^(?:(?:and|&)\s+)?{_ADVERB}{_PREP}(?:(?:\s*,\s*|\s+)(?:(?:and|&)\s+)?{_ADVERB}{_PREP})*",
    re.IGNORECASE,
)

# Junk detection
METADATA_LINE = re.compile(r"^\s*\d[\d,.]*(?:\s[\d,.]+)*\s+(likes?|comments?)\b", re.IGNORECASE)
URL = re.compile(r"https?://|www\.", re.IGNORECASE)
HASHTAG = re.compile(r"#[^\W\d_][\w-]*")
HANDLE = re.compile(r"@[a-z0-9_.-]+", re.IGNORECASE)
RECIPE_COUNT = re.compile(r"\b\d+\s*\+\s*(?:more\s+)?recipes\b", re.IGNORECASE)
MORE_RECIPES = re.compile(r"\bmore\b.*\brecipes\b", re.IGNORECASE)
PROMO_CLUE = word_pattern(PROMO_PHRASES)
SALT_PEPPER_IDIOM = re.compile(r"\bsalt\s+(?:and|&)\s+pepper\s+to\s+taste\b", re.IGNORECASE)
BARE_SEASONING = re.compile(r"^(salt|pepper)(\s+to\s+taste)?$", re.IGNORECASE)
COMBINED_SEASONING = re.compile(r"salt\s+(and|&)\s+pepper", re.IGNORECASE)

LEAD_LIST_BULLET = re.compile(r"^\s*(?:[•\-*]\s+)+")
INGREDIENTS_LABEL = re.compile(r"^(?:ingredients?|ingredient\s+list)\s*[:\-]?\s*", re.IGNORECASE)
TRAILING_PUNCT = ".,!?;:"


@dataclass
class IngredientSection:
    """A named group of ingredients. name=None holds lines before any header."""
    name: Optional[str]
    ingredients: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"name": self.name, "ingredients": list(self.ingredients)}


@dataclass
class IngredientBuild:
    """Everything the ingredient pipeline hands back to the parser."""
    ingredients: List[str]
    sections: Optional[List[IngredientSection]]
    step_seeds: List[str]
    had_guesses: bool


# ---------- classification ----------

def looks_like_ingredient_shape(text: str) -> bool:
    """Quantity lead, unit word or fraction glyph."""
    return bool(LEAD_QTY.match(text) or UNIT_WORD.search(text) or FRACTION_CHAR.search(text))


def looks_like_ingredient(line: str) -> bool:
    """Ordered predicate chain deciding if a line is an ingredient.

    Numbered lines ("2. Mix") and "step N" lines are rejected first. Then
    "to taste", "pinch of X", a quantity lead, a unit or a fraction glyph
    accept. Strong ingredient vocabulary accepts short lines that do not
    read like a sentence.
    """
    text = (line or "").strip()
    if not text:
        return False
    if STEP_CLUE.search(text) or LEAD_NUMBERING.match(text):
        return False
    if TO_TASTE.search(text) or SALT_AND_PEPPER.search(text):
        return True
    if PINCH_OR_DASH.search(text):
        return True

    qty_target = re.sub(r"^\((\d+)\)", r"\1", text)
    if LEAD_QTY.match(qty_target) or UNIT_WORD.search(text) or FRACTION_CHAR.search(text):
        return True

    return bool(LOOSE_INGREDIENT.search(text)) and not re.search(r"[.!?]$", text) and len(text) <= 80


def is_likely_promo_line(line: str) -> bool:
    """Promotional or social noise that is not shaped like an ingredient."""
    text = (line or "").strip()
    if looks_like_ingredient(text):
        return False
    if not text:
        return True
    return bool(
        URL.search(text)
        or HASHTAG.search(text)
        or HANDLE.search(text)
        or RECIPE_COUNT.search(text)
        or MORE_RECIPES.search(text)
        or PROMO_CLUE.search(text)
    )


def is_junk_ingredient(line: str) -> bool:
    """Social metadata and promotion, dropped even when a quantity is present."""
    text = (line or "").strip()
    if not text or METADATA_LINE.match(text):
        return True
    if URL.search(text) or HANDLE.search(text) or RECIPE_COUNT.search(text) or PROMO_CLUE.search(text):
        return True
    return is_likely_promo_line(text)


# ---------- line glue ----------

def _or_boundary(cur: str, nxt: str) -> bool:
    return bool(ENDS_WITH_OR.search(cur) or STARTS_WITH_OR.match(nxt))


def merge_orphan_quantity_lines(lines: List[str]) -> List[str]:
    """Glue "1" + "cup sugar", "warmed to" + "110F" and "1 cup milk" + "110F".

    Never glues across an "or" boundary.
    """
    out = []
    i = 0
    while i < len(lines):
        cur = (lines[i] or "").strip()
        nxt = (lines[i + 1] or "").strip() if i + 1 < len(lines) else ""
        if cur and nxt and not _or_boundary(cur, nxt):
            if BARE_QTY.match(cur) or TEMP_LINE.match(nxt) or WARMED_TO_END.search(cur):
                out.append(tidy_spaces(f"{cur} {nxt}"))
                i += 2
                continue
        out.append(lines[i])
        i += 1
    return out


def _balanced(text: str) -> bool:
    return text.count("(") <= text.count(")")


def merge_parenthetical_lines(lines: List[str], max_passes: int = MAX_PAREN_PASSES) -> List[str]:
    """Merge a line with an unclosed "(" into the following lines until it balances.

    One alternative can span several lines ("paste (or", "2 tsp extract)"),
    so this runs as a bounded fixed-point loop.
    """
    result = list(lines)
    for _ in range(max_passes):
        changed = False
        out = []
        i = 0
        while i < len(result):
            cur = (result[i] or "").strip()
            if cur and not _balanced(cur) and i + 1 < len(result):
                accumulated = cur.rstrip(" •")
                j = i + 1
                while j < len(result):
                    nxt = re.sub(r"^\d+\.(?!\d)\s*", "", (result[j] or "").strip())
                    nxt = nxt.lstrip("• ").strip()
                    j += 1
                    if not nxt:
                        continue
                    accumulated = tidy_spaces(f"{accumulated} {nxt}")
                    if _balanced(accumulated):
                        break
                out.append(accumulated)
                i = j
                changed = True
                continue
            out.append(result[i])
            i += 1
        result = out
        if not changed:
            break
    return result


def glue_mixed_numbers_across_lines(text: str) -> str:
    """Rejoin "1\\n1/2 cup" and "1\\n½ cup" split by line wrapping."""
    return MIXED_ACROSS_NEWLINE.sub(r"\1 \2", text or "")


def final_orphan_glue(items: List[str]) -> List[str]:
    """Last-chance glue of a bare number onto the next item, and of
    temperature-shaped items onto the previous one."""
    out = []
    i = 0
    while i < len(items):
        cur = (items[i] or "").strip()
        nxt = (items[i + 1] or "").strip() if i + 1 < len(items) else ""
        if cur and BARE_NUMBER.match(cur) and nxt and not _or_boundary(cur, nxt):
            out.append(tidy_spaces(f"{cur} {nxt}"))
            i += 2
            continue
        if cur and TEMP_LINE.match(cur) and out:
            out[-1] = tidy_spaces(f"{out[-1]} {cur}")
        else:
            out.append(items[i])
        i += 1
    return out


# ---------- run-on splitting ----------

def _protect_alternatives(line: str) -> str:
    line = MIXED_NUMBER.sub(rf"\1{MIXED_NUMBER_MARK}\2", line)
    if OR_WORD.search(line):
        line = OR_SPACED.sub(r"@@\1@@", line)
        line = OR_PAREN.sub(r"(@@\1@@", line)
    return line


def _restore_alternatives(line: str) -> str:
    line = line.replace(MIXED_NUMBER_MARK, " ")
    line = OR_MARK_PAREN.sub(r"(\1 ", line)
    return OR_MARK.sub(r" \1 ", line)


def _split_all(parts: List[str], pattern: re.Pattern) -> List[str]:
    pieces = (LEAD_CONJUNCTION.sub("", piece.strip()) for part in parts for piece in pattern.split(part))
    return [piece for piece in pieces if piece]


def _split_at_quantity_boundaries(text: str) -> List[str]:
    """Split before quantities that follow a dash or bullet, outside brackets."""
    boundaries = [0]
    depth = 0
    scan_pos = 0
    for match in FALLBACK_QTY.finditer(text):
        idx = match.start()
        for ch in text[scan_pos:idx]:
            if ch in "([{":
                depth += 1
            elif ch in ")]}":
                depth = max(0, depth - 1)
        scan_pos = idx
        if depth > 0 or idx == 0:
            continue
        if text[idx - 1] in "(-–—":
            continue
        if not re.search(r"[-•\n\r]", text[boundaries[-1]:idx]):
            continue
        boundaries.append(idx)

    if len(boundaries) < 2:
        return [text]
    chunks = []
    for start, end in zip(boundaries, boundaries[1:] + [len(text)]):
        chunk = text[start:end].strip()
        if chunk:
            chunks.append(chunk)
    return chunks if len(chunks) > 1 else [text]


def split_run_on_ingredients(line: str) -> List[str]:
    """Split a line holding several ingredients into one entry each.

    Splits at a comma before a new quantity or a common ingredient lead
    ("Kosher salt"), at "and"/"&" before a number, at an internal quantity
    and at a comma before a capitalized word. Mixed numbers ("1 1/2") and
    "or" alternatives are protected while splitting.

    Args:
        line: One cleaned ingredient line

    Returns:
        List of ingredient strings, in source order
    """
    bullet_parts = [part.strip() for part in BULLET_SPLIT.split(line) if part.strip()]
    with_qty = [part for part in bullet_parts if BULLET_PART_QTY.match(part)]
    if len(bullet_parts) > 1 and len(with_qty) >= 2:
        return [piece for part in bullet_parts for piece in split_run_on_ingredients(part)]

    protected = _protect_alternatives(line)
    parts = [protected]
    for pattern in (ALT_ING_SPLIT, AND_QTY_SPLIT, INTERNAL_QTY_SPLIT, PUNCT_THEN_CAP_SPLIT):
        parts = _split_all(parts, pattern)

    final_parts = [tidy_spaces(_restore_alternatives(part)) for part in parts]
    final_parts = [part for part in final_parts if part]

    if len(final_parts) <= 1:
        restored = tidy_spaces(_restore_alternatives(protected))
        fallback = _split_at_quantity_boundaries(restored)
        if len(fallback) > 1:
            final_parts = [tidy_spaces(chunk) for chunk in fallback]
    return final_parts


def split_continuation(line: str) -> Tuple[str, str]:
    """Split a leading preparation clause ("and deveined, 2 cloves") off a line.

    Returns:
        (clause, rest). clause is empty when the line does not open with a
        continuation of the previous ingredient.
    """
    match = CONTINUATION_CLAUSE.match(line)
    if not match:
        return "", line
    rest = line[match.end():]
    stripped = rest.strip()
    if stripped and not stripped.startswith((",", ";")) and not LEAD_QTY.match(stripped):
        return "", line
    clause = re.sub(r"^(?:and|&)\s+", "", match.group(0), flags=re.IGNORECASE).strip()
    return clause, stripped.lstrip(",; ").strip()


def clean_ingredient_line(line: str) -> str:
    """Strip emoji, bullets, an "Ingredients:" label and trailing punctuation."""
    text = tidy_spaces(LEAD_LIST_BULLET.sub("", strip_emoji(line)))
    text = INGREDIENTS_LABEL.sub("", text)
    return text.rstrip(TRAILING_PUNCT).strip()


def _looks_like_stray_header(line: str) -> bool:
    """A "Something:" line the sanitizer did not tag, with no amounts in it."""
    stripped = line.strip()
    if not stripped.endswith(":"):
        return False
    base = stripped[:-1].strip()
    return not re.search(r"\d", base) and not HEADER_UNIT.search(base)


# ---------- final assembly ----------

def _dedupe(items: List[str]) -> List[str]:
    seen = set()
    out = []
    for item in items:
        text = item.strip()
        key = text.lower()
        if text and key not in seen:
            seen.add(key)
            out.append(text)
    return out


def _finish_section(items: List[str]) -> List[str]:
    items = final_orphan_glue(_dedupe(items))
    items = [item for item in items if not is_junk_ingredient(item)]
    return merge_parenthetical_lines(items)


def reconcile_salt_and_pepper(entries: List[Tuple[int, str]], raw_text: str) -> List[Tuple[int, str]]:
    """Put back "salt and pepper to taste" when it was split into bare entries.

    Only the literal idiom counts. The replacement is the phrase as written
    in the input, placed where the first bare entry was.
    """
    idiom = SALT_PEPPER_IDIOM.search(raw_text or "")
    if not idiom:
        return entries
    if any(COMBINED_SEASONING.search(text) for _, text in entries):
        return entries
    bare = [i for i, (_, text) in enumerate(entries) if BARE_SEASONING.match(text.strip())]
    if not bare:
        return entries

    first = bare[0]
    phrase = tidy_spaces(idiom.group(0))
    out = []
    for i, entry in enumerate(entries):
        if i == first:
            out.append((entry[0], phrase))
        elif i not in bare:
            out.append(entry)
    return out


def build_ingredients(blob: str, raw_text: str = "", header_tagged: bool = False) -> IngredientBuild:
    """Run the ingredient pipeline over an ingredients blob.

    Args:
        blob: Ingredient region of the normalized caption
        raw_text: Full input text, used for the salt and pepper idiom
        header_tagged: True when an ingredients header was found

    Returns:
        IngredientBuild with the flat list, optional sections (only when a
        named sub-header was seen), step seeds and the guess flag
    """
    blob = glue_mixed_numbers_across_lines(squeeze_whitespace(blob))
    blob = DASH_BEFORE_DIGIT.sub("\n- ", blob)

    if header_tagged and "\n" not in blob and "," in blob:
        lines = [part.strip() for part in ALT_ING_SPLIT.split(blob) if part.strip()]
    else:
        lines = [part.strip() for part in re.split(r"\n+", blob) if part.strip()]

    lines = merge_orphan_quantity_lines(lines)
    lines = merge_parenthetical_lines(lines)

    candidates = sanitize_and_split_ingredient_candidates(lines)
    had_guesses = any(c.is_low_confidence for c in candidates)

    section_names: List[Optional[str]] = [None]
    current = 0
    entries: List[Tuple[int, str]] = []
    step_seeds: List[str] = []

    def add(text: str) -> None:
        for part in split_run_on_ingredients(text):
            clause, rest = split_continuation(part)
            if clause and entries:
                _append_clause(entries, clause)
                if not rest:
                    continue
                part = rest
            part = tidy_spaces(part)
            if part:
                entries.append((current, part))

    for candidate in candidates:
        if candidate.is_section_header:
            section_names.append(candidate.text.rstrip(":• ").strip())
            current = len(section_names) - 1
            continue

        line = candidate.text
        if _looks_like_stray_header(line):
            continue

        cleaned = clean_ingredient_line(line)
        clause, rest = split_continuation(cleaned)
        if clause and entries:
            if not rest:
                _append_clause(entries, clause)
            elif looks_like_ingredient(rest):
                _append_clause(entries, clause)
                add(rest)
            else:
                _append_clause(entries, cleaned)
            continue

        if not looks_like_ingredient(strip_emoji(line)):
            if not is_likely_promo_line(line):
                step_seeds.append(line)
            continue

        add(cleaned)

    finished: List[Tuple[int, str]] = []
    for section_idx, group in groupby(entries, key=lambda entry: entry[0]):
        finished.extend((section_idx, text) for text in _finish_section([t for _, t in group]))
    finished = reconcile_salt_and_pepper(finished[:MAX_INGREDIENTS], raw_text)

    ingredients = [text for _, text in finished]
    sections = None
    if len(section_names) > 1:
        grouped = []
        for section_idx, group in groupby(finished, key=lambda entry: entry[0]):
            grouped.append(IngredientSection(section_names[section_idx], [t for _, t in group]))
        if any(section.name is not None for section in grouped):
            sections = grouped

    return IngredientBuild(ingredients, sections, step_seeds, had_guesses)


def _append_clause(entries: List[Tuple[int, str]], clause: str) -> None:
    section_idx, text = entries[-1]
    entries[-1] = (section_idx, f"{text.rstrip(' ,')}, {clause}")
