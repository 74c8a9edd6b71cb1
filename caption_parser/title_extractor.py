"""Recipe title extraction from social captions, page titles and descriptions.

Every candidate line is scored on its own; the best score of at least
MIN_TITLE_SCORE wins.
"""

import re
from dataclasses import dataclass
from typing import List, Optional

from caption_parser.normalizer import normalize_text, strip_emoji, tidy_spaces, trim_trailing
from caption_parser.sections import find_ingredient_header
from caption_parser.vocabulary import (
    INSTRUCTION_WORDS,
    PLATFORM_NAMES,
    RECIPE_EMOJIS,
    RECIPE_NOUNS,
    TITLE_CUT_TOKENS,
    TITLE_MEASUREMENT_WORDS,
    TITLE_PROMO_WORDS,
    word_pattern,
)

MIN_TITLE_SCORE = 20
QUOTED_BONUS = 15
REJECTED = -100
CUT_TOKEN_MIN_INDEX = 6

# Earlier sources win ties
SOURCE_PRIORITY = {"caption": 0, "page_title": 1, "description": 2, "fallback": 3}

RECIPE_NOUN = word_pattern(RECIPE_NOUNS)
MEASUREMENT = word_pattern(TITLE_MEASUREMENT_WORDS)
PROMO = word_pattern(TITLE_PROMO_WORDS)
PLATFORM = word_pattern(PLATFORM_NAMES)
INSTRUCTION_START = re.compile(r"^(?:" + "|".join(INSTRUCTION_WORDS) + r")\b", re.IGNORECASE)
TITLE_CASE = re.compile(r"^[A-Z][a-z]+(?:\s+[A-Z][a-z]+){1,3}$")
HANDLE = re.compile(r"@\w+")
HASHTAG = re.compile(r"#\w+")
URL = re.compile(r"https?://|www\.", re.IGNORECASE)
SOCIAL_COUNT = re.compile(r"\b\d[\d,.]*\s+(?:likes?|comments?|views?|followers?)\b", re.IGNORECASE)
QUOTED = re.compile(r"[\"“”]([^\"“”\n]{3,100})[\"“”]")

# "1,204" or "1 204"
_COUNT = r"\d[\d,.]*(?:[^\S\n][\d,.]+)*"
SOCIAL_METADATA = re.compile(
    rf"^\s*{_COUNT}\s+likes?,?\s*{_COUNT}\s+comments?\s*[-–—]\s*[^:\n]+:\s*",
    re.IGNORECASE,
)
LIKES_LINE = re.compile(rf"^[^\S\n]*{_COUNT}[^\S\n]+likes?[^\S\n]*$", re.IGNORECASE | re.MULTILINE)
COMMENTS_LINE = re.compile(rf"^[^\S\n]*{_COUNT}[^\S\n]+comments?[^\S\n]*$", re.IGNORECASE | re.MULTILINE)
MAKE_YOUR_DAY = re.compile(
    r"^[^\S\n]*(?:tiktok[^\S\n]*[-|][^\S\n]*)?make[^\S\n]+your[^\S\n]+day[^\S\n]*$",
    re.IGNORECASE | re.MULTILINE,
)

PLATFORM_SUFFIX = re.compile(
    r"\s*[|:·•\-–—]\s*(?:TikTok|Instagram|YouTube|Pinterest|Facebook)\b.*$", re.IGNORECASE
)
AUTHOR_PREFIX = re.compile(r"^[^\"“:]*:\s*")
EDGE_QUOTES = "\"“”'‘’"
SENTENCE_END = re.compile(r"[.!?](?:\s|$)")
TRAILING_JUNK = ":,;|-–—.!?"


@dataclass
class TitleCandidate:
    text: str
    score: int
    source: str
    order: int = 0


def clean_social_boilerplate(text: str) -> str:
    """Remove "898 likes, 11 comments - user on date:" prefixes and count lines."""
    if not text:
        return ""
    text = SOCIAL_METADATA.sub("", text)
    text = LIKES_LINE.sub("", text)
    text = COMMENTS_LINE.sub("", text)
    text = MAKE_YOUR_DAY.sub("", text)
    return text.strip()


def score_recipe_title(text: str) -> int:
    """Score how much a line reads like a dish name.

    Args:
        text: Candidate title

    Returns:
        Score, REJECTED (-100) for lines that can never be titles
    """
    if not text:
        return REJECTED
    s = text.strip()
    if len(s) < 3 or len(s) > 100:
        return REJECTED
    if URL.search(s) or INSTRUCTION_START.match(s) or HANDLE.search(s) or HASHTAG.search(s):
        return REJECTED
    if SOCIAL_COUNT.search(s):
        return REJECTED

    score = 0
    if any(emoji in s for emoji in RECIPE_EMOJIS):
        score += 20
    if RECIPE_NOUN.search(s):
        score += 30
    if s[0].isupper():
        score += 10
    if TITLE_CASE.match(s):
        score += 50

    words = len(s.split())
    if 2 <= words <= 6:
        score += 20
    if words == 1:
        score -= 20
    if words > 8:
        score -= 20

    if PROMO.search(s):
        score -= 40
    if PLATFORM.search(s):
        score -= 30
    if MEASUREMENT.search(s):
        score -= 20
    return score


def clean_page_title(title: str) -> str:
    """Drop the " | TikTok" suffix, an "Author on Instagram:" prefix and quotes."""
    cleaned = PLATFORM_SUFFIX.sub("", tidy_spaces(title or ""))
    cleaned = AUTHOR_PREFIX.sub("", cleaned)
    cleaned = cleaned.strip().strip(EDGE_QUOTES)
    return tidy_spaces(cleaned)


def trim_title_line(line: str) -> str:
    """Cut a caption line down to its leading dish name.

    Stops at the first sentence end, or at a sentence-starter token
    (" for ", " serves", ...) appearing after the first few characters.
    """
    text = tidy_spaces(clean_social_boilerplate(line))
    sentence_end = SENTENCE_END.search(text)
    if sentence_end and sentence_end.start() > 0:
        text = text[:sentence_end.start()]

    lower = text.lower()
    cuts = [lower.find(token) for token in TITLE_CUT_TOKENS]
    cuts = [idx for idx in cuts if idx > CUT_TOKEN_MIN_INDEX]
    if cuts:
        text = text[:min(cuts)]
    return trim_trailing(text, TRAILING_JUNK).strip()


def _finish_title(text: str) -> str:
    text = tidy_spaces(strip_emoji(text))
    text = text.strip(EDGE_QUOTES).strip()
    return trim_trailing(text, TRAILING_JUNK).strip()


def _line_candidates(text: str, source: str) -> List[TitleCandidate]:
    candidates = []
    for line in text.split("\n"):
        trimmed = trim_title_line(line)
        if trimmed:
            candidates.append(TitleCandidate(trimmed, score_recipe_title(trimmed), source))
    return candidates


def collect_title_candidates(
    caption: Optional[str] = None,
    description: Optional[str] = None,
    page_title: Optional[str] = None,
    text: Optional[str] = None,
) -> List[TitleCandidate]:
    """All scored candidates, in source order."""
    candidates: List[TitleCandidate] = []

    caption_text = normalize_text(caption)
    if caption_text:
        for match in QUOTED.finditer(caption_text):
            quoted = match.group(1).strip()
            score = score_recipe_title(quoted)
            if score > REJECTED:
                score += QUOTED_BONUS
            candidates.append(TitleCandidate(quoted, score, "caption"))

        header_pos = find_ingredient_header(caption_text)
        head = caption_text[:header_pos] if header_pos >= 0 else caption_text
        candidates.extend(_line_candidates(head, "caption"))

    cleaned_title = trim_title_line(clean_page_title(normalize_text(page_title)))
    if cleaned_title:
        candidates.append(
            TitleCandidate(cleaned_title, score_recipe_title(cleaned_title), "page_title")
        )

    description_text = normalize_text(description)
    if description_text:
        candidates.extend(_line_candidates(description_text, "description"))

    fallback_text = normalize_text(text)
    if fallback_text:
        candidates.extend(_line_candidates(fallback_text, "fallback"))

    for order, candidate in enumerate(candidates):
        candidate.order = order
    return candidates


def extract_recipe_title(
    caption: Optional[str] = None,
    description: Optional[str] = None,
    page_title: Optional[str] = None,
    text: Optional[str] = None,
) -> Optional[str]:
    """Pick the best dish title from whatever text a post provides.

    Args:
        caption: Post caption
        description: Page meta description
        page_title: Page <title> or og:title
        text: Any other text to fall back on

    Returns:
        The winning title with emoji stripped, or None when nothing scores
        at least MIN_TITLE_SCORE
    """
    candidates = [
        c for c in collect_title_candidates(caption, description, page_title, text)
        if c.score >= MIN_TITLE_SCORE
    ]
    if not candidates:
        return None

    best = min(candidates, key=lambda c: (-c.score, SOURCE_PRIORITY[c.source], c.order))
    return _finish_title(best.text) or None
