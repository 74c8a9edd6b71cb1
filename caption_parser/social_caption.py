"""Social post adapter - caption (and comments) in, recipe dict out.

Picks the text most likely to hold the recipe, runs the text parser on it,
and adds title, servings and pass-through hints.
"""

import re
from typing import List, Optional

from caption_parser.normalizer import normalize_text, tidy_spaces
from caption_parser.text_parser import parse_recipe_text
from caption_parser.title_extractor import extract_recipe_title
from caption_parser.vocabulary import (
    INSTRUCTION_WORDS,
    RECIPE_EMOJIS,
    SERVING_LABELS,
    word_pattern,
)

SERVING_LABEL = word_pattern(SERVING_LABELS)
LABEL_PREFIX = re.compile(r"^[^:]*:\s*")
TRAILING_PUNCT = ".,!?;:"

# Recipe-likeness scoring for captions and comments
ING_WORD = re.compile(r"\bingredients?\b")
STEP_WORD = re.compile(r"\b(?:steps?|directions?|method|instructions?)\b")
RECIPE_WORD = re.compile(r"\b(?:recipe|homemade)\b")
UNIT_HIT = re.compile(
    r"\b(?:cups?|tsp|tbsp|teaspoon|tablespoon|oz|ounce|ounces|lb|pound|g|gram|kg|ml|l"
    r"|lit(?:er|re)|clove|cloves|egg|eggs|stick|sticks)\b"
)
NUMBER_OR_FRACTION = re.compile(r"[0-9¼½¾⅓⅔⅛⅜⅝⅞]")
BULLET_LINE = re.compile(r"^[^\S\n]*[-*•]", re.MULTILINE)
NUMBERED_LINE = re.compile(r"^[^\S\n]*\d+[.)]", re.MULTILINE)
PROMO = re.compile(
    r"tour|tickets|anniversary|merch|follow|subscribe|link in bio|watch this|check out|new post",
    re.IGNORECASE,
)
INSTRUCTION_START = re.compile(r"^(?:" + "|".join(INSTRUCTION_WORDS) + r")\b", re.IGNORECASE)

MIN_COMMENT_LENGTH = 20
MIN_COMMENT_SCORE = 300
MAX_RECIPE_COMMENTS = 5


def extract_servings(text: str) -> Optional[str]:
    """Find the first "Serves 4" / "Servings: 6" style line.

    Returns:
        The serving text with any "Label:" prefix and trailing punctuation
        removed, or None
    """
    for line in (text or "").split("\n"):
        line = tidy_spaces(line)
        if not SERVING_LABEL.search(line) or not re.search(r"\d", line):
            continue
        cleaned = LABEL_PREFIX.sub("", line).rstrip(TRAILING_PUNCT).strip()
        if cleaned:
            return cleaned
    return None


def score_recipe_content(text: str) -> float:
    """Score how recipe-like a block of text is.

    Headers, units, numbers and list markers push the score up;
    hashtag spam, promotion and an instruction-verb opening pull it down.
    """
    if not text:
        return 0
    lower = text.lower()
    score = 0.0

    if ING_WORD.search(lower):
        score += 500
    if STEP_WORD.search(lower):
        score += 360
    if RECIPE_WORD.search(lower):
        score += 400

    score += len(UNIT_HIT.findall(lower)) * 70
    if NUMBER_OR_FRACTION.search(lower):
        score += 80
    if BULLET_LINE.search(lower):
        score += 80
    if NUMBERED_LINE.search(lower):
        score += 90
    if any(emoji in text for emoji in RECIPE_EMOJIS):
        score += 60

    if text.count("#") / max(1, len(text)) > 0.02:
        score -= 60
    if PROMO.search(lower):
        score -= 120
    if INSTRUCTION_START.match(lower):
        score -= 100

    score += min(len(text), 1000) / 10
    return score


def extract_recipe_comments(comments: List[str]) -> List[str]:
    """Comments that carry a recipe, best first, at most MAX_RECIPE_COMMENTS."""
    scored = [
        (score_recipe_content(comment), comment)
        for comment in comments or []
        if comment and len(comment) >= MIN_COMMENT_LENGTH
    ]
    scored = [item for item in scored if item[0] >= MIN_COMMENT_SCORE]
    scored.sort(key=lambda item: item[0], reverse=True)
    return [comment for _, comment in scored[:MAX_RECIPE_COMMENTS]]


def choose_recipe_text(caption: str, comments: Optional[List[str]] = None) -> str:
    """The caption, unless a recipe-like comment scores higher."""
    caption = caption or ""
    best_comments = extract_recipe_comments(comments or [])
    if best_comments and score_recipe_content(best_comments[0]) > score_recipe_content(caption):
        return best_comments[0]
    return caption


def parse_social_caption(
    caption: str,
    fallback_title: Optional[str] = None,
    hero_image: Optional[str] = None,
    source: str = "instagram",
    comments: Optional[List[str]] = None,
) -> dict:
    """Parse a social post caption into a recipe dict.

    Args:
        caption: Caption text as retrieved from the post
        fallback_title: Page title to use when the caption has no good title
        hero_image: Image URL, passed through untouched
        source: Platform name, passed through untouched
        comments: Optional post comments; one may hold the recipe instead

    Returns:
        Dict with title, ingredients, ingredient_sections, steps, servings,
        hero_image, source and confidence
    """
    caption_text = normalize_text(caption)
    text = normalize_text(choose_recipe_text(caption_text, comments))
    result = parse_recipe_text(text)

    title = extract_recipe_title(
        caption=caption_text,
        page_title=fallback_title,
        text=text if text != caption_text else None,
    )
    if not title and fallback_title and fallback_title.strip():
        title = tidy_spaces(fallback_title)

    return {
        "title": title,
        "ingredients": result.ingredients,
        "ingredient_sections": (
            [section.to_dict() for section in result.ingredient_sections]
            if result.ingredient_sections is not None else None
        ),
        "steps": result.steps,
        "servings": extract_servings(text),
        "hero_image": hero_image,
        "source": source,
        "confidence": result.confidence,
    }
