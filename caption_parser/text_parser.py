"""Caption to recipe parser - the full text pipeline.

normalize -> slice sections -> ingredients and steps -> confidence
"""

from dataclasses import dataclass
from typing import List, Optional

from caption_parser.ingredients import IngredientSection, build_ingredients
from caption_parser.normalizer import normalize_text, squeeze_whitespace
from caption_parser.sections import slice_sections, strip_tail_noise
from caption_parser.steps import build_steps, fix_wrapped_pan_sizes
from caption_parser.title_extractor import clean_social_boilerplate


@dataclass
class ParseResult:
    """Structured recipe pulled out of a caption.

    Flattening ingredient_sections in order always gives ingredients.
    ingredient_sections is None unless a named sub-header was found.
    """
    ingredients: List[str]
    steps: List[str]
    confidence: str
    debug: str = ""
    ingredient_sections: Optional[List[IngredientSection]] = None

    def to_dict(self) -> dict:
        return {
            "ingredients": list(self.ingredients),
            "ingredient_sections": (
                [section.to_dict() for section in self.ingredient_sections]
                if self.ingredient_sections is not None else None
            ),
            "steps": list(self.steps),
            "confidence": self.confidence,
            "debug": self.debug,
        }


def score_confidence(ingredient_count: int, step_count: int, had_guesses: bool = False) -> str:
    """Coarse trust level from output sizes.

    high: 5+ ingredients and 3+ steps
    medium: 3+ ingredients or 2+ steps
    A sanitizer guess lowers high to medium, never further.
    """
    if ingredient_count >= 5 and step_count >= 3:
        confidence = "high"
    elif ingredient_count >= 3 or step_count >= 2:
        confidence = "medium"
    else:
        confidence = "low"

    if had_guesses and confidence == "high":
        confidence = "medium"
    return confidence


def parse_recipe_text(text: str) -> ParseResult:
    """Parse a caption into ingredients and steps.

    Never raises on odd input; empty input gives empty lists with low
    confidence.

    Args:
        text: Raw caption text

    Returns:
        ParseResult
    """
    if not text or not text.strip():
        return ParseResult([], [], "low", "empty")

    raw = squeeze_whitespace(normalize_text(text))
    raw = strip_tail_noise(raw)
    raw = clean_social_boilerplate(raw)
    raw = fix_wrapped_pan_sizes(raw)
    if not raw:
        return ParseResult([], [], "low", "empty")

    sections = slice_sections(raw)
    built = build_ingredients(
        sections.ingredient_blob,
        raw_text=text,
        header_tagged=sections.ingredient_header_pos >= 0,
    )
    steps = build_steps(sections.step_blob, built.step_seeds)
    confidence = score_confidence(len(built.ingredients), len(steps), built.had_guesses)

    debug = (
        f"len:{len(raw)} ing_header:{sections.ingredient_header_pos} "
        f"step_header:{sections.step_header_pos} ing:{len(built.ingredients)} "
        f"steps:{len(steps)} guessed:{built.had_guesses}"
    )
    return ParseResult(
        ingredients=built.ingredients,
        steps=steps,
        confidence=confidence,
        debug=debug,
        ingredient_sections=built.sections,
    )
