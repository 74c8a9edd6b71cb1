"""Caption text normalizer - removes structural noise, keeps the words."""

import re

from caption_parser.vocabulary import INVISIBLE_ENTITY_CODES

# Safe entity decodes, applied in order
ENTITY_DECODES = [
    (re.compile(r"&nbsp;", re.IGNORECASE), " "),
    (re.compile(r"&amp;", re.IGNORECASE), "&"),
    (re.compile(r"&quot;", re.IGNORECASE), '"'),
    (re.compile(r"&#39;", re.IGNORECASE), "'"),
]

# Zero-width and bidi control characters, raw or still encoded ("& # 8203 ;")
INVISIBLE_CHARS = re.compile("[\u200b\u200c\u200d\u2028\u2029\u202a-\u202e\ufeff]")
INVISIBLE_ENTITIES = re.compile(
    r"&\s*#\s*(?:" + "|".join(INVISIBLE_ENTITY_CODES) + r")(?!\d)\s*;?", re.IGNORECASE
)

# Editor placeholder tokens left behind by copy/paste from chat tools
PLACEHOLDERS = [
    re.compile(r":contentReference\[.*?\]"),
    re.compile(r"\{index=.*?\}"),
]


def _scrub_once(text: str) -> str:
    text = text.replace("\u00a0", " ").replace("\u00d7", "x")
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    for pattern, replacement in ENTITY_DECODES:
        text = pattern.sub(replacement, text)
    text = INVISIBLE_ENTITIES.sub("", text)
    text = INVISIBLE_CHARS.sub("", text)
    for pattern in PLACEHOLDERS:
        text = pattern.sub("", text)
    return text


def normalize_text(text: str) -> str:
    """Remove whitespace variants, encoded artifacts and editor junk from a caption.

    Decoding "&amp;#8203;" can expose a new entity, so scrubbing repeats
    until the text stops changing. Every pass after the first only removes
    characters, so the loop ends, and the result is idempotent:
    normalize_text(normalize_text(s)) == normalize_text(s).

    Args:
        text: Raw caption text (None is treated as empty)

    Returns:
        Normalized text, trimmed. Words are never split or joined.
    """
    if not text:
        return ""

    current = text
    while True:
        scrubbed = _scrub_once(current)
        if scrubbed == current:
            break
        current = scrubbed

    return current.strip()


EMOJI = re.compile("[\U0001F300-\U0001FAFF\u2600-\u27BF\uFE0F]")


def strip_emoji(text: str) -> str:
    return EMOJI.sub("", text)


def tidy_spaces(text: str) -> str:
    """Collapse all whitespace runs to single spaces and trim."""
    return re.sub(r"\s+", " ", text).strip()


def squeeze_whitespace(text: str) -> str:
    """Collapse spaces and tabs to one space and blank-line runs to one newline.

    Line structure survives, so it is safe ahead of line-based pipelines.
    """
    text = re.sub(r"[^\S\n]+", " ", text or "")
    return re.sub(r" ?\n\s*", "\n", text).strip()


def trim_trailing(text: str, chars: str) -> str:
    """Strip trailing whitespace and any of chars, scanning once from the end."""
    end = len(text)
    while end and (text[end - 1].isspace() or text[end - 1] in chars):
        end -= 1
    return text[:end]
