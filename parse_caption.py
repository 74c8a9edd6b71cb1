#!/usr/bin/env python3
"""
Parse a social media caption into a structured recipe.

Usage:
    python parse_caption.py caption.txt
    cat caption.txt | python parse_caption.py -
    python parse_caption.py --url https://www.instagram.com/p/abc123/
    python parse_caption.py --html saved_post.html --json
"""

import argparse
import json
import sys
from pathlib import Path

from caption_parser.social_caption import parse_social_caption
from caption_parser.text_parser import parse_recipe_text
from caption_sources import extract_page_metadata, import_recipe_from_url


def read_caption(path: str) -> str:
    """Read caption text from a file, or stdin for "-"."""
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def format_recipe(recipe: dict) -> str:
    """Readable plain-text summary of a parsed recipe."""
    lines = [f"Title: {recipe.get('title') or '(untitled)'}"]
    if recipe.get("servings"):
        lines.append(f"Servings: {recipe['servings']}")
    lines.append(f"Confidence: {recipe.get('confidence')}")
    lines.append("")

    lines.append("Ingredients:")
    sections = recipe.get("ingredient_sections")
    if sections:
        for section in sections:
            lines.append(f"  {section['name'] or 'Other'}:")
            lines.extend(f"    - {item}" for item in section["ingredients"])
    else:
        lines.extend(f"  - {item}" for item in recipe.get("ingredients", []))
    lines.append("")

    lines.append("Steps:")
    for i, step in enumerate(recipe.get("steps", []), 1):
        lines.append(f"  {i}. {step}")
    return "\n".join(lines)


def main():
    parser = argparse.ArgumentParser(
        description="Parse a recipe out of a social media caption"
    )
    parser.add_argument(
        'caption',
        nargs='?',
        help='Caption text file, or - for stdin'
    )
    parser.add_argument(
        '--url',
        help='Fetch the caption from a post URL'
    )
    parser.add_argument(
        '--html',
        help='Read the caption from a saved post page'
    )
    parser.add_argument(
        '--title',
        help='Fallback title when the caption has none'
    )
    parser.add_argument(
        '--json',
        action='store_true',
        help='Print the recipe as JSON'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Print the parser debug trace to stderr'
    )
    args = parser.parse_args()

    if args.url:
        print(f"Fetching: {args.url}", file=sys.stderr)
        recipe = import_recipe_from_url(args.url)
        if recipe is None:
            print(f"Error: could not fetch {args.url}", file=sys.stderr)
            sys.exit(1)
        caption = None
    elif args.html:
        try:
            html = Path(args.html).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            print(f"Error: cannot read {args.html}: {e}", file=sys.stderr)
            sys.exit(1)
        metadata = extract_page_metadata(html)
        caption = metadata["caption"]
        recipe = parse_social_caption(
            caption,
            fallback_title=args.title or metadata["title"],
            hero_image=metadata["image"],
            source="web",
        )
    elif args.caption:
        try:
            caption = read_caption(args.caption)
        except (OSError, UnicodeDecodeError) as e:
            print(f"Error: cannot read {args.caption}: {e}", file=sys.stderr)
            sys.exit(1)
        recipe = parse_social_caption(caption, fallback_title=args.title, source="text")
    else:
        parser.error("a caption file, --url or --html is required")

    if args.verbose and caption is not None:
        print(parse_recipe_text(caption).debug, file=sys.stderr)

    if args.json:
        print(json.dumps(recipe, indent=2, ensure_ascii=False))
    else:
        print(format_recipe(recipe))


if __name__ == '__main__':
    main()
