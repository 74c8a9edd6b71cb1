"""Caption sources: fetch a post page and pull its caption, title and image"""

import os
from typing import Optional, Dict, Any
from urllib.parse import urlparse

import requests
from bs4 import BeautifulSoup
from dotenv import load_dotenv

from caption_parser.normalizer import normalize_text, trim_trailing
from caption_parser.social_caption import parse_social_caption
from caption_parser.title_extractor import clean_social_boilerplate

load_dotenv()

CAPTION_FETCH_TIMEOUT = float(os.getenv("CAPTION_FETCH_TIMEOUT", 10))
CAPTION_USER_AGENT = os.getenv(
    "CAPTION_USER_AGENT", "Mozilla/5.0 (compatible; CaptionRecipeParser/1.0)"
)

# Domain fragment -> platform name
PLATFORM_DOMAINS = {
    "instagram.com": "instagram",
    "tiktok.com": "tiktok",
    "youtube.com": "youtube",
    "youtu.be": "youtube",
    "facebook.com": "facebook",
    "pinterest.com": "pinterest",
}

WRAPPING_QUOTES = '"“”'


def _meta_content(soup: BeautifulSoup, key: str) -> str:
    """Content of <meta property=key> or <meta name=key>, or ''."""
    tag = soup.find("meta", attrs={"property": key}) or soup.find("meta", attrs={"name": key})
    if tag and tag.get("content"):
        return tag["content"].strip()
    return ""


def _strip_wrapping_quotes(text: str) -> str:
    """'"Crispy Tacos".' -> 'Crispy Tacos'"""
    body = text[:-1] if text.endswith(".") else text
    trimmed = trim_trailing(body, WRAPPING_QUOTES)
    if len(trimmed) < len(body) or body == text:
        text = trimmed
    start = 0
    while start < len(text) and (text[start].isspace() or text[start] in WRAPPING_QUOTES):
        start += 1
    return text[start:]


def extract_page_metadata(html: str) -> Dict[str, Any]:
    """
    Read the Open Graph / Twitter card metadata of a post page.

    Returns:
        Dict with title, description, image and caption. caption is the
        description with the "N likes, N comments - user on date:" prefix
        and the wrapping quotes removed.
    """
    soup = BeautifulSoup(html or "", "html.parser")

    title = _meta_content(soup, "og:title") or _meta_content(soup, "twitter:title")
    if not title and soup.title and soup.title.string:
        title = soup.title.string.strip()

    description = (
        _meta_content(soup, "og:description")
        or _meta_content(soup, "twitter:description")
        or _meta_content(soup, "description")
    )
    image = _meta_content(soup, "og:image") or _meta_content(soup, "twitter:image")

    caption = clean_social_boilerplate(normalize_text(description))
    caption = _strip_wrapping_quotes(caption)

    return {
        "title": normalize_text(title) or None,
        "description": normalize_text(description) or None,
        "image": image or None,
        "caption": caption,
    }


def detect_platform(url: str) -> str:
    """Platform name for a post URL, "web" for anything unknown."""
    host = urlparse(url or "").netloc.lower()
    for domain, platform in PLATFORM_DOMAINS.items():
        if host == domain or host.endswith("." + domain):
            return platform
    return "web"


def fetch_page_metadata(url: str) -> Optional[Dict[str, Any]]:
    """Fetch a post page and extract its metadata. None on network errors."""
    try:
        response = requests.get(url, timeout=CAPTION_FETCH_TIMEOUT, headers={
            "User-Agent": CAPTION_USER_AGENT
        })
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        print(f"  -> Failed to fetch {url}: {e}")
        return None

    return extract_page_metadata(response.text)


def import_recipe_from_url(url: str) -> Optional[Dict[str, Any]]:
    """
    Fetch a post and parse its caption into a recipe.

    Returns:
        The parse_social_caption dict plus source_url, None when the page
        could not be fetched
    """
    metadata = fetch_page_metadata(url)
    if metadata is None:
        return None

    recipe = parse_social_caption(
        metadata["caption"],
        fallback_title=metadata["title"],
        hero_image=metadata["image"],
        source=detect_platform(url),
    )
    recipe["source_url"] = url
    return recipe
