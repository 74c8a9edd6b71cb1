#!/usr/bin/env python3
"""Simple API server for parsing recipe captions from shortcuts and scripts."""

from flask import Flask, request, jsonify
import os
from dotenv import load_dotenv

from caption_parser.social_caption import parse_social_caption
from caption_parser.title_extractor import extract_recipe_title
from caption_sources import import_recipe_from_url

load_dotenv()

app = Flask(__name__)


@app.route('/health', methods=['GET'])
def health():
    """Health check endpoint."""
    return jsonify({'status': 'ok'})


@app.route('/parse', methods=['POST'])
def parse():
    """Parse a caption into a recipe."""
    data = request.get_json(force=True, silent=True) or {}
    text = data.get('text')

    if not text or not isinstance(text, str):
        return jsonify({'error': 'No text provided'}), 400

    comments = data.get('comments') or []
    if not isinstance(comments, list):
        return jsonify({'error': 'comments must be a list'}), 400

    recipe = parse_social_caption(
        text,
        fallback_title=data.get('fallback_title'),
        hero_image=data.get('hero_image'),
        source=data.get('source') or 'instagram',
        comments=[c for c in comments if isinstance(c, str)],
    )
    return jsonify(recipe)


@app.route('/title', methods=['POST'])
def title():
    """Pick a recipe title from caption, description and page title."""
    data = request.get_json(force=True, silent=True) or {}
    fields = {
        key: data.get(key) if isinstance(data.get(key), str) else None
        for key in ('caption', 'description', 'page_title', 'text')
    }

    if not any(value and value.strip() for value in fields.values()):
        return jsonify({'error': 'No text provided'}), 400

    return jsonify({'title': extract_recipe_title(**fields)})


@app.route('/import', methods=['POST'])
def import_url():
    """Fetch a post URL and parse its caption."""
    data = request.get_json(force=True, silent=True) or {}
    url = data.get('url')

    if not url:
        return jsonify({'error': 'No URL provided'}), 400

    recipe = import_recipe_from_url(url)
    if recipe is None:
        return jsonify({'error': f'Failed to fetch {url}'}), 502
    return jsonify(recipe)


if __name__ == '__main__':
    port = int(os.getenv('PORT', 5000))
    app.run(host='0.0.0.0', port=port, debug=False)
