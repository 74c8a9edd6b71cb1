"""Tests for the parse_caption CLI"""
import io
import json
import sys
from unittest.mock import patch

import pytest

import parse_caption


CAPTION = (
    "Lemon Garlic Salmon\nServes 2\n"
    "Ingredients:\n2 salmon fillets\n1 lemon\n3 cloves garlic\n"
    "Instructions:\nHeat the oven to 400F.\nBake the salmon 12 minutes."
)


def run_cli(args):
    with patch.object(sys, 'argv', ['parse_caption.py'] + args):
        parse_caption.main()


class TestFormatRecipe:
    """Tests for format_recipe function"""

    def test_flat_list(self):
        """Prints title, ingredients and numbered steps"""
        text = parse_caption.format_recipe({
            'title': 'Tacos', 'servings': None, 'confidence': 'medium',
            'ingredients': ['2 tortillas'], 'ingredient_sections': None,
            'steps': ['Warm the tortillas.'],
        })
        assert 'Title: Tacos' in text
        assert '  - 2 tortillas' in text
        assert '  1. Warm the tortillas.' in text

    def test_sections(self):
        """Prints section names above their ingredients"""
        text = parse_caption.format_recipe({
            'title': None, 'confidence': 'low', 'steps': [],
            'ingredients': ['1 egg'],
            'ingredient_sections': [{'name': 'Glaze', 'ingredients': ['1 egg']}],
        })
        assert 'Title: (untitled)' in text
        assert '  Glaze:' in text
        assert '    - 1 egg' in text


class TestMain:
    """Tests for main function"""

    def test_caption_file(self, tmp_path, capsys):
        """Parses a caption file into a readable summary"""
        caption_file = tmp_path / "salmon.txt"
        caption_file.write_text(CAPTION, encoding="utf-8")

        run_cli([str(caption_file)])

        out = capsys.readouterr().out
        assert 'Title: Lemon Garlic Salmon' in out
        assert 'Servings: Serves 2' in out
        assert '  - 2 salmon fillets' in out

    def test_json_output(self, tmp_path, capsys):
        """--json prints the recipe as JSON"""
        caption_file = tmp_path / "salmon.txt"
        caption_file.write_text(CAPTION, encoding="utf-8")

        run_cli([str(caption_file), '--json'])

        data = json.loads(capsys.readouterr().out)
        assert data['ingredients'] == ['2 salmon fillets', '1 lemon', '3 cloves garlic']
        assert data['steps'] == ['Heat the oven to 400F.', 'Bake the salmon 12 minutes.']

    def test_stdin(self, capsys):
        """- reads the caption from stdin"""
        with patch.object(sys, 'stdin', io.StringIO(CAPTION)):
            run_cli(['-', '--json'])

        assert json.loads(capsys.readouterr().out)['title'] == 'Lemon Garlic Salmon'

    def test_verbose(self, tmp_path, capsys):
        """--verbose prints the debug trace to stderr"""
        caption_file = tmp_path / "salmon.txt"
        caption_file.write_text(CAPTION, encoding="utf-8")

        run_cli([str(caption_file), '--verbose'])

        assert 'ing:3' in capsys.readouterr().err

    def test_html_file(self, tmp_path, capsys):
        """--html reads the caption from a saved page"""
        page = tmp_path / "post.html"
        page.write_text(
            '<html><head><meta property="og:title" content="Lemon Garlic Salmon">'
            '<meta property="og:description" content="2 salmon fillets, 1 lemon"></head></html>',
            encoding="utf-8",
        )

        run_cli(['--html', str(page), '--json'])

        data = json.loads(capsys.readouterr().out)
        assert data['title'] == 'Lemon Garlic Salmon'
        assert data['ingredients'] == ['2 salmon fillets', '1 lemon']

    def test_url_failure(self, capsys):
        """An unreachable URL exits with code 1"""
        with patch('parse_caption.import_recipe_from_url', return_value=None):
            with pytest.raises(SystemExit) as exc:
                run_cli(['--url', 'https://www.instagram.com/p/abc/'])
        assert exc.value.code == 1

    def test_missing_file(self, tmp_path, capsys):
        """An unreadable caption file exits with code 1"""
        with pytest.raises(SystemExit) as exc:
            run_cli([str(tmp_path / "missing.txt")])
        assert exc.value.code == 1
        assert 'cannot read' in capsys.readouterr().err

    def test_no_input(self):
        """No input is a usage error"""
        with pytest.raises(SystemExit) as exc:
            run_cli([])
        assert exc.value.code == 2
