"""Tests for step pipeline"""
import time

from caption_parser.steps import (
    build_steps,
    clean_step_line,
    explode_compound_steps,
    fix_wrapped_pan_sizes,
    force_inline_step_breaks,
    is_meta_line,
    looks_like_step,
    merge_orphan_pan_size_steps,
    split_mixed_step_line,
    strip_editor_artifacts,
)


class TestForceInlineStepBreaks:
    """Tests for force_inline_step_breaks function"""

    def test_inline_numbering(self):
        """Inline numbering starts new lines"""
        text = "1. Preheat oven. 2. Mix batter. 3. Bake 25 minutes."
        assert force_inline_step_breaks(text) == "1. Preheat oven.\n2. Mix batter.\n3. Bake 25 minutes."

    def test_separators(self):
        """Semicolons and pipes start new lines"""
        assert force_inline_step_breaks("Mix; Bake | Serve") == "Mix\nBake\nServe"

    def test_transition_word(self):
        """A period before a transition word starts a new line"""
        assert force_inline_step_breaks("Mix well. Then bake.") == "Mix well.\nThen bake."

    def test_plain_sentences_kept(self):
        """Ordinary sentences stay on one line"""
        assert force_inline_step_breaks("Mix well. It smells great.") == "Mix well. It smells great."


class TestCleaning:
    """Tests for line cleaning helpers"""

    def test_numbering_and_hashtags(self):
        """Numbering and trailing hashtags are removed"""
        assert clean_step_line("2. Stir well #yum #food") == "Stir well"

    def test_step_label(self):
        """A "Step 2:" label is removed"""
        assert clean_step_line("Step 2: Fold in the cream") == "Fold in the cream"

    def test_colon_numbering(self):
        """Colon numbering such as "1:" is removed"""
        assert clean_step_line("1: Whisk the eggs") == "Whisk the eggs"

    def test_step_label_needs_word_boundary(self):
        """Words starting with "step" are kept"""
        assert clean_step_line("Stephen's trick: chill the dough") == "Stephen's trick: chill the dough"

    def test_bullets_and_emoji(self):
        """Bullets and emoji are removed"""
        assert clean_step_line("• 🔥 Sear the steak") == "Sear the steak"

    def test_editor_artifacts(self):
        """Entities, markdown and a lonely trailing ampersand are removed"""
        assert strip_editor_artifacts("**Bake** until golden &amp;") == "Bake until golden"

    def test_salt_and_pepper_ampersand_kept(self):
        """An ampersand inside a line is kept"""
        assert strip_editor_artifacts("Season with salt & pepper") == "Season with salt & pepper"

    def test_split_mixed_step_line(self):
        """Separators and missed numbering split a line"""
        assert split_mixed_step_line("Mix; Bake 2. Serve warm") == ["Mix", "Bake", "2. Serve warm"]


class TestClassification:
    """Tests for is_meta_line and looks_like_step"""

    def test_meta_lines(self):
        """Servings, timings and product counts are meta"""
        assert is_meta_line("Serves 4")
        assert is_meta_line("Prep time: 10 min")
        assert is_meta_line("12 cookies")

    def test_instruction_not_meta(self):
        """A real instruction is not meta"""
        assert not is_meta_line("Bake the cookies.")

    def test_imperative_is_step(self):
        """A verb-led line is a step"""
        assert looks_like_step("Whisk the eggs")

    def test_ingredient_is_not_step(self):
        """An ingredient-shaped line is not a step"""
        assert not looks_like_step("2 cups flour")

    def test_sentence_with_verb(self):
        """A sentence holding a cooking verb is a step"""
        assert looks_like_step("In a bowl, combine the dry ingredients.")

    def test_prose_is_not_step(self):
        """Prose without cooking verbs is not a step"""
        assert not looks_like_step("It was great.")


class TestExplodeCompoundSteps:
    """Tests for explode_compound_steps function"""

    def test_clause_split(self):
        """Clauses before cue verbs become separate steps"""
        result = explode_compound_steps(["Whisk the eggs and sugar, then add the flour, fold in the butter."])
        assert result == ["Whisk the eggs and sugar", "add the flour", "fold in the butter."]

    def test_sentence_split(self):
        """Sentences become separate steps"""
        assert explode_compound_steps(["Mix it. Bake it."]) == ["Mix it.", "Bake it."]

    def test_empty_paragraphs(self):
        """Empty paragraphs are skipped"""
        assert explode_compound_steps(["", None]) == []


class TestPanSizes:
    """Tests for wrapped pan size repair"""

    def test_fix_wrapped_pan_sizes(self):
        """A pan size wrapped across lines is rejoined"""
        assert fix_wrapped_pan_sizes("Grease a 9x\n13 inch pan.") == "Grease a 9x 13 inch pan."

    def test_unrelated_lines_kept(self):
        """Lines without a loose pan size are untouched"""
        assert fix_wrapped_pan_sizes("Mix\nBake") == "Mix\nBake"

    def test_merge_orphan_pan_size_steps(self):
        """A step ending in "9x" takes the following size step"""
        steps = ["Grease a 9x", "13 inch pan with butter.", "Pour in the batter."]
        assert merge_orphan_pan_size_steps(steps) == [
            "Grease a 9x 13 inch pan with butter.", "Pour in the batter.",
        ]


class TestBuildSteps:
    """Tests for build_steps function"""

    def test_numbered_steps(self):
        """Inline numbered steps are split"""
        assert build_steps("1. Preheat oven. 2. Mix batter. 3. Bake 25 minutes.") == [
            "Preheat oven.", "Mix batter.", "Bake 25 minutes.",
        ]

    def test_seeds_appended(self):
        """Step seeds are appended after the steps region"""
        assert build_steps("Mix well.", ["Serve warm."]) == ["Mix well.", "Serve warm."]

    def test_seeds_only(self):
        """Seeds alone still give steps"""
        assert build_steps("", ["Whisk everything together."]) == ["Whisk everything together."]

    def test_promo_seed_dropped(self):
        """Promotional seeds are dropped"""
        assert build_steps("Mix well.", ["Follow for more"]) == ["Mix well."]

    def test_low_yield_fallback(self):
        """A single paragraph is exploded when that gives more steps"""
        result = build_steps("Whisk the eggs and sugar, then add the flour, fold in the butter.")
        assert result == ["Whisk the eggs and sugar", "add the flour", "fold in the butter."]

    def test_meta_dropped(self):
        """Meta lines never become steps"""
        assert build_steps("Serves 4\nBake 20 minutes.\nCool completely.") == [
            "Bake 20 minutes.", "Cool completely.",
        ]

    def test_dedupe(self):
        """Case-insensitive duplicates are dropped"""
        assert build_steps("Stir well.\nstir well.") == ["Stir well."]

    def test_cap(self):
        """At most 60 steps are returned"""
        blob = "\n".join(f"Stir pot number {i} gently" for i in range(80))
        assert len(build_steps(blob)) == 60

    def test_empty(self):
        """Empty input gives no steps"""
        assert build_steps("") == []
        assert build_steps(None) == []

    def test_long_space_runs(self):
        """Long space runs collapse without slowing the pipeline"""
        started = time.perf_counter()
        steps = build_steps("Mix" + " " * 50000 + "well.")
        assert time.perf_counter() - started < 2
        assert steps == ["Mix well."]
