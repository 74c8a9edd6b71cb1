"""Word lists used by the caption parser heuristics.

Everything here is plain data so the lists can be edited without touching
the parsing code. Regexes are built from these with word_pattern().
"""

import re
from typing import Iterable

# Unicode vulgar fraction glyphs
FRACTION_GLYPHS = "¼½¾⅓⅔⅛⅜⅝⅞"

# Measurement units that mark a line as an ingredient
UNIT_WORDS = (
    "cup", "cups", "tsp", "tbsp", "teaspoon", "teaspoons", "tablespoon", "tablespoons",
    "oz", "ounce", "ounces", "ml", "l", "g", "gram", "grams", "kg", "lb", "lbs",
    "pound", "pounds", "stick", "sticks", "clove", "cloves", "pinch", "pinches",
    "dash", "dashes", "bunch", "can", "cans", "package", "packages", "head", "heads",
)

# Units that disqualify a line from being a sub-header
HEADER_UNIT_WORDS = (
    "cup", "cups", "tsp", "tbsp", "teaspoon", "tablespoon", "oz", "ounce", "ounces",
    "ml", "l", "g", "gram", "grams", "kg", "stick", "sticks",
)

# Words that make a short tail look like an ingredient after an inline header
INLINE_INGREDIENT_WORDS = HEADER_UNIT_WORDS + (
    "egg", "eggs", "butter", "milk", "sugar", "cream", "yeast", "flour", "salt", "pepper",
)

NUMBER_WORDS = ("one", "two", "three", "four", "five", "six", "seven", "eight", "nine", "ten")

# Nouns strong enough to accept a short, unpunctuated line as an ingredient
LOOSE_INGREDIENT_NOUNS = (
    "chuck", "roast", r"short\s*ribs?", "ribs?", "tortilla", "tortillas", "cilantro",
    "oregano", "cinnamon", "salt", "peppers?", "sugar", "flour", "butter", "oil", "olive",
    "vegetable", "garlic", "onion", r"bay\s+leaves?", "parsley", "basil", "thyme",
    "rosemary", "sage", "tomato", "paste", "yogurt", r"sour\s+cream", "cheese",
    "mozzarella", "oaxaca", "taco", "lettuce", "ginger", "sesame", r"soy\s+sauce",
    r"coconut\s+aminos", "lime", "lemon", "avocado", r"ground\s+chicken", "chicken",
    "beef", "pork", "shrimp", "salmon", "fish", "egg", "eggs", "chile", "chiles",
    "chili", "chilies", "guajillo", "pasilla",
)

# Phrases that commonly start an ingredient without a quantity
INGREDIENT_LEAD_PHRASES = (
    r"(?:Sea|Kosher|Table)\s+salt", r"Black\s+pepper", r"White\s+pepper",
    r"Red\s+pepper\s+flakes", r"Olive\s+oil", r"Vegetable\s+oil", r"Cooking\s+spray",
)

# Preparation words that continue the previous ingredient ("peeled", "and deveined")
CONTINUATION_WORDS = (
    "peeled", "deveined", "seeded", "pitted", "minced", "chopped", "diced", "sliced",
    "shredded", "rinsed", "drained", "cored", "crushed", "grated", "trimmed", "halved",
    "quartered", "cubed", "julienned", "softened", "melted", "beaten", "divided",
    "warmed", "heated", "cooled",
)

CONTINUATION_ADVERBS = ("finely", "roughly", "thinly", "coarsely", "lightly", "freshly")

# Words that mark "For the Ganache:"-style sub-headers
SECTION_HINTS = (
    "for the", "ganache", "filling", "topping", "frosting", "assembly",
    "optional toppings", "to serve", "batter", "glaze", "streusel", "crust", "dough",
    "sauce", "dressing", "marinade", "ingredients",
)

# Promotional vocabulary (regex fragments)
PROMO_PHRASES = (
    "follow", "subscribe", "newsletter", r"link\s+(?:in|on)\s+bio", r"visit\s+our",
    r"check\s+(?:out|our)", r"use\s+code", "discount", r"shop\s+(?:our|the)", r"our\s+shop",
    "storefront", "featured", "feature", r"chance\s+to\s+be\s+featured", r"tag\s+us",
    "contest", "giveaway", r"delicious\s+food", r"our\s+(?:site|website|blog)",
    r"download\s+our\s+app", r"app\s+store",
)

# Verbs that make a line look like an instruction
COOKING_VERBS = (
    "preheat", "heat", "melt", "whisk", "stir", "mix", "combine", "bring", "simmer",
    "boil", "reduce", "add", "fold", "pour", "spread", "sprinkle", "season", "coat",
    "cook", "bake", "fry", r"air\s*fry", "remove", "transfer", r"let\s+sit", "rest",
    "chill", "refrigerate", "cool", "cut", "slice", "serve", "garnish", "line", "mince",
    "dice", "chop", "peel", "seed", "core", "marinate", "prepare", "beat", "blend",
    "pulse", "knead", "roll", "press", "grease", "butter", "measure", "rinse", "drain",
    r"pat\s+dry", "toast", "grate", "zest", "steam", "microwave", "warm", "make",
    "fill", "assemble",
)

# Verbs that may open an imperative step line
IMPERATIVE_VERBS = (
    "preheat", "heat", "melt", "whisk", "stir", "mix", "combine", "bring", "simmer",
    "boil", "reduce", "add", "fold", "pour", "spread", "sprinkle", "season", "coat",
    "cook", "bake", "fry", r"air\s*fry", "remove", "transfer", r"let\s+sit", "rest",
    "chill", "refrigerate", "cool", "cut", "slice", "serve", "garnish", "line", "mince",
    "dice", "chop", "peel", "seed", "core", "marinate", "prepare", r"mix\s+the", "make",
    "fill", "assemble",
)

# Words that a verb-led step with a period must contain
PERIOD_STEP_VERBS = (
    "preheat", "heat", "melt", "whisk", "stir", "mix", "combine", "bring", "pour",
    "spread", "sprinkle", "season", "bake", "cook", "chill", "cut", "slice", "serve",
    "garnish", "marinate", "prepare", "make", "fill", "assemble",
)

# Cue verbs used to find split points inside long paragraphs
CUE_VERBS = (
    "Preheat", "Heat", "Melt", "Whisk", "Stir", "Mix", "Combine", "Bring", "Simmer",
    "Boil", "Reduce", "Add", "Fold", "Pour", "Spread", "Sprinkle", "Season", "Coat",
    "Cook", "Bake", "Fry", r"Air\s+fry", "Remove", "Transfer", r"Let\s+sit", "Rest",
    "Chill", "Refrigerate", "Cool", "Cut", "Slice", "Serve", "Garnish", "Line", "Mince",
    "Dice", "Chop", "Peel", "Marinate", "Prepare", "Make", "Fill", "Assemble",
)

# Words that start a new step right after a sentence-ending period
STEP_TRANSITION_WORDS = (
    "Step", "STEP", "Add", "Then", "Next", "Now", "Once", "After", "Meanwhile", "When",
    "If", "Bake", "Cook", "Serve", "Let",
)

# Step meta lines: labels and bare "N <product>" counts
META_LABELS = (
    "servings?", "serves", "yield", "yields", "makes", r"prep\s+time", r"cook\s+time",
    r"total\s+time", "time", "kcal", "calories",
)

META_PRODUCT_NOUNS = (
    "servings?", "croissants?", "cookies?", "muffins?", "bars?", "slices?", "pieces?", "cups?",
)

# Labels that introduce a servings line
SERVING_LABELS = (
    "serves?", "servings?", r"serving\s+size", "makes", "feeds", r"enough\s+for",
    "yield", "yields", "portions?",
)

# Title scoring vocabularies
RECIPE_EMOJIS = (
    "🍕", "🍔", "🍞", "🥖", "🥨", "🥯", "🥪", "🥙", "🌮", "🌯", "🥗", "🥘", "🍝", "🥫",
    "🍜", "🍲", "🍛", "🍣", "🍱", "🥟", "🍤", "🍗", "🍖", "🧀", "🥚", "🥓", "🥩", "🥐",
    "🧂", "🥄", "🍽", "⏲",
)

RECIPE_NOUNS = (
    "recipe", "homemade", "bake", "baked", "cook", "cooked", "dish", "meal", "dinner",
    "lunch", "breakfast", "brunch", "snack", "dessert", "treat", "appetizer",
)

TITLE_MEASUREMENT_WORDS = (
    "cup", "cups", "tsp", "tbsp", "teaspoon", "tablespoon", "oz", "ounce", "ounces",
    "lb", "pound", "g", "gram", "kg", "ml", "l", "liter", "litre", "clove", "cloves",
    "egg", "eggs", "stick", "sticks",
)

TITLE_PROMO_WORDS = ("follow", "subscribe", "like", "share", r"check\s+out", r"new\s+post", r"link\s+in\s+bio")

PLATFORM_NAMES = ("tiktok", "instagram", "youtube", "pinterest", "facebook")

INSTRUCTION_WORDS = (
    "step", "preheat", "mix", "combine", "add", "stir", "whisk", "bake", "boil", "simmer",
    "cook", "fry", "sauté", "saute", "grill", "roast",
)

# Sentence starters that end a title candidate when they appear late in the line
TITLE_CUT_TOKENS = (
    " for ", " to ", " ingredients", " you'll", " youll", " serves", " servings",
    " recipe", " prep ", " cook ", " directions", " instructions",
)

# Numeric entities for zero-width and bidi control characters
INVISIBLE_ENTITY_CODES = (
    "8203", "8204", "8205", "8232", "8233", "8234", "8235", "8236", "8237", "8238", "65279",
)


def word_pattern(words: Iterable[str], flags: int = re.IGNORECASE) -> re.Pattern:
    """Compile a whole-word alternation regex from a word list."""
    return re.compile(r"\b(?:" + "|".join(words) + r")\b", flags)
