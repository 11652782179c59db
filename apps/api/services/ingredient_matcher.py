"""
Ingredient name matching.
Ranks known ingredients against free text (invoice lines, search boxes) using
normalization, an alias table and edit-distance similarity.
"""
import logging
import re
from dataclasses import dataclass
from typing import Any, Iterable, List, Literal, Tuple

logger = logging.getLogger(__name__)

MatchType = Literal["exact", "partial", "alias", "similar"]

EXACT_SIMILARITY = 1.0
PARTIAL_SIMILARITY = 0.85
ALIAS_SIMILARITY = 0.8
DEFAULT_THRESHOLD = 0.4

# Base ingredient -> known variations
INGREDIENT_ALIASES = {
    "tomato": ["tomatoes", "roma tomato", "cherry tomato", "grape tomato", "plum tomato"],
    "onion": ["onions", "brown onion", "red onion", "white onion", "spanish onion", "shallot", "shallots"],
    "garlic": ["garlic cloves", "garlic clove", "minced garlic", "crushed garlic"],
    "potato": ["potatoes", "kipfler", "dutch cream", "desiree", "pontiac"],
    "pepper": ["peppers", "capsicum", "bell pepper", "red pepper", "green pepper"],
    "chicken": ["chicken breast", "chicken thigh", "chicken drumstick", "chicken wing"],
    "beef": ["beef mince", "ground beef", "beef steak", "beef chuck", "beef brisket"],
    "oil": ["olive oil", "vegetable oil", "canola oil", "sunflower oil", "cooking oil"],
    "butter": ["unsalted butter", "salted butter"],
    "cream": ["heavy cream", "thickened cream", "pouring cream", "double cream"],
    "milk": ["full cream milk", "skim milk", "whole milk"],
    "flour": ["plain flour", "all purpose flour", "self raising flour", "bread flour"],
    "sugar": ["white sugar", "caster sugar", "brown sugar", "raw sugar"],
    "salt": ["sea salt", "table salt", "kosher salt", "rock salt"],
    "cheese": ["cheddar", "parmesan", "mozzarella", "feta", "ricotta", "cream cheese"],
}

_ALIAS_GROUPS: List[Tuple[str, ...]] = [(base, *aliases) for base, aliases in INGREDIENT_ALIASES.items()]

STOP_WORDS = ["fresh", "dried", "chopped", "diced", "sliced", "minced", "crushed", "ground", "whole", "organic", "local"]

_STOP_WORDS_RE = re.compile(r"\b(?:" + "|".join(STOP_WORDS) + r")\b")

# Checked in order; the first category with a keyword in the name wins
CATEGORY_KEYWORDS = {
    "Protein": ["chicken", "beef", "pork", "lamb", "fish", "salmon", "tuna", "prawn", "shrimp", "bacon", "sausage", "mince"],
    "Dairy": ["milk", "cream", "butter", "cheese", "yogurt", "yoghurt"],
    "Produce": [
        "tomato", "onion", "garlic", "potato", "carrot", "celery", "lettuce", "spinach",
        "broccoli", "pepper", "capsicum", "zucchini", "mushroom", "cucumber", "avocado",
    ],
    "Fruit": ["apple", "banana", "orange", "lemon", "lime", "berry", "strawberry", "mango"],
    "Pantry": ["flour", "sugar", "salt", "oil", "vinegar", "sauce", "pasta", "rice", "noodle", "bread"],
    "Spices": ["pepper", "cumin", "paprika", "cinnamon", "oregano", "basil", "thyme", "rosemary", "chili", "curry"],
    "Seafood": ["fish", "salmon", "tuna", "prawn", "shrimp", "crab", "lobster", "mussel", "oyster", "squid"],
}

UNIT_KEYWORDS = {
    "ml": ["milk", "cream", "oil", "vinegar", "sauce", "stock", "broth", "water", "juice"],
    "g": ["flour", "sugar", "butter", "cheese", "mince", "meat", "fish", "chicken", "beef", "pork", "lamb"],
    "each": [
        "egg", "onion", "garlic", "lemon", "lime", "avocado", "apple", "banana",
        "orange", "tomato", "potato", "carrot",
    ],
    "bunch": ["parsley", "coriander", "cilantro", "basil", "mint", "thyme", "rosemary", "chive", "dill"],
}


@dataclass
class IngredientMatch:
    """A candidate ingredient ranked against a search term."""

    id: str
    name: str
    similarity: float  # 0-1
    match_type: MatchType


def normalize_ingredient_name(name: str) -> str:
    """
    Normalize an ingredient name for matching.

    Examples:
        "Fresh Tomatoes" -> "tomato"
        "Chopped  Parsley" -> "parsley"
        "Berries" -> "berry"
    """
    normalized = _STOP_WORDS_RE.sub("", name.lower().strip())
    normalized = re.sub(r"\s+", " ", normalized).strip()

    if normalized.endswith("ies"):
        normalized = normalized[:-3] + "y"
    elif normalized.endswith("es") and not normalized.endswith("ses"):
        normalized = normalized[:-2]
    elif normalized.endswith("s") and not normalized.endswith("ss"):
        normalized = normalized[:-1]

    return normalized


def _levenshtein(shorter: str, longer: str) -> int:
    previous = list(range(len(longer) + 1))
    for i, short_char in enumerate(shorter, start=1):
        current = [i]
        for j, long_char in enumerate(longer, start=1):
            if short_char == long_char:
                current.append(previous[j - 1])
            else:
                current.append(min(previous[j - 1], current[j - 1], previous[j]) + 1)
        previous = current
    return previous[-1]


def calculate_similarity(str1: str, str2: str) -> float:
    """
    Similarity between two strings in [0, 1].

    Case-insensitive. Substrings score 0.9; otherwise Levenshtein distance
    normalized by the longer string's length.
    """
    s1 = str1.lower()
    s2 = str2.lower()

    if s1 == s2:
        return 1.0

    longer, shorter = (s1, s2) if len(s1) > len(s2) else (s2, s1)

    if shorter in longer:
        return 0.9
    if len(shorter) < 2:
        return 0.0

    return 1 - _levenshtein(shorter, longer) / len(longer)


def _is_alias(search_lower: str, name_lower: str) -> bool:
    for variants in _ALIAS_GROUPS:
        search_in_group = any(v in search_lower or search_lower in v for v in variants)
        name_in_group = any(v in name_lower or name_lower in v for v in variants)
        if search_in_group and name_in_group:
            return True
    return False


def _field(candidate: Any, key: str) -> Any:
    if isinstance(candidate, dict):
        return candidate[key]
    return getattr(candidate, key)


def find_similar_ingredients(
    search_term: str,
    ingredients: Iterable[Any],
    threshold: float = DEFAULT_THRESHOLD,
) -> List[IngredientMatch]:
    """
    Rank known ingredients against a search term.

    Each candidate is classified by the first rule it satisfies: exact,
    partial (substring), alias, then fuzzy similarity at or above threshold.

    Args:
        search_term: Free-text ingredient name
        ingredients: Candidates with "id" and "name" (dicts or objects)
        threshold: Minimum similarity for fuzzy matches

    Returns:
        Matches sorted by similarity, highest first; candidates with equal
        similarity keep their input order
    """
    normalized_search = normalize_ingredient_name(search_term)
    search_lower = search_term.lower().strip()
    matches: List[IngredientMatch] = []

    for ingredient in ingredients:
        ingredient_id = str(_field(ingredient, "id"))
        name = _field(ingredient, "name")
        name_lower = name.lower()
        normalized_name = normalize_ingredient_name(name)

        if name_lower == search_lower or normalized_name == normalized_search:
            matches.append(IngredientMatch(ingredient_id, name, EXACT_SIMILARITY, "exact"))
            continue

        if search_lower in name_lower or name_lower in search_lower:
            matches.append(IngredientMatch(ingredient_id, name, PARTIAL_SIMILARITY, "partial"))
            continue

        if _is_alias(search_lower, name_lower):
            matches.append(IngredientMatch(ingredient_id, name, ALIAS_SIMILARITY, "alias"))
            continue

        similarity = max(
            calculate_similarity(search_lower, name_lower),
            calculate_similarity(normalized_search, normalized_name),
        )
        if similarity >= threshold:
            matches.append(IngredientMatch(ingredient_id, name, similarity, "similar"))

    # sorted() is stable, so ties keep candidate order
    ranked = sorted(matches, key=lambda m: m.similarity, reverse=True)
    logger.debug(f"Matched '{search_term}' against candidates: {len(ranked)} result(s)")
    return ranked


def _first_keyword_match(name: str, table: dict, default: str) -> str:
    name_lower = name.lower()
    for label, keywords in table.items():
        if any(keyword in name_lower for keyword in keywords):
            return label
    return default


def infer_category(name: str) -> str:
    """Guess an ingredient category from its name ("Other" if nothing fits)."""
    return _first_keyword_match(name, CATEGORY_KEYWORDS, "Other")


def infer_unit(name: str) -> str:
    """Guess the unit an ingredient is usually bought in ("g" if nothing fits)."""
    return _first_keyword_match(name, UNIT_KEYWORDS, "g")
