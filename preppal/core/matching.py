"""Ingredient name normalization and keyword matching."""

import re
from typing import Optional


# Retailer house brands that add nothing to a nutrition search
HOUSE_BRANDS = [
    "kroger",
    "simple truth",
    "private selection",
    "heritage farm",
    "comforts",
    "big k",
    "check this out",
    "psst",
    "organic",
]

# Words that describe preparation or size rather than the food itself
DESCRIPTORS = {
    "cut", "peeled", "sliced", "diced", "chopped", "fresh", "frozen",
    "raw", "cooked", "baby", "mini", "large", "small",
}

SIZE_PATTERN = re.compile(
    r"\d+(?:\.\d+)?\s*(?:fl\s*oz|oz|lbs|lb|ct|pack|count|ml|kg|g|each|per|pound)\b",
    re.IGNORECASE,
)

MIN_KEYWORD_LENGTH = 3


def normalize_name(name: Optional[str]) -> str:
    """Lowercase and trim a name for comparisons."""
    return (name or "").lower().strip()


def clean_product_description(description: str) -> str:
    """
    Reduce a retailer product description to searchable food words.

    "Simple Truth Organic Baby Spinach 5 oz" -> "baby spinach"
    """
    cleaned = description.lower()
    for brand in HOUSE_BRANDS:
        cleaned = cleaned.replace(brand, "")
    cleaned = SIZE_PATTERN.sub("", cleaned)
    cleaned = re.sub(r"[^a-z\s]", " ", cleaned)
    return re.sub(r"\s+", " ", cleaned).strip()


def build_search_term(description: str, max_words: int = 4) -> str:
    """First ``max_words`` words of the cleaned description."""
    words = clean_product_description(description).split(" ")
    return " ".join(words[:max_words]).strip()


def primary_keyword(search_term: str) -> Optional[str]:
    """
    Pick the word a match must contain.

    English food names put the noun last ("boneless chicken breast"), so the
    last non-descriptor word of at least three letters is used.
    """
    words = [w for w in search_term.lower().split(" ") if len(w) >= MIN_KEYWORD_LENGTH]
    if not words:
        return None
    important = [w for w in words if w not in DESCRIPTORS]
    return important[-1] if important else words[-1]


def contains_keyword(result_name: str, search_term: str) -> bool:
    """True when ``result_name`` contains the primary keyword as a whole word (plural allowed)."""
    keyword = primary_keyword(search_term)
    if not keyword:
        return False
    pattern = rf"\b{re.escape(keyword)}s?\b"
    return re.search(pattern, result_name, re.IGNORECASE) is not None


def matches_staple(ingredient_name: str, staple_name: str) -> bool:
    """True when a pantry staple name equals or appears as whole words in an ingredient name."""
    ingredient = normalize_name(ingredient_name)
    staple = normalize_name(staple_name)
    if not ingredient or not staple:
        return False
    if ingredient == staple:
        return True
    return re.search(rf"\b{re.escape(staple)}\b", ingredient) is not None
