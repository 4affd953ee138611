"""Query normalization: typo correction and keyword extraction."""

import re

_TYPO_TABLE: dict[str, tuple[str, ...]] = {
    "autonomous": ("autonmous", "autonnomous", "autonamous"),
    "autonomy": ("autonmoy",),
    "autopilot": ("autopliot",),
    "validation": ("valdiation", "validaton", "validaiton", "vlaidation"),
    "strengthening": ("strenghening", "strenghtening", "strenthening"),
    "scripting": ("scrpting", "scriptting", "skritping", "skripting"),
    "program": ("progarm", "proram", "programm", "pogram"),
    "management": ("mangament", "mangement", "managment"),
    "operations": ("operatons",),
    "perception": ("perseption", "percpetion", "perceptionn"),
    "customer": ("custmer", "cusotmer"),
    "success": ("sucess", "succes"),
    "experience": ("expereince", "experiance", "experinece"),
    "data": ("dataa",),
}

TYPO_REPLACEMENTS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(rf"\b{typo}\b", re.IGNORECASE), canonical)
    for canonical, typos in _TYPO_TABLE.items()
    for typo in typos
]

_KEYWORD_RE = re.compile(r"\b[a-z]{3,}\b")


def normalize_query(text: str) -> str:
    """Replace known misspellings with their canonical terms.

    Canonical terms never appear as misspelling keys, so the function is
    idempotent.
    """
    if not text:
        return text
    fixed = text
    for pattern, replacement in TYPO_REPLACEMENTS:
        fixed = pattern.sub(replacement, fixed)
    return fixed


def extract_keywords(text: str, limit: int = 10) -> list[str]:
    """Return the first ``limit`` lowercase words of three or more letters."""
    if not text:
        return []
    return _KEYWORD_RE.findall(text.lower())[:limit]
