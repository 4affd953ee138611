"""Detection of answers that repeat the previous turn."""

import re

from .config import config

_TOKEN_RE = re.compile(r"[a-z0-9]+")
MIN_TOKEN_LENGTH = 4


def significant_tokens(text: str) -> set[str]:
    """Distinct lowercase tokens longer than three characters."""
    if not text:
        return set()
    return {t for t in _TOKEN_RE.findall(text.lower()) if len(t) >= MIN_TOKEN_LENGTH}


def jaccard_similarity(a: str, b: str) -> float:
    """Jaccard similarity of the significant token sets; 0.0 if both are empty."""
    tokens_a = significant_tokens(a)
    tokens_b = significant_tokens(b)
    union = tokens_a | tokens_b
    if not union:
        return 0.0
    return len(tokens_a & tokens_b) / len(union)


def is_repeat(previous: str, candidate: str, threshold: float | None = None) -> bool:
    """Whether ``candidate`` is too similar to ``previous`` to be shown again."""
    if not previous or not candidate:
        return False
    threshold = config.REPEAT_THRESHOLD if threshold is None else threshold
    return jaccard_similarity(previous, candidate) >= threshold
