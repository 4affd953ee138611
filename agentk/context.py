"""Grounding context assembly for the generation prompt."""

from __future__ import annotations

from collections.abc import Sequence

from .config import config
from .models import ConfidenceTier, KnowledgeEntry, ScoredEntry

TRUNCATION_MARKER = "[context truncated]"


def stride_sample(
    knowledge_base: Sequence[KnowledgeEntry], max_entries: int
) -> list[ScoredEntry]:
    """Pick entries at a fixed stride so the sample spans the whole base."""
    if max_entries <= 0 or not knowledge_base:
        return []
    stride = max(1, len(knowledge_base) // max_entries)
    return [
        ScoredEntry(entry=knowledge_base[index], index=index, score=0.0)
        for index in range(0, len(knowledge_base), stride)
    ][:max_entries]


def format_entries(entries: Sequence[ScoredEntry]) -> str:
    return "\n\n".join(
        f"{position}. Question: {item.entry.question}\n   Answer: {item.entry.answer}"
        for position, item in enumerate(entries, start=1)
    )


def truncate(text: str, max_chars: int) -> str:
    """Cut ``text`` to ``max_chars`` including the truncation marker."""
    if len(text) <= max_chars:
        return text
    suffix = f"\n{TRUNCATION_MARKER}"
    if max_chars <= len(suffix):
        return TRUNCATION_MARKER[: max(0, max_chars)]
    return text[: max_chars - len(suffix)].rstrip() + suffix


def build_context(
    scored: Sequence[ScoredEntry],
    tier: ConfidenceTier,
    knowledge_base: Sequence[KnowledgeEntry] = (),
    max_entries: int | None = None,
    max_chars: int | None = None,
) -> str:
    """Build the numbered background block handed to the generator.

    WEAK matches contribute their top entries; NONE falls back to an evenly
    spaced sample of the whole knowledge base; STRONG matches are answered
    verbatim and need no context.

    Returns:
        The context block, or an empty string.
    """
    max_entries = max_entries or config.CONTEXT_MAX_ENTRIES
    max_chars = max_chars or config.CONTEXT_MAX_CHARS

    if tier is ConfidenceTier.STRONG:
        return ""
    if tier is ConfidenceTier.WEAK:
        selected = list(scored[:max_entries])
    else:
        selected = stride_sample(knowledge_base, max_entries)

    if not selected:
        return ""
    return truncate(format_entries(selected), max_chars)
