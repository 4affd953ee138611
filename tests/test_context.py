"""Tests for grounding context assembly."""

import pytest

from agentk import ConfidenceTier, KnowledgeEntry, ScoredEntry
from agentk.context import (
    TRUNCATION_MARKER,
    build_context,
    format_entries,
    stride_sample,
    truncate,
)


def _scored(knowledge_base, *indices):
    return [
        ScoredEntry(entry=knowledge_base[i], index=i, score=1.0 - 0.1 * n)
        for n, i in enumerate(indices)
    ]


@pytest.fixture
def large_knowledge_base():
    return tuple(
        KnowledgeEntry(question=f"Question {i}?", answer=f"Answer {i}.")
        for i in range(12)
    )


def test_stride_sample_spans_the_whole_base(large_knowledge_base):
    sample = stride_sample(large_knowledge_base, 5)
    assert [item.index for item in sample] == [0, 2, 4, 6, 8]


def test_stride_sample_small_base(knowledge_base):
    sample = stride_sample(knowledge_base, 5)
    assert [item.index for item in sample] == [0, 1, 2, 3, 4]


@pytest.mark.parametrize("max_entries", [0, -1])
def test_stride_sample_non_positive_limit(knowledge_base, max_entries):
    assert stride_sample(knowledge_base, max_entries) == []


def test_stride_sample_empty_base():
    assert stride_sample((), 5) == []


def test_format_entries_numbers_question_answer_pairs(knowledge_base):
    text = format_entries(_scored(knowledge_base, 4, 0))

    assert text.startswith(f"1. Question: {knowledge_base[4].question}\n   Answer: ")
    assert f"\n\n2. Question: {knowledge_base[0].question}" in text


def test_truncate_leaves_short_text_alone():
    assert truncate("short", 100) == "short"


def test_truncate_respects_limit_and_marks_cut():
    result = truncate("x" * 100, 50)

    assert len(result) <= 50
    assert result.endswith(TRUNCATION_MARKER)
    assert result.startswith("x")


@pytest.mark.parametrize("max_chars", [0, 5, len(TRUNCATION_MARKER)])
def test_truncate_never_exceeds_tiny_budget(max_chars):
    result = truncate("x" * 100, max_chars)

    assert len(result) <= max_chars
    assert result == TRUNCATION_MARKER[:max_chars]


def test_strong_tier_needs_no_context(knowledge_base):
    assert build_context(_scored(knowledge_base, 2), ConfidenceTier.STRONG, knowledge_base) == ""


def test_weak_tier_uses_top_matches(knowledge_base):
    context = build_context(
        _scored(knowledge_base, 3, 1, 5), ConfidenceTier.WEAK, knowledge_base, max_entries=2
    )

    assert knowledge_base[3].question in context
    assert knowledge_base[1].question in context
    assert knowledge_base[5].question not in context


def test_none_tier_samples_whole_base(large_knowledge_base):
    context = build_context([], ConfidenceTier.NONE, large_knowledge_base, max_entries=3)

    assert "Question 0?" in context
    assert "Question 4?" in context
    assert "Question 8?" in context
    assert "Question 1?" not in context


def test_none_tier_with_empty_base():
    assert build_context([], ConfidenceTier.NONE, ()) == ""


def test_context_is_truncated(large_knowledge_base):
    context = build_context(
        [], ConfidenceTier.NONE, large_knowledge_base, max_entries=10, max_chars=80
    )

    assert len(context) <= 80
    assert context.endswith(TRUNCATION_MARKER)
