"""Tests for the rule-based intent classifier."""

import pytest

from agentk import Intent, IntentClassifier
from agentk.intents import (
    DEFAULT_TOPIC,
    OffTopic,
    classify_topic,
    detect_multipart,
    detect_off_topic,
    detect_star,
)

PRIOR_ANSWER = "Kyle validated autonomous driving software"


@pytest.fixture
def classifier(retrieval_service):
    return IntentClassifier("Kyle", retrieval_service.keyword_vocabulary)


@pytest.mark.parametrize(
    ("query", "expected"),
    [
        ("you suck", Intent.HOSTILE),
        ("I'm so confused", Intent.EMOTIONAL),
        ("Who is Kyle?", Intent.BIOGRAPHY),
        ("tell me about kyle", Intent.BIOGRAPHY),
        ("What does Kyle do", Intent.BIOGRAPHY),
        ("kyle's background", Intent.BIOGRAPHY),
        ("tell me everything", Intent.FULL_SUMMARY),
        ("Is Kyle able to run a data program?", Intent.CAPABILITY),
        ("what is his salary range", Intent.COMPENSATION),
        ("what do you know", Intent.KNOWLEDGE_SCOPE),
        ("what are his key wins", Intent.ACCOMPLISHMENTS),
        ("what is his qa process", Intent.PROCESS),
        ("what is his biggest weakness", Intent.WEAKNESS),
        ("prove it", Intent.CHALLENGE),
        ("k", Intent.LOW_SIGNAL),
        ("???", Intent.LOW_SIGNAL),
        ("hmm", Intent.LOW_SIGNAL),
        ("ab", Intent.LOW_SIGNAL),
        ("banana", Intent.LOW_SIGNAL),
        ("tell me a joke", Intent.OFF_TOPIC),
        ("What AI tools has Kyle built?", Intent.RETRIEVE),
    ],
)
def test_classify(classifier, query, expected):
    assert classifier.classify(query).intent is expected


@pytest.mark.parametrize(
    ("query", "expected"),
    [
        ("this is useless, I'm frustrated", Intent.HOSTILE),
        ("I'm stuck, can he help", Intent.EMOTIONAL),
        ("what are his achievements and weaknesses", Intent.ACCOMPLISHMENTS),
        ("what is his weakest process", Intent.PROCESS),
    ],
)
def test_earlier_rules_win(classifier, query, expected):
    assert classifier.classify(query).intent is expected


def test_degree_abbreviation_is_not_hostile(classifier):
    decision = classifier.classify("Does Kyle have a BS in engineering?")
    assert decision.intent is not Intent.HOSTILE


def test_biography_only_matches_whole_query(classifier):
    decision = classifier.classify("tell me about kyle's testing work")
    assert decision.intent is Intent.RETRIEVE


def test_capability_carries_topic(classifier):
    decision = classifier.classify("can kyle handle autonomous perception work")

    assert decision.intent is Intent.CAPABILITY
    assert decision.topic == "autonomous systems and perception testing"
    assert not decision.needs_retrieval


class TestOneWordQueries:
    """Single tokens are real questions only when they name something known."""

    def test_knowledge_base_keyword_is_retrieved(self, classifier):
        decision = classifier.classify("python")

        assert decision.intent is Intent.RETRIEVE
        assert decision.short

    def test_subject_name_is_retrieved(self, classifier):
        assert classifier.classify("Kyle").intent is Intent.RETRIEVE

    def test_greeting_is_small_talk_not_low_signal(self, classifier):
        decision = classifier.classify("hi")

        assert decision.intent is Intent.OFF_TOPIC
        assert decision.off_topic is OffTopic.GREETING


class TestThreadContinuation:
    """Affirmative replies to the previous answer."""

    @pytest.mark.parametrize("reply", ["yes", "Sure!", "ok", "go ahead"])
    def test_affirmative_continues_prior_thread(self, classifier, reply):
        decision = classifier.classify(reply, PRIOR_ANSWER)

        assert decision.intent is Intent.CONTINUE_THREAD
        assert decision.query == (
            "kyle validated autonomous driving software kyle experience"
        )
        assert decision.needs_retrieval

    def test_affirmative_without_prior_turn_asks_for_clarification(self, classifier):
        assert classifier.classify("yes").intent is Intent.LOW_SIGNAL

    def test_prior_turn_without_keywords_asks_what_to_expand(self, classifier):
        decision = classifier.classify("sure", "OK.")
        assert decision.intent is Intent.CLARIFY_THREAD

    def test_non_affirmative_ignores_prior_turn(self, classifier):
        decision = classifier.classify("What scripting languages does Kyle use?", PRIOR_ANSWER)

        assert decision.intent is Intent.RETRIEVE
        assert decision.query == "What scripting languages does Kyle use?"


@pytest.mark.parametrize(
    ("query", "kind"),
    [
        ("tell me a joke", OffTopic.JOKE),
        ("hello there", OffTopic.GREETING),
        ("thanks!", OffTopic.THANKS),
        ("how are you", OffTopic.HOW_ARE_YOU),
        ("who are you", OffTopic.PERSONA),
        ("are you a bot", OffTopic.PERSONA),
        ("what's your favorite recipe", OffTopic.COOKING),
        ("what is the meaning of life", OffTopic.MEANING),
        ("what's the weather like today", OffTopic.WEATHER),
    ],
)
def test_off_topic_kinds(classifier, query, kind):
    decision = classifier.classify(query)

    assert decision.intent is Intent.OFF_TOPIC
    assert decision.off_topic is kind


def test_weather_testing_is_not_small_talk():
    assert detect_off_topic("did he run weather tests in rain") is None


def test_off_topic_words_about_subject_are_retrieved(classifier):
    decision = classifier.classify("how does kyle handle weather in his field tests")
    assert decision.intent is Intent.RETRIEVE


class TestRetrievalFlags:
    """STAR, multi-part and short flags on retrieval decisions."""

    def test_star_request(self, classifier):
        decision = classifier.classify("Tell me about a time Kyle resolved a conflict")

        assert decision.intent is Intent.RETRIEVE
        assert decision.star
        assert not decision.multipart
        assert not decision.short

    def test_multipart_request(self, classifier):
        decision = classifier.classify("What tools does Kyle use and how does he test them?")

        assert decision.multipart
        assert not decision.star

    def test_short_request(self, classifier):
        assert classifier.classify("Kyle python skills").short

    @pytest.mark.parametrize(
        ("query", "expected"),
        [
            ("Walk me through his launch", True),
            ("Describe a time he improved coverage", True),
            ("What languages does he use", False),
        ],
    )
    def test_detect_star(self, query, expected):
        assert detect_star(query) is expected

    @pytest.mark.parametrize(
        ("query", "expected"),
        [
            ("What did he build? Who used it?", True),
            ("Does he also mentor engineers", True),
            ("What did he build", False),
        ],
    )
    def test_detect_multipart(self, query, expected):
        assert detect_multipart(query) is expected


@pytest.mark.parametrize(
    ("lower", "topic"),
    [
        ("sensor validation", "autonomous systems and perception testing"),
        ("his roadmap", "program and project execution"),
        ("client onboarding", "customer success and client-facing work"),
        ("annotation quality", "large scale training data and data quality programs"),
        ("express apis", "applied AI tools and scripting"),
        ("leadership style", DEFAULT_TOPIC),
    ],
)
def test_classify_topic(lower, topic):
    assert classify_topic(lower) == topic


def test_classifier_uses_configured_subject(retrieval_service):
    classifier = IntentClassifier("Dana", retrieval_service.keyword_vocabulary)

    assert classifier.classify("who is dana").intent is Intent.BIOGRAPHY
    assert classifier.classify("who is kyle").intent is not Intent.BIOGRAPHY
