"""Rule-based intent classification.

Classification is a pure function of the normalized query, the caller's
previous answer and the knowledge-base keyword vocabulary. Rules are an
ordered table of ``(intent, predicate)`` pairs; the first match wins because
categories overlap in surface form. The text produced for each intent lives in
``agentk.responses``.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum

from .config import config
from .normalizer import extract_keywords


class Intent(Enum):
    HOSTILE = "hostile"
    EMOTIONAL = "emotional"
    BIOGRAPHY = "biography"
    FULL_SUMMARY = "full_summary"
    CAPABILITY = "capability"
    COMPENSATION = "compensation"
    KNOWLEDGE_SCOPE = "knowledge_scope"
    ACCOMPLISHMENTS = "accomplishments"
    PROCESS = "process"
    WEAKNESS = "weakness"
    CHALLENGE = "challenge"
    LOW_SIGNAL = "low_signal"
    CONTINUE_THREAD = "continue_thread"
    CLARIFY_THREAD = "clarify_thread"
    OFF_TOPIC = "off_topic"
    RETRIEVE = "retrieve"


class OffTopic(Enum):
    JOKE = "joke"
    GREETING = "greeting"
    THANKS = "thanks"
    HOW_ARE_YOU = "how_are_you"
    COOKING = "cooking"
    MEANING = "meaning"
    WEATHER = "weather"
    PERSONA = "persona"


@dataclass(frozen=True)
class IntentDecision:
    """Outcome of classification.

    ``query`` is what retrieval should search for; it differs from the input
    only when an affirmative reply is rewritten to continue the prior thread.
    """

    intent: Intent
    query: str
    topic: str | None = None
    off_topic: OffTopic | None = None
    star: bool = False
    multipart: bool = False
    short: bool = False

    @property
    def needs_retrieval(self) -> bool:
        return self.intent in {Intent.RETRIEVE, Intent.CONTINUE_THREAD}


HOSTILE_RE = re.compile(
    r"\b(suck|stupid|dumb|idiot|useless|trash|terrible|awful|horrible|crap|wtf|"
    r"shit|fuck|fucking|bullshit|garbage|bad ai|you suck)\b"
)
EMOTIONAL_RE = re.compile(
    r"\b(frustrated|frustrating|confused|confusing|annoyed|annoying|overwhelmed|"
    r"stressed|stressing|lost|stuck|irritated)\b"
)
FULL_SUMMARY_RE = re.compile(
    r"\b(tell me everything|tell me all you know|everything you know|all info|"
    r"all information|all you have on \w+|all you know about \w+)\b"
)
CAPABILITY_RE = re.compile(
    r"\b(can he|is he able|could he|would he be able|handle this|take this on|"
    r"perform this role|do this role|could he do it)\b"
)
COMPENSATION_RE = re.compile(
    r"\b(salary|salaries|compensation|comp|pay|expected pay|pay range|"
    r"salary range|pay expectations|comp expectations|salary expectations)\b"
)
KNOWLEDGE_SCOPE_RE = re.compile(
    r"\b(what do you know|what all do you know|your knowledge|what info do you have)\b"
)
ACCOMPLISHMENTS_RE = re.compile(
    r"\b(win|wins|key wins|accomplish|accomplishment|accomplishments|achievement|"
    r"achievements|key results|notable)\b"
)
PROCESS_RE = re.compile(
    r"\b(sop|sops|standard operating|process|processes|workflow|workflows|"
    r"procedure|procedures)\b"
)
WEAKNESS_RE = re.compile(
    r"\b(weak|weakness|weaknesses|weakest|failure|failures|mistake|mistakes|"
    r"shortcoming|shortcomings)\b"
)
CHALLENGE_RE = re.compile(
    r"\b(your move|same energy|prove it|go on then|what you got|come on)\b"
)
AFFIRMATIVE_RE = re.compile(
    r"^(y|yes|yeah|yep|yup|sure|ok|okay|sounds good|go ahead|mhm|please do)[\s.!]*$"
)
PUNCTUATION_ONLY_RE = re.compile(r"^[\s?.!]*$")

VAGUE_WORDS = frozenset({
    "huh", "what", "why", "ok", "k", "kk", "lol", "lmao", "idk", "iono",
    "hmmm", "hmm", "???", "??", "?", "uh", "umm", "explain", "explain?",
    "more", "continue", "whatever",
})
MIN_SIGNAL_CHARS = 3
SHORT_QUERY_TOKENS = 3

STAR_TRIGGERS = (
    "tell me about a time", "describe a time", "give me an example",
    "star example", "challenge", "overcame", "difficult situation",
    "accomplishment", "achievement", "led a project", "managed a project",
    "handled", "resolved", "improved", "time you", "time when", "time he",
    "situation where", "walk me through", "walk me thru", "walk through",
    "walk thru", "walk me step by step",
)
MULTIPART_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"\band\b.*\?",
        r"\bor\b.*\?",
        r"\?.*\?",
        r"\balso\b",
        r"\bplus\b",
        r"\badditionally\b",
        r"what.*and.*how",
        r"why.*and.*how",
        r"how.*and.*what",
    )
]

_TOPICS: list[tuple[tuple[str, ...], str]] = [
    (
        ("autonomous", "autopilot", "perception", "sensor"),
        "autonomous systems and perception testing",
    ),
    (
        ("program", "project", "execution", "roadmap"),
        "program and project execution",
    ),
    (
        ("customer", "client", "success", "account"),
        "customer success and client-facing work",
    ),
    (
        ("data", "label", "annotation", "training data"),
        "large scale training data and data quality programs",
    ),
    (
        ("ai", "agent", "script", "node", "express"),
        "applied AI tools and scripting",
    ),
]
DEFAULT_TOPIC = (
    "his work in autonomous systems, validation, program management, "
    "SaaS workflows, and applied AI tools"
)


def classify_topic(lower: str) -> str:
    """Coarse topic of a lowercased query, used to parameterize answers."""
    for needles, topic in _TOPICS:
        if any(needle in lower for needle in needles):
            return topic
    return DEFAULT_TOPIC


def detect_star(query: str) -> bool:
    lower = query.lower()
    return any(trigger in lower for trigger in STAR_TRIGGERS)


def detect_multipart(query: str) -> bool:
    return any(pattern.search(query) for pattern in MULTIPART_PATTERNS)


_GREETING_RE = re.compile(r"^(hi|hey|hello|sup|what'?s up|howdy)\b")
_HOW_ARE_YOU_RE = re.compile(r"how are you|how'?re you|how r u")
_PERSONA_RE = re.compile(
    r"\b(who are you|what are you|your name|are you (?:a |an )?(?:bot|ai|robot|human|real))\b"
)
_REAL_WEATHER_RE = re.compile(r"\b(weather|temperature|rain|snow|hot|cold|forecast)\b")
_WEATHER_TESTING_RE = re.compile(r"\b(test|testing|scenario|weather tests)\b")


def detect_off_topic(lower: str) -> OffTopic | None:
    """Recognize small talk that the knowledge base cannot answer."""
    if "joke" in lower or "funny" in lower:
        return OffTopic.JOKE
    if _GREETING_RE.search(lower):
        return OffTopic.GREETING
    if "thank" in lower:
        return OffTopic.THANKS
    if _HOW_ARE_YOU_RE.search(lower):
        return OffTopic.HOW_ARE_YOU
    if _PERSONA_RE.search(lower):
        return OffTopic.PERSONA
    if any(word in lower for word in ("cook", "recipe", "food")):
        return OffTopic.COOKING
    if "meaning of life" in lower or "purpose of life" in lower:
        return OffTopic.MEANING
    if _REAL_WEATHER_RE.search(lower) and not _WEATHER_TESTING_RE.search(lower):
        return OffTopic.WEATHER
    return None


@dataclass(frozen=True)
class _Query:
    text: str
    lower: str
    prior: str
    about_subject: bool


Predicate = Callable[[_Query], bool]


class IntentClassifier:
    """Ordered cascade of rule-based intent detectors."""

    def __init__(
        self,
        subject_name: str | None = None,
        vocabulary: Iterable[str] = (),
    ) -> None:
        """Initialize the classifier.

        Args:
            subject_name: Name of the person being described.
            vocabulary: Knowledge-base keywords; a one-word query that hits
                one of them is treated as a real question.
        """
        self.subject_name = subject_name or config.SUBJECT_NAME
        name = re.escape(self.subject_name.lower())
        self._subject_re = re.compile(rf"\b{name}\b")
        self._biography_re = re.compile(
            rf"^(who is (?:{name}|he)|tell me about {name}|what does {name} do|"
            rf"(?:what is )?{name}'?s? background|{name}'?s? experience)[\s?.!]*$"
        )
        self._capability_re = re.compile(
            rf"\b(is {name} able|can {name})\b|{CAPABILITY_RE.pattern}"
        )
        self.vocabulary = frozenset(v.lower() for v in vocabulary if v)

        self.rules: list[tuple[Intent, Predicate]] = [
            (Intent.HOSTILE, lambda q: bool(HOSTILE_RE.search(q.lower))),
            (Intent.EMOTIONAL, lambda q: bool(EMOTIONAL_RE.search(q.lower))),
            (Intent.BIOGRAPHY, lambda q: bool(self._biography_re.search(q.lower))),
            (Intent.FULL_SUMMARY, lambda q: bool(FULL_SUMMARY_RE.search(q.lower))),
            (Intent.CAPABILITY, lambda q: bool(self._capability_re.search(q.lower))),
            (Intent.COMPENSATION, lambda q: bool(COMPENSATION_RE.search(q.lower))),
            (
                Intent.KNOWLEDGE_SCOPE,
                lambda q: bool(KNOWLEDGE_SCOPE_RE.search(q.lower)),
            ),
            (
                Intent.ACCOMPLISHMENTS,
                lambda q: bool(ACCOMPLISHMENTS_RE.search(q.lower)),
            ),
            (Intent.PROCESS, lambda q: bool(PROCESS_RE.search(q.lower))),
            (Intent.WEAKNESS, lambda q: bool(WEAKNESS_RE.search(q.lower))),
            (Intent.CHALLENGE, lambda q: bool(CHALLENGE_RE.search(q.lower))),
            (Intent.LOW_SIGNAL, self._is_low_signal),
            (
                Intent.CONTINUE_THREAD,
                lambda q: bool(q.prior) and bool(AFFIRMATIVE_RE.match(q.lower)),
            ),
            (
                Intent.OFF_TOPIC,
                lambda q: not q.about_subject and detect_off_topic(q.lower) is not None,
            ),
        ]

    def _is_low_signal(self, query: _Query) -> bool:
        lower = query.lower
        if query.prior and AFFIRMATIVE_RE.match(lower):
            return False
        if lower in VAGUE_WORDS or PUNCTUATION_ONLY_RE.match(lower):
            return True
        # small talk such as "hi" is answered by the off-topic rule instead
        if not query.about_subject and detect_off_topic(lower) is not None:
            return False
        if len(re.sub(r"\W", "", lower)) < MIN_SIGNAL_CHARS:
            return True

        tokens = lower.split()
        if len(tokens) != 1 or query.about_subject:
            return False
        token = tokens[0].strip("?.!,;:")
        return not any(token in keyword for keyword in self.vocabulary)

    def classify(self, normalized_query: str, prior_turn: str = "") -> IntentDecision:
        """Determine the response strategy for a query.

        Returns:
            The first matching decision, or a RETRIEVE decision with its
            STAR / multi-part / short flags set.
        """
        text = (normalized_query or "").strip()
        lower = text.lower()
        query = _Query(
            text=text,
            lower=lower,
            prior=(prior_turn or "").strip(),
            about_subject=bool(self._subject_re.search(lower)),
        )

        for intent, predicate in self.rules:
            if predicate(query):
                return self._decide(intent, query)

        return self._retrieve(text)

    def _decide(self, intent: Intent, query: _Query) -> IntentDecision:
        if intent is Intent.CAPABILITY:
            return IntentDecision(
                intent=intent, query=query.text, topic=classify_topic(query.lower)
            )
        if intent is Intent.OFF_TOPIC:
            return IntentDecision(
                intent=intent, query=query.text, off_topic=detect_off_topic(query.lower)
            )
        if intent is Intent.CONTINUE_THREAD:
            keywords = extract_keywords(query.prior)
            if not keywords:
                return IntentDecision(intent=Intent.CLARIFY_THREAD, query=query.text)
            rewritten = " ".join(keywords) + f" {self.subject_name.lower()} experience"
            return IntentDecision(intent=intent, query=rewritten)
        return IntentDecision(intent=intent, query=query.text)

    @staticmethod
    def _retrieve(text: str) -> IntentDecision:
        return IntentDecision(
            intent=Intent.RETRIEVE,
            query=text,
            star=detect_star(text),
            multipart=detect_multipart(text),
            short=len(text.split()) <= SHORT_QUERY_TOKENS,
        )
