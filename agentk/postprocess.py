"""Post-processing of generated answers.

Three passes run in a fixed order:

1. ``enforce_voice`` rewrites first-person statements into third person about
   the subject. Lines that mention the assistant persona are left alone, since
   the persona is the only party allowed to speak as "I".
2. ``strip_phrases`` removes banter, filler and meta artifacts. It runs after
   voice enforcement so its patterns only need to know the third-person forms.
3. ``format_paragraphs`` normalizes line breaks, list markers and paragraphs.

Every pass returns falsy input unchanged and never raises.
"""

from __future__ import annotations

import re

from .config import config

_APOS = "['’]"

# "Phase I", "Tier I" and the like are numerals, not the pronoun
_NUMBERED_NOUNS = (
    "Phase",
    "Tier",
    "Series",
    "Stage",
    "Level",
    "Class",
    "Type",
    "Part",
    "Grade",
    "Gen",
    "Step",
    "Round",
    "Chapter",
    "Volume",
    "War",
)
_NOT_A_NUMERAL = "".join(rf"(?<!\b{noun} )" for noun in _NUMBERED_NOUNS)

# Contracted and multi-word forms must run before the bare pronoun rules,
# otherwise "I'm" would become "he'm".
VOICE_RULES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(rf"\bI{_APOS}m\b", re.IGNORECASE), "he is"),
    (re.compile(rf"\bI{_APOS}ve\b", re.IGNORECASE), "he has"),
    (re.compile(rf"\bI{_APOS}d\b", re.IGNORECASE), "he would"),
    (re.compile(rf"\bI{_APOS}ll\b", re.IGNORECASE), "he will"),
    (re.compile(r"\bI am\b"), "he is"),
    (re.compile(r"\bI have\b"), "he has"),
    (re.compile(r"\bI was\b"), "he was"),
    (re.compile(r"\bI will\b"), "he will"),
    (re.compile(r"\bI would\b"), "he would"),
    (re.compile(r"\bmyself\b", re.IGNORECASE), "himself"),
    (re.compile(rf"(?<!/){_NOT_A_NUMERAL}\bI\b(?![.'’/])"), "he"),
    (re.compile(r"\bmy\b", re.IGNORECASE), "his"),
    (re.compile(r"\bmine\b", re.IGNORECASE), "his"),
    (re.compile(r"\bme\b", re.IGNORECASE), "him"),
]

_SENTENCE_OPENERS = set(".!?:\"“(*•-")


def _at_sentence_start(line: str, position: int) -> bool:
    prefix = line[:position].rstrip()
    return not prefix or prefix[-1] in _SENTENCE_OPENERS


def _apply_rule(line: str, pattern: re.Pattern[str], replacement: str) -> str:
    def _replace(match: re.Match[str]) -> str:
        if _at_sentence_start(line, match.start()):
            return replacement[0].upper() + replacement[1:]
        return replacement

    return pattern.sub(_replace, line)


def _rewrite_line(line: str) -> str:
    for pattern, replacement in VOICE_RULES:
        line = _apply_rule(line, pattern, replacement)
    return line


def enforce_voice(text: str, persona_name: str | None = None) -> str:
    """Rewrite first person into third person, line by line."""
    if not text:
        return text
    persona = (persona_name or config.PERSONA_NAME).lower()
    return "\n".join(
        line if persona and persona in line.lower() else _rewrite_line(line)
        for line in text.split("\n")
    )


_TAUNT_RE = re.compile(
    r"\b(?:same energy|your move|go on then|what (?:have )?you got)\b[.!?]*",
    re.IGNORECASE,
)
_FILLER_RES = [
    re.compile(r"\bhe is here\b[.!]*\s*", re.IGNORECASE),
    re.compile(r"\btry asking\b[^.!?\n]*[.!?]?", re.IGNORECASE),
    re.compile(r"\bfeel free to ask (?:him|me) anything\b[^.!?\n]*[.!?]?", re.IGNORECASE),
    re.compile(r"\bas an ai(?: language model| assistant)?\b,?\s*", re.IGNORECASE),
]
_SELF_DESCRIPTION_RE = re.compile(
    r"\bhe is (?:an? |the )?"
    r"(?:(?:ai|virtual|digital) assistant|chatbot|(?:ai )?language model)\b"
    r"[^.!?\n]*[.!?]?",
    re.IGNORECASE,
)
_DOUBLE_SPACE_RE = re.compile(r"(?<=\S)[ \t]{2,}")
_SPACE_BEFORE_PUNCT_RE = re.compile(r"[ \t]+([,.!?;:])")
_TRAILING_SPACE_RE = re.compile(r"[ \t]+$", re.MULTILINE)


def canonical_self_description(subject_name: str | None = None) -> str:
    subject = subject_name or config.SUBJECT_NAME
    return f"This assistant describes {subject}'s professional background."


def strip_phrases(text: str, subject_name: str | None = None) -> str:
    """Remove banter and meta filler; repair broken self-references."""
    if not text:
        return text
    subject = subject_name or config.SUBJECT_NAME
    replacement = canonical_self_description(subject)

    cleaned = _TAUNT_RE.sub("", text)
    for pattern in _FILLER_RES:
        cleaned = pattern.sub("", cleaned)
    cleaned = _SELF_DESCRIPTION_RE.sub(replacement, cleaned)
    cleaned = re.sub(
        rf"\bhe is {re.escape(subject)}\b[.!]?", replacement, cleaned, flags=re.IGNORECASE
    )

    cleaned = _DOUBLE_SPACE_RE.sub(" ", cleaned)
    cleaned = _SPACE_BEFORE_PUNCT_RE.sub(r"\1", cleaned)
    return _TRAILING_SPACE_RE.sub("", cleaned).strip()


_LIST_MARKER_RE = re.compile(r"([.!?:])[ \t]+(?=(?:[-*•]|\d{1,2}[.)])[ \t])")
_SENTENCE_BREAK_RE = re.compile(r"([.?!])[ \t]+(?=[A-Z])")
_EXCESS_BREAKS_RE = re.compile(r"\n{3,}")


def _sentence_break(match: re.Match[str]) -> str:
    # "1. First" is a list marker, not the end of a sentence
    line_start = match.string.rfind("\n", 0, match.start()) + 1
    if match.string[line_start : match.start()].strip().isdigit():
        return match.group(0)
    return f"{match.group(1)}\n\n"


def format_paragraphs(text: str) -> str:
    """Normalize line endings, list markers and paragraph breaks."""
    if not text:
        return text
    formatted = text.replace("\r\n", "\n").replace("\r", "\n")
    formatted = _TRAILING_SPACE_RE.sub("", formatted)
    formatted = _LIST_MARKER_RE.sub(r"\1\n", formatted)
    formatted = _SENTENCE_BREAK_RE.sub(_sentence_break, formatted)
    formatted = _EXCESS_BREAKS_RE.sub("\n\n", formatted)
    return formatted.strip()


def sanitize(
    text: str,
    subject_name: str | None = None,
    persona_name: str | None = None,
) -> str:
    """Run voice enforcement, phrase stripping and paragraph formatting."""
    if not text:
        return text
    voiced = enforce_voice(text, persona_name)
    return format_paragraphs(strip_phrases(voiced, subject_name))
