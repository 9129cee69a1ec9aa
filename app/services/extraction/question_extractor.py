"""
Recovers a single interview question from raw model output.

The model is prompted to return ``{"question": "..."}`` but is not trusted to
comply: it may wrap the JSON in prose, answer with a numbered list, prefix a
"Question 1:" label or join several questions on one line. ``extract_question``
tries the structured JSON path first and falls back to line heuristics.

The module is pure: no I/O, no logging, no shared state.
"""
import json
import re
from typing import Callable, List, NamedTuple, Optional

# Whole-text enumeration prefixes ("1. ", "2) ", "Question 3: ")
LEADING_NUMBER_PATTERN = re.compile(r"^\d+[.)]\s*")
LEADING_QUESTION_NUMBER_PATTERN = re.compile(r"^Question\s+\d+[:\-\s]*")

# Per-line prefixes
LINE_NUMBER_PATTERN = re.compile(r"^\d+[.)]\s*")
LINE_BULLET_PATTERN = re.compile(r"^(?:\d+[.)]\s*|[-*•]\s+)")
LINE_LABEL_PATTERN = re.compile(r"^(?:question|q|ask)\b\s*\d*\s*[:\-.)]?\s*", re.IGNORECASE)

QUESTION_WORD_PATTERN = re.compile(
    r"\b(what|how|why|explain|describe|define|implement|compare|difference|when|where|which)\b",
    re.IGNORECASE,
)

LEADING_QUESTION_MARKS = re.compile(r"^[?\s]+")

MIN_SUBSTANTIAL_LENGTH = 5


class CandidateRule(NamedTuple):
    """A named line selector; ``select`` returns a line or ``None``."""
    name: str
    select: Callable[[List[str]], Optional[str]]


def _first_with_question_mark(lines: List[str]) -> Optional[str]:
    return next((line for line in lines if "?" in line), None)


def _first_with_question_word(lines: List[str]) -> Optional[str]:
    return next((line for line in lines if QUESTION_WORD_PATTERN.search(line)), None)


def _first_substantial_line(lines: List[str]) -> Optional[str]:
    for line in lines:
        stripped = LINE_NUMBER_PATTERN.sub("", line)
        if len(stripped) > MIN_SUBSTANTIAL_LENGTH:
            return stripped
    return None


def _first_line(lines: List[str]) -> Optional[str]:
    return lines[0] if lines else None


# Evaluated in order, first match wins.
CANDIDATE_RULES = (
    CandidateRule("question_mark", _first_with_question_mark),
    CandidateRule("question_word", _first_with_question_word),
    CandidateRule("substantial_line", _first_substantial_line),
    CandidateRule("first_line", _first_line),
)


def _question_from_json(raw: str) -> Optional[str]:
    """Returns the trimmed ``question`` field of the first JSON object in ``raw``."""
    # First "{" to last "}", same span as a greedy \{.*\} match
    start_idx = raw.find("{")
    end_idx = raw.rfind("}")
    if start_idx == -1 or end_idx <= start_idx:
        return None
    try:
        parsed = json.loads(raw[start_idx:end_idx + 1])
    except (ValueError, RecursionError):
        return None
    if not isinstance(parsed, dict):
        return None
    question = parsed.get("question")
    if isinstance(question, str) and question.strip():
        return question.strip()
    return None


def split_candidate_lines(text: str) -> List[str]:
    """Splits on any newline convention, trims and drops empty lines."""
    return [line.strip() for line in text.splitlines() if line.strip()]


def select_candidate_line(lines: List[str]) -> str:
    """Applies ``CANDIDATE_RULES`` in order; empty string when nothing matches."""
    for rule in CANDIDATE_RULES:
        candidate = rule.select(lines)
        if candidate is not None:
            return candidate
    return ""


def normalize_line(line: str) -> str:
    """Strips a leading number/bullet and a Question/Q/Ask label."""
    line = LINE_BULLET_PATTERN.sub("", line.strip())
    return LINE_LABEL_PATTERN.sub("", line).strip()


def keep_first_question(text: str) -> str:
    """
    Keeps only the first question of a line and guarantees a single trailing '?'.

    Text before the first '?' wins even when a legitimate question embeds a
    quoted '?' (e.g. ``He asked "why?" - how would you respond?``).
    """
    text = LEADING_QUESTION_MARKS.sub("", text).strip()
    if "?" in text:
        text = text.split("?", 1)[0].strip()
    return f"{text}?" if text else ""


def extract_question(raw: Optional[str]) -> Optional[str]:
    """
    Extracts one well-formed interview question from raw model output.

    Args:
        raw: Verbatim model text. ``None`` is treated as empty.

    Returns:
        The question, trimmed and ending in exactly one '?', or ``None`` when
        no usable question could be isolated.
    """
    if not isinstance(raw, str):
        return None
    raw = raw.strip()

    structured = _question_from_json(raw)
    if structured is not None:
        return keep_first_question(structured) or None

    text = LEADING_NUMBER_PATTERN.sub("", raw, count=1)
    text = LEADING_QUESTION_NUMBER_PATTERN.sub("", text, count=1).strip()

    candidate = normalize_line(select_candidate_line(split_candidate_lines(text)))
    return keep_first_question(candidate) or None
