"""Extraction of a single interview question from raw model output."""

from .question_extractor import (
    CANDIDATE_RULES,
    CandidateRule,
    extract_question,
    keep_first_question,
    normalize_line,
    select_candidate_line,
    split_candidate_lines,
)

__all__ = [
    "CANDIDATE_RULES",
    "CandidateRule",
    "extract_question",
    "keep_first_question",
    "normalize_line",
    "select_candidate_line",
    "split_candidate_lines",
]
