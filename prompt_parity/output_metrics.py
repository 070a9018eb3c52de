"""
Crude, explainable output metrics computed from generated text only.

These are a fast, reproducible proxy for response quality, not a semantic
evaluation.
"""

import re

from .execution_schema import OutputMetrics

HEADING_WEIGHT = 10
BULLET_WEIGHT = 3
NUMBERED_WEIGHT = 3
CODE_FENCE_WEIGHT = 10
TABLE_ROW_WEIGHT = 15
CHECKBOX_WEIGHT = 5
TECHNICAL_TERM_WEIGHT = 5
CHARS_PER_SPECIFICITY_POINT = 50

_HEADING = re.compile(r"^#{1,3}\s", re.MULTILINE)
_BULLET = re.compile(r"^[ \t]*[-*]\s", re.MULTILINE)
_NUMBERED = re.compile(r"^\d+\.\s", re.MULTILINE)
_CODE_FENCE = re.compile(r"```")
_TABLE_ROW = re.compile(r"\|.+\|")
_CHECKBOX = re.compile(r"\[[ x]\]")
_TECHNICAL_TERMS = re.compile(
    r"\b(API|database|schema|endpoint|module|component|TypeScript|function|class|interface"
    r"|implementation|architecture|deployment|testing)\b",
    re.IGNORECASE,
)


def _count(pattern: re.Pattern, text: str) -> int:
    return len(pattern.findall(text))


def structure_score(text: str) -> int:
    score = (
        _count(_HEADING, text) * HEADING_WEIGHT
        + _count(_BULLET, text) * BULLET_WEIGHT
        + _count(_NUMBERED, text) * NUMBERED_WEIGHT
        + _count(_CODE_FENCE, text) * CODE_FENCE_WEIGHT
        + _count(_TABLE_ROW, text) * TABLE_ROW_WEIGHT
        + _count(_CHECKBOX, text) * CHECKBOX_WEIGHT
    )
    return min(100, score)


def specificity_score(text: str) -> int:
    score = len(text) // CHARS_PER_SPECIFICITY_POINT + _count(_TECHNICAL_TERMS, text) * TECHNICAL_TERM_WEIGHT
    return min(100, score)


def calculate_output_metrics(text: str) -> OutputMetrics:
    return OutputMetrics(
        length=len(text),
        structure_score=structure_score(text),
        specificity_score=specificity_score(text),
    )
