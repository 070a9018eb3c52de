"""
Quality Scorer - Converts structural findings into a score, grade, issues,
suggestions and an assembled rewrite of the prompt.

Scoring model:
- Base 30 for any non-empty prompt
- Each present category adds weight x quality multiplier (weights sum to 60)
- Each issue deducts a penalty by severity
- +5 when more than half of the categories are present
- +5 when the word count is strictly between 30 and 200

A missing category is penalized twice, once as a zero contribution and once as
an explicit issue. Tests assert on these literal constants.
"""

import re
from typing import List, Dict, Optional

from .analysis_schema import (
    StructuralCategory,
    QualityTier,
    Severity,
    GENERAL_CATEGORY,
    PromptIssue,
    PromptSuggestion,
    SurfaceMetrics,
    AnalysisResult,
    Findings,
    empty_findings,
)
from .recognizers import QualitySignals, DEFAULT_SIGNALS
from .structural_analyzer import StructuralAnalyzer

BASE_SCORE = 30

CATEGORY_WEIGHTS: Dict[StructuralCategory, int] = {
    StructuralCategory.TASK: 15,
    StructuralCategory.ROLE: 10,
    StructuralCategory.INSTRUCTIONS: 10,
    StructuralCategory.PARAMETERS: 10,
    StructuralCategory.OUTPUT_FORMAT: 8,
    StructuralCategory.CONSTRAINTS: 7,
}

# In tenths so the arithmetic stays exact: 1.0, 0.7, 0.4
QUALITY_MULTIPLIERS_TENTHS: Dict[QualityTier, int] = {
    QualityTier.EXCELLENT: 10,
    QualityTier.GOOD: 7,
    QualityTier.WEAK: 4,
    QualityTier.NONE: 0,
}

ISSUE_PENALTIES: Dict[Severity, int] = {
    Severity.CRITICAL: 10,
    Severity.WARNING: 5,
    Severity.SUGGESTION: 2,
}

STRUCTURE_BONUS = 5
LENGTH_BONUS = 5
LENGTH_SWEET_SPOT = (30, 200)  # exclusive
TOO_SHORT_WORDS = 15
INSTRUCTIONS_SUGGESTION_MIN_CHARS = 30

GRADE_THRESHOLDS = [
    (95, "A+"),
    (85, "A"),
    (70, "B"),
    (55, "C"),
    (40, "D"),
]

_ENUMERATION = re.compile(r"\d+\.")


def grade_for_score(score: int) -> str:
    """Map a 0-100 score to a letter grade; boundary values take the higher grade."""
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return "F"


def _round_half_up_tenths(tenths: int) -> int:
    return (tenths + 5) // 10


class QualityScorer:
    """Scores a prompt from its structural findings."""

    def __init__(self, signals: QualitySignals = DEFAULT_SIGNALS):
        self.signals = signals

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def score(self, prompt_text: str, findings: Findings) -> AnalysisResult:
        """
        Build the complete AnalysisResult for a prompt.

        Args:
            prompt_text: Raw prompt text
            findings: Output of StructuralAnalyzer.analyze for the same text

        Returns:
            Immutable AnalysisResult
        """
        text = prompt_text.strip()
        if not text:
            return self.empty_result()

        metrics = self.calculate_surface_metrics(text, findings)
        issues = self.identify_issues(text, findings, metrics)
        suggestions = self.generate_suggestions(text, findings)
        score = self.calculate_score(findings, metrics, issues)

        return AnalysisResult(
            score=score,
            grade=grade_for_score(score),
            findings=findings,
            issues=issues,
            suggestions=suggestions,
            surface_metrics=metrics,
            improved_prompt=self.build_improved_prompt(text, findings, suggestions),
        )

    def empty_result(self) -> AnalysisResult:
        return AnalysisResult(
            score=0,
            grade="F",
            findings=empty_findings(),
            issues=[
                PromptIssue(
                    severity=Severity.CRITICAL,
                    category=GENERAL_CATEGORY,
                    message="No prompt provided",
                    impact="Write a prompt to get an analysis",
                )
            ],
            suggestions=[],
            surface_metrics=SurfaceMetrics(),
            improved_prompt=None,
        )

    # -------------------------------------------------------------------------
    # Metrics
    # -------------------------------------------------------------------------

    def calculate_surface_metrics(self, prompt_text: str, findings: Findings) -> SurfaceMetrics:
        word_count = len(prompt_text.split())
        present = sum(1 for f in findings.values() if f.present)
        has_structure = (
            "\n" in prompt_text
            or ":" in prompt_text
            or bool(_ENUMERATION.search(prompt_text))
        )

        return SurfaceMetrics(
            word_count=word_count,
            specificity_score=min(100, round(word_count / 50 * 100)),
            clarity_score=80 if has_structure else 50,
            structure_score=round(present / len(StructuralCategory) * 100),
        )

    # -------------------------------------------------------------------------
    # Issues and suggestions
    # -------------------------------------------------------------------------

    def identify_issues(
        self,
        prompt_text: str,
        findings: Findings,
        metrics: SurfaceMetrics,
    ) -> List[PromptIssue]:
        """Issues in fixed order: task, role, parameters, format, constraints, length, vagueness."""
        issues: List[PromptIssue] = []

        if not findings[StructuralCategory.TASK].present:
            issues.append(PromptIssue(
                severity=Severity.CRITICAL,
                category=StructuralCategory.TASK,
                message="No clear task identified",
                impact="The model does not know what you want it to do",
            ))

        if not findings[StructuralCategory.ROLE].present:
            issues.append(PromptIssue(
                severity=Severity.WARNING,
                category=StructuralCategory.ROLE,
                message="No role specified",
                impact="The model lacks a perspective and expertise to work from",
            ))

        if not findings[StructuralCategory.PARAMETERS].present:
            issues.append(PromptIssue(
                severity=Severity.WARNING,
                category=StructuralCategory.PARAMETERS,
                message="No parameters (length, tone, language)",
                impact="The model guesses format and scope",
            ))

        if not findings[StructuralCategory.OUTPUT_FORMAT].present:
            issues.append(PromptIssue(
                severity=Severity.SUGGESTION,
                category=StructuralCategory.OUTPUT_FORMAT,
                message="No output format specified",
                impact="The result may arrive in an unexpected format",
            ))

        if not findings[StructuralCategory.CONSTRAINTS].present:
            issues.append(PromptIssue(
                severity=Severity.SUGGESTION,
                category=StructuralCategory.CONSTRAINTS,
                message="No constraints given",
                impact="The model may include unwanted content",
            ))

        if metrics.word_count < TOO_SHORT_WORDS:
            issues.append(PromptIssue(
                severity=Severity.WARNING,
                category=GENERAL_CATEGORY,
                message="The prompt is very short",
                impact="Important context is probably missing",
            ))

        if self.signals.vague.search(prompt_text):
            issues.append(PromptIssue(
                severity=Severity.SUGGESTION,
                category=GENERAL_CATEGORY,
                message='Contains vague words such as "good", "something", "nice"',
                impact="The model interprets these subjectively",
            ))

        return issues

    def generate_suggestions(self, prompt_text: str, findings: Findings) -> List[PromptSuggestion]:
        suggestions: List[PromptSuggestion] = []

        if not findings[StructuralCategory.ROLE].present:
            suggestions.append(PromptSuggestion(
                category=StructuralCategory.ROLE,
                proposed_text="You are an experienced [expert in the field].",
                rationale="Gives the model a perspective to work from",
            ))

        if not findings[StructuralCategory.PARAMETERS].present:
            suggestions.append(PromptSuggestion(
                category=StructuralCategory.PARAMETERS,
                proposed_text="Max [number] words, [tone] tone, in [language].",
                rationale="Controls the length and style of the answer",
            ))

        if not findings[StructuralCategory.OUTPUT_FORMAT].present:
            suggestions.append(PromptSuggestion(
                category=StructuralCategory.OUTPUT_FORMAT,
                proposed_text="Format: [list/table/bullet points/prose].",
                rationale="Ensures the answer has the right structure",
            ))

        if not findings[StructuralCategory.CONSTRAINTS].present:
            suggestions.append(PromptSuggestion(
                category=StructuralCategory.CONSTRAINTS,
                proposed_text="Avoid: [clichés/generic answers/technical jargon].",
                rationale="Filters out unwanted content",
            ))

        if (
            not findings[StructuralCategory.INSTRUCTIONS].present
            and len(prompt_text) > INSTRUCTIONS_SUGGESTION_MIN_CHARS
        ):
            suggestions.append(PromptSuggestion(
                category=StructuralCategory.INSTRUCTIONS,
                proposed_text="Instructions:\n1. [Step one]\n2. [Step two]\n3. [Step three]",
                rationale="Numbered steps give clearer results",
            ))

        return suggestions

    # -------------------------------------------------------------------------
    # Score
    # -------------------------------------------------------------------------

    def calculate_score(
        self,
        findings: Findings,
        metrics: SurfaceMetrics,
        issues: List[PromptIssue],
    ) -> int:
        tenths = BASE_SCORE * 10

        for category, finding in findings.items():
            if finding.present:
                tenths += CATEGORY_WEIGHTS[category] * QUALITY_MULTIPLIERS_TENTHS[finding.quality_tier]

        for issue in issues:
            tenths -= ISSUE_PENALTIES[issue.severity] * 10

        present = sum(1 for f in findings.values() if f.present)
        if present / len(StructuralCategory) > 0.5:
            tenths += STRUCTURE_BONUS * 10

        low, high = LENGTH_SWEET_SPOT
        if low < metrics.word_count < high:
            tenths += LENGTH_BONUS * 10

        return max(0, min(100, _round_half_up_tenths(tenths)))

    # -------------------------------------------------------------------------
    # Rewrite assembly
    # -------------------------------------------------------------------------

    def build_improved_prompt(
        self,
        prompt_text: str,
        findings: Findings,
        suggestions: List[PromptSuggestion],
    ) -> Optional[str]:
        """
        Deterministic rewrite: role prefix, original text, then missing clauses.

        Returns None when there are no suggestions, meaning the prompt is
        already adequate.
        """
        if not suggestions:
            return None

        parts: List[str] = []

        if not findings[StructuralCategory.ROLE].present:
            parts.append("You are an experienced expert in the relevant field.")

        parts.append(prompt_text.strip())

        if not findings[StructuralCategory.PARAMETERS].present:
            parts.append("Keep the answer concise and professional.")

        if not findings[StructuralCategory.OUTPUT_FORMAT].present:
            parts.append("Structure the answer clearly with headings where applicable.")

        if not findings[StructuralCategory.CONSTRAINTS].present:
            parts.append("Avoid generic phrases and clichés.")

        return re.sub(r"\s+", " ", " ".join(parts)).strip()


def analyze_prompt(
    prompt_text: str,
    analyzer: Optional[StructuralAnalyzer] = None,
    scorer: Optional[QualityScorer] = None,
) -> AnalysisResult:
    """Run the analyzer and scorer over a prompt."""
    analyzer = analyzer or StructuralAnalyzer()
    scorer = scorer or QualityScorer(analyzer.signals)
    return scorer.score(prompt_text, analyzer.analyze(prompt_text))


def format_analysis_report(result: AnalysisResult) -> str:
    """Format an AnalysisResult as readable text."""
    lines = [
        "=" * 70,
        "PROMPT QUALITY REPORT",
        "=" * 70,
        f"Score: {result.score}/100  Grade: {result.grade}",
        f"Words: {result.surface_metrics.word_count}",
        "",
        "-" * 70,
        "STRUCTURE",
        "-" * 70,
    ]

    for category in StructuralCategory:
        finding = result.findings[category]
        status = "✓" if finding.present else "✗"
        detail = f' "{finding.matched_span[:40]}"' if finding.matched_span else ""
        lines.append(f"  {status} {category.value:14} {finding.quality_tier.value:10}{detail}")

    if result.issues:
        lines.extend(["", "-" * 70, "ISSUES", "-" * 70])
        icons = {Severity.CRITICAL: "🔴", Severity.WARNING: "🟠", Severity.SUGGESTION: "🟡"}
        for issue in result.issues:
            lines.append(f"  {icons[issue.severity]} {issue.message} ({issue.impact})")

    if result.suggestions:
        lines.extend(["", "-" * 70, "SUGGESTIONS", "-" * 70])
        for i, suggestion in enumerate(result.suggestions, 1):
            first_line = suggestion.proposed_text.splitlines()[0]
            lines.append(f"  {i}. [{suggestion.category.value}] {first_line}")

    if result.improved_prompt:
        lines.extend(["", "-" * 70, "IMPROVED PROMPT", "-" * 70, result.improved_prompt])

    lines.append("")
    lines.append("=" * 70)

    return "\n".join(lines)
