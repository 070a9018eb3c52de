"""
Data models for prompt structure analysis.

Defines the six structural categories a well-formed prompt is expected to
populate, the per-category findings, and the aggregated AnalysisResult that the
scorer returns to callers.
"""

from enum import Enum
from types import MappingProxyType
from typing import List, Dict, Mapping, Optional, Any, Sequence, Union
from dataclasses import dataclass, field


class StructuralCategory(str, Enum):
    """The six structural role slots. Values are the serialized keys."""
    TASK = "task"
    ROLE = "role"
    INSTRUCTIONS = "instructions"
    PARAMETERS = "parameters"
    OUTPUT_FORMAT = "outputFormat"
    CONSTRAINTS = "constraints"


class QualityTier(str, Enum):
    NONE = "none"
    WEAK = "weak"
    GOOD = "good"
    EXCELLENT = "excellent"


class Severity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    SUGGESTION = "suggestion"


# Issues that are not tied to a single structural slot
GENERAL_CATEGORY = "general"

IssueCategory = Union[StructuralCategory, str]


def _category_key(category: IssueCategory) -> str:
    if isinstance(category, StructuralCategory):
        return category.value
    return category


@dataclass(frozen=True)
class CategoryFinding:
    """Result of recognizing one structural category in a prompt."""
    category: StructuralCategory
    present: bool = False
    quality_tier: QualityTier = QualityTier.NONE
    matched_span: Optional[str] = None

    def __post_init__(self):
        if self.quality_tier != QualityTier.NONE and not self.present:
            raise ValueError(
                f"{self.category.value}: quality tier {self.quality_tier.value} requires present=True"
            )

    @classmethod
    def absent(cls, category: StructuralCategory) -> "CategoryFinding":
        return cls(category=category)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "present": self.present,
            "qualityTier": self.quality_tier.value,
            "matchedSpan": self.matched_span,
        }


@dataclass(frozen=True)
class PromptIssue:
    """An actionable problem found in a prompt."""
    severity: Severity
    category: IssueCategory
    message: str
    impact: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "severity": self.severity.value,
            "category": _category_key(self.category),
            "message": self.message,
            "impact": self.impact,
        }


@dataclass(frozen=True)
class PromptSuggestion:
    """A fill-in-the-blank clause proposed for a missing category."""
    category: StructuralCategory
    proposed_text: str
    rationale: str
    current: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category.value,
            "current": self.current,
            "proposedText": self.proposed_text,
            "rationale": self.rationale,
        }


@dataclass(frozen=True)
class SurfaceMetrics:
    word_count: int = 0
    specificity_score: int = 0  # 0-100
    clarity_score: int = 0  # 0-100
    structure_score: int = 0  # 0-100

    def to_dict(self) -> Dict[str, int]:
        return {
            "wordCount": self.word_count,
            "specificityScore": self.specificity_score,
            "clarityScore": self.clarity_score,
            "structureScore": self.structure_score,
        }


Findings = Mapping[StructuralCategory, CategoryFinding]


def empty_findings() -> Dict[StructuralCategory, CategoryFinding]:
    """All six categories, all absent."""
    return {category: CategoryFinding.absent(category) for category in StructuralCategory}


@dataclass(frozen=True)
class AnalysisResult:
    """
    Complete analysis of a single prompt.

    Containers are frozen on construction: findings becomes a read-only
    mapping, issues and suggestions become tuples.
    """
    score: int  # 0-100
    grade: str  # "A+", "A", "B", "C", "D", "F"
    findings: Findings
    issues: Sequence[PromptIssue] = ()
    suggestions: Sequence[PromptSuggestion] = ()
    surface_metrics: SurfaceMetrics = field(default_factory=SurfaceMetrics)
    improved_prompt: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "findings", MappingProxyType(dict(self.findings)))
        object.__setattr__(self, "issues", tuple(self.issues))
        object.__setattr__(self, "suggestions", tuple(self.suggestions))

    @property
    def present_categories(self) -> List[StructuralCategory]:
        return [c for c in StructuralCategory if self.findings[c].present]

    @property
    def missing_categories(self) -> List[StructuralCategory]:
        return [c for c in StructuralCategory if not self.findings[c].present]

    @property
    def critical_issues(self) -> List[PromptIssue]:
        return [i for i in self.issues if i.severity == Severity.CRITICAL]

    def to_dict(self) -> Dict[str, Any]:
        """Flat JSON-compatible form; all six finding keys are always present."""
        return {
            "score": self.score,
            "grade": self.grade,
            "findings": {
                category.value: self.findings[category].to_dict()
                for category in StructuralCategory
            },
            "issues": [issue.to_dict() for issue in self.issues],
            "suggestions": [s.to_dict() for s in self.suggestions],
            "surfaceMetrics": self.surface_metrics.to_dict(),
            "improvedPrompt": self.improved_prompt,
        }
