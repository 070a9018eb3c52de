"""
Data models for dual-path benchmark execution.

An ExecutionOutcome is produced once per path per benchmark run and never
mutated afterwards. A ParityVerdict is derived purely from two outcomes.
"""

from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Any, Sequence
from dataclasses import dataclass, field


class PathKind(str, Enum):
    ORIGINAL = "original"
    ENHANCED = "enhanced"


@dataclass(frozen=True)
class AppliedProfile:
    """Parameters actually sent to the model for one path."""
    system_instructions: Optional[str]
    temperature: float
    nucleus_p: float
    max_output_tokens: int

    def to_dict(self, include_instructions: bool = True) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "temperature": self.temperature,
            "nucleusP": self.nucleus_p,
            "maxOutputTokens": self.max_output_tokens,
            "hasSystemInstructions": bool(self.system_instructions),
        }
        if include_instructions:
            data["systemInstructions"] = self.system_instructions
        return data


@dataclass(frozen=True)
class OutputMetrics:
    length: int = 0
    structure_score: int = 0  # 0-100
    specificity_score: int = 0  # 0-100

    def to_dict(self) -> Dict[str, int]:
        return {
            "length": self.length,
            "structureScore": self.structure_score,
            "specificityScore": self.specificity_score,
        }


@dataclass(frozen=True)
class ExecutionOutcome:
    """Output of one path (original or enhanced) of a benchmark run."""
    text: str
    path_kind: PathKind
    applied_profile: AppliedProfile
    metrics: OutputMetrics
    model_id: str = ""
    latency_ms: float = 0.0
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    def to_dict(self, include_instructions: bool = True) -> Dict[str, Any]:
        return {
            "text": self.text,
            "pathKind": self.path_kind.value,
            "modelId": self.model_id,
            "appliedProfile": self.applied_profile.to_dict(include_instructions),
            "metrics": self.metrics.to_dict(),
            "latencyMs": self.latency_ms,
            "error": self.error,
        }


@dataclass(frozen=True)
class ParityVerdict:
    """Advisory judgment on whether the enhanced path measurably improved."""
    accepted: bool
    reasons: Sequence[str] = ()
    criteria: Mapping[str, bool] = field(default_factory=dict)
    length_ratio: float = 0.0
    structure_delta: int = 0
    specificity_delta: int = 0

    def __post_init__(self):
        object.__setattr__(self, "reasons", tuple(self.reasons))
        object.__setattr__(self, "criteria", MappingProxyType(dict(self.criteria)))

    @property
    def criteria_met(self) -> int:
        return sum(1 for passed in self.criteria.values() if passed)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "accepted": self.accepted,
            "reasons": list(self.reasons),
            "criteria": dict(self.criteria),
            "criteriaMet": self.criteria_met,
            "lengthRatio": round(self.length_ratio, 3),
            "structureDelta": self.structure_delta,
            "specificityDelta": self.specificity_delta,
        }


@dataclass(frozen=True)
class BenchmarkReport:
    """outputA is the original path, outputB the enhanced path."""
    output_a: ExecutionOutcome
    output_b: ExecutionOutcome
    verdict: ParityVerdict
    model: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self, include_instructions: bool = False) -> Dict[str, Any]:
        return {
            "outputA": self.output_a.to_dict(include_instructions),
            "outputB": self.output_b.to_dict(include_instructions),
            "verdict": self.verdict.to_dict(),
            "model": dict(self.model),
        }
