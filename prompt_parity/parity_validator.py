"""
ParityValidator - decides whether the enhanced path produced a measurable,
non-cosmetic improvement over the original path.

Three criteria, at least two of which must hold:
1. enhanced length / max(1, original length) >= 1.2
2. structure score delta >= 10
3. specificity score delta >= 10

Byte-identical outputs are always rejected. The verdict is advisory: it never
raises and never withholds the outcomes from the caller.
"""

from typing import List, Dict

from .execution_schema import ExecutionOutcome, ParityVerdict

MIN_LENGTH_RATIO = 1.2
MIN_STRUCTURE_DELTA = 10
MIN_SPECIFICITY_DELTA = 10
REQUIRED_CRITERIA = 2

IDENTICAL_OUTPUT_REASON = (
    "Enhanced output is identical to original. Execution paths are not differentiated."
)


class ParityValidator:
    """Applies the 2-of-3 acceptance rule to a pair of outcomes."""

    def __init__(
        self,
        min_length_ratio: float = MIN_LENGTH_RATIO,
        min_structure_delta: int = MIN_STRUCTURE_DELTA,
        min_specificity_delta: int = MIN_SPECIFICITY_DELTA,
        required_criteria: int = REQUIRED_CRITERIA,
    ):
        self.min_length_ratio = min_length_ratio
        self.min_structure_delta = min_structure_delta
        self.min_specificity_delta = min_specificity_delta
        self.required_criteria = required_criteria

    def validate(self, original: ExecutionOutcome, enhanced: ExecutionOutcome) -> ParityVerdict:
        o = original.metrics
        e = enhanced.metrics

        length_ratio = e.length / max(1, o.length)
        structure_delta = e.structure_score - o.structure_score
        specificity_delta = e.specificity_score - o.specificity_score

        criteria: Dict[str, bool] = {
            "length": length_ratio >= self.min_length_ratio,
            "structure": structure_delta >= self.min_structure_delta,
            "specificity": specificity_delta >= self.min_specificity_delta,
        }
        met = sum(1 for passed in criteria.values() if passed)

        reasons: List[str] = []
        if met < self.required_criteria:
            if not criteria["length"]:
                reasons.append(
                    f"Length ratio {length_ratio:.2f}x is below {self.min_length_ratio}x"
                )
            if not criteria["structure"]:
                reasons.append(
                    f"Structure score delta {structure_delta:+d} is below +{self.min_structure_delta}"
                )
            if not criteria["specificity"]:
                reasons.append(
                    f"Specificity score delta {specificity_delta:+d} is below +{self.min_specificity_delta}"
                )
            reasons.append(
                f"Only {met} of 3 improvement criteria met (need {self.required_criteria})"
            )

        identical = original.text == enhanced.text
        if identical:
            reasons.append(IDENTICAL_OUTPUT_REASON)

        return ParityVerdict(
            accepted=met >= self.required_criteria and not identical,
            reasons=reasons,
            criteria=criteria,
            length_ratio=length_ratio,
            structure_delta=structure_delta,
            specificity_delta=specificity_delta,
        )
