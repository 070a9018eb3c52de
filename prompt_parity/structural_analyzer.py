"""
Structural Analyzer - Decomposes a prompt into the six structural categories.

Deterministic, pattern-based counterpart to an LLM-driven prompt review:
1. Runs the recognizer table against the prompt (first matching rule wins)
2. Assigns a quality tier to every present category from whole-prompt signals

Quality is assessed against the prompt holistically, not per clause, so every
present category of a given prompt receives the same tier.
"""

import logging
from typing import List, Optional, Iterable

from .analysis_schema import (
    StructuralCategory,
    QualityTier,
    CategoryFinding,
    Findings,
    empty_findings,
)
from .recognizers import (
    RecognizerRule,
    QualitySignals,
    DEFAULT_RULES,
    DEFAULT_SIGNALS,
    group_rules,
)

logger = logging.getLogger(__name__)


class StructuralAnalyzer:
    """
    Evaluates a declarative rule table against prompt text.

    The analyzer holds no per-call state; one instance can serve concurrent
    requests.
    """

    def __init__(
        self,
        rules: Optional[Iterable[RecognizerRule]] = None,
        extra_rules: Optional[Iterable[RecognizerRule]] = None,
        signals: QualitySignals = DEFAULT_SIGNALS,
    ):
        """
        Initialize the analyzer.

        Args:
            rules: Replacement rule table (defaults to DEFAULT_RULES)
            extra_rules: Rules appended after the table, e.g. a localization pack
            signals: Whole-prompt quality signals
        """
        table: List[RecognizerRule] = list(rules if rules is not None else DEFAULT_RULES)
        if extra_rules:
            table.extend(extra_rules)
        self.rules = tuple(table)
        self.signals = signals
        self._rules_by_category = group_rules(self.rules)

    def analyze(self, prompt_text: str) -> Findings:
        """
        Produce one finding per structural category.

        Args:
            prompt_text: Raw prompt text

        Returns:
            Dict keyed by every StructuralCategory
        """
        text = prompt_text.strip()
        if not text:
            return empty_findings()

        findings = empty_findings()
        tier: Optional[QualityTier] = None

        for category in StructuralCategory:
            for rule in self._rules_by_category[category]:
                match = rule.search(text)
                if match is None:
                    continue
                if tier is None:
                    tier = self.assess_quality(text)
                findings[category] = CategoryFinding(
                    category=category,
                    present=True,
                    quality_tier=tier,
                    matched_span=match.group(0),
                )
                logger.debug("Category %s matched by rule %s", category.value, rule.name)
                break

        return findings

    def assess_quality(self, prompt_text: str) -> QualityTier:
        """
        Assign a tier from whole-prompt excellence and weakness signals.

        Two or more excellence signals win over weakness signals; two weakness
        signals make the tier weak; anything else is good.
        """
        signals = self.signals
        excellent_count = sum([
            bool(signals.specificity.search(prompt_text)),
            bool(signals.numbers.search(prompt_text)),
            bool(signals.examples.search(prompt_text)),
            bool(signals.structure.search(prompt_text)),
        ])
        weak_count = sum([
            bool(signals.vague.search(prompt_text)),
            len(prompt_text.split()) < signals.min_words,
        ])

        if excellent_count >= 2:
            return QualityTier.EXCELLENT
        if weak_count >= 2:
            return QualityTier.WEAK
        return QualityTier.GOOD

    def is_vague(self, prompt_text: str) -> bool:
        return bool(self.signals.vague.search(prompt_text))
