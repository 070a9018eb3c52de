"""
Prompt Rewriter - asks a model to rewrite a prompt as a senior expert would.

The rewrite is gated by validate_rewrite_quality: it must be 3-10x longer than
the original, at least 50 characters, and free of template labels. Callers that
exhaust their attempts fall back to the deterministic assembly of the scorer.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Dict, Optional, Any, Tuple

from jinja2 import Template

from .analysis_schema import AnalysisResult
from .exceptions import InvocationError
from .model_invoker import ModelInvoker

logger = logging.getLogger(__name__)

MIN_SPECIFICITY_MULTIPLIER = 3.0
MAX_SPECIFICITY_MULTIPLIER = 10.0
MIN_REWRITE_CHARS = 50
TEMPLATE_MARKERS = ["ROLE:", "TASK:", "CONSTRAINTS:", "OBJECTIVE:", "OUTPUT:", "##", "###"]

REWRITER_SYSTEM_PROMPT = """You are an expert prompt engineer with 15+ years of experience.

Your task: Take the user's vague prompt and rewrite it as a senior expert would have written it from scratch.

CRITICAL RULES:
1. Write the prompt as ONE coherent text in natural language
2. NO visible structure (no "ROLE:", "TASK:", "CONSTRAINTS:", etc.)
3. MAKE EXPLICIT choices where the user is vague, choosing the most reasonable reading
4. Be 3-5x more specific than the original
5. Write as if YOU are the expert writing this, not as if you're instructing an AI
6. No generic phrases; every sentence must add value
7. No questions, only decisive statements

Output: Only the rewritten prompt. No explanation, no comments, no meta-structure."""

REWRITER_USER_TEMPLATE = Template(
    """USER'S ORIGINAL PROMPT:
"{{ prompt }}"
{% if missing %}
MISSING ELEMENTS TO DECIDE ON: {{ missing | join(", ") }}
{% endif %}{% if issues %}
KNOWN WEAKNESSES:
{% for issue in issues %}- {{ issue }}
{% endfor %}{% endif %}
Now rewrite this prompt as a senior expert would write it."""
)


@dataclass
class RewrittenPrompt:
    """A model-synthesized rewrite and its quality bookkeeping."""
    prompt: str
    quality_score: int
    meets_quality_bar: bool
    original_length: int
    rewritten_length: int
    specificity_multiplier: float
    temperature: float
    synthesized_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "prompt": self.prompt,
            "qualityScore": self.quality_score,
            "meetsQualityBar": self.meets_quality_bar,
            "meta": {
                "originalLength": self.original_length,
                "rewrittenLength": self.rewritten_length,
                "specificityMultiplier": round(self.specificity_multiplier, 1),
                "temperature": self.temperature,
                "synthesizedAt": self.synthesized_at.isoformat(),
            },
        }


def validate_rewrite_quality(
    result: RewrittenPrompt,
    min_chars: int = MIN_REWRITE_CHARS,
) -> Tuple[bool, Optional[str]]:
    """
    Check a rewrite against the quality gate.

    Returns:
        (valid, reason) where reason is None when valid
    """
    if not result.meets_quality_bar:
        return False, (
            f"Specificity multiplier {result.specificity_multiplier:.1f}x does not meet "
            f"the {MIN_SPECIFICITY_MULTIPLIER:.0f}-{MAX_SPECIFICITY_MULTIPLIER:.0f}x requirement"
        )

    if len(result.prompt) < min_chars:
        return False, f"Rewritten prompt is too short (< {min_chars} characters)"

    if any(marker in result.prompt for marker in TEMPLATE_MARKERS):
        return False, "Rewritten prompt contains template structure markers"

    return True, None


class PromptRewriter:
    """Model-backed rewriting collaborator."""

    def __init__(
        self,
        invoker: ModelInvoker,
        model_id: str = "gpt-4o-mini",
        temperatures: Tuple[float, ...] = (0.5, 0.65),
        min_multiplier: float = MIN_SPECIFICITY_MULTIPLIER,
        max_multiplier: float = MAX_SPECIFICITY_MULTIPLIER,
        max_output_tokens: int = 1024,
        timeout: float = 60.0,
    ):
        """
        Initialize the rewriter.

        Args:
            invoker: Model boundary used for synthesis
            model_id: Model asked to perform the rewrite
            temperatures: One sampling temperature per attempt
            min_multiplier: Lower bound of the specificity quality bar
            max_multiplier: Upper bound of the specificity quality bar
            max_output_tokens: Output cap for the rewrite
            timeout: Per-attempt timeout in seconds
        """
        if not temperatures:
            raise ValueError("At least one rewrite attempt temperature is required")
        self.invoker = invoker
        self.model_id = model_id
        self.temperatures = tuple(temperatures)
        self.min_multiplier = min_multiplier
        self.max_multiplier = max_multiplier
        self.max_output_tokens = max_output_tokens
        self.timeout = timeout

    def build_user_prompt(self, prompt: str, analysis: Optional[AnalysisResult] = None) -> str:
        missing: List[str] = []
        issues: List[str] = []
        if analysis is not None:
            missing = [c.value for c in analysis.missing_categories]
            issues = [i.message for i in analysis.issues]
        return REWRITER_USER_TEMPLATE.render(prompt=prompt, missing=missing, issues=issues)

    async def rewrite(
        self,
        prompt: str,
        temperature: float,
        analysis: Optional[AnalysisResult] = None,
    ) -> RewrittenPrompt:
        """
        Synthesize a single rewrite.

        Raises:
            InvocationError: if the model call fails or returns nothing
        """
        output = await self.invoker.invoke(
            model_id=self.model_id,
            user_text=self.build_user_prompt(prompt, analysis),
            system_instructions=REWRITER_SYSTEM_PROMPT,
            temperature=temperature,
            nucleus_p=1.0,
            max_output_tokens=self.max_output_tokens,
            timeout=self.timeout,
        )
        synthesized = output.strip()
        if not synthesized:
            raise InvocationError("Rewriter produced empty output", self.model_id)

        original_length = max(1, len(prompt))
        multiplier = len(synthesized) / original_length

        return RewrittenPrompt(
            prompt=synthesized,
            quality_score=min(100, round(multiplier / MIN_SPECIFICITY_MULTIPLIER * 100)),
            meets_quality_bar=self.min_multiplier <= multiplier <= self.max_multiplier,
            original_length=len(prompt),
            rewritten_length=len(synthesized),
            specificity_multiplier=multiplier,
            temperature=temperature,
        )

    async def rewrite_with_retries(
        self,
        prompt: str,
        analysis: Optional[AnalysisResult] = None,
    ) -> Tuple[Optional[RewrittenPrompt], bool]:
        """
        Try each configured temperature in turn.

        Returns:
            (rewrite, passed_gate). The first rewrite passing the gate wins;
            otherwise the last attempt longer than the minimum length is kept
            as a best-effort result; otherwise (None, False).
        """
        best_effort: Optional[RewrittenPrompt] = None

        for attempt, temperature in enumerate(self.temperatures, 1):
            try:
                result = await self.rewrite(prompt, temperature, analysis)
            except Exception as e:
                logger.warning("Rewrite attempt %d failed: %s", attempt, e)
                continue

            valid, reason = validate_rewrite_quality(result)
            if valid:
                return result, True

            logger.info("Rewrite attempt %d rejected: %s", attempt, reason)
            if len(result.prompt) > MIN_REWRITE_CHARS:
                best_effort = result

        return best_effort, False
