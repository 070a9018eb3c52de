"""
Service facade: the request contracts for analysis, benchmarking and enhancement.

All collaborators are constructor-injected; create_service() performs the one-time
wiring from an EngineConfig at process start.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ValidationError, field_validator

from .analysis_schema import AnalysisResult
from .config_loader import build_profiles, build_recognizer_rules
from .config_schema import EngineConfig
from .dual_path_executor import DualPathExecutor
from .exceptions import PromptValidationError, RateLimitExceededError
from .execution_schema import BenchmarkReport
from .model_adapters import ModelAdapterRegistry
from .model_invoker import ModelInvoker, OpenRouterInvoker
from .parity_validator import ParityValidator
from .prompt_rewriter import PromptRewriter, RewrittenPrompt
from .quality_scorer import QualityScorer
from .rate_limiter import InMemoryRateLimitStore, RateLimiter, RateLimitStore
from .structural_analyzer import StructuralAnalyzer

logger = logging.getLogger(__name__)

DETERMINISTIC_FALLBACK_SCORE = 60


class AnalyzeRequest(BaseModel):
    prompt: str


class BenchmarkRequest(BaseModel):
    originalText: str
    enhancedText: str
    modelId: str

    @field_validator('originalText', 'enhancedText', 'modelId')
    def not_blank(cls, v):
        if not v.strip():
            raise ValueError("must not be empty")
        return v


class EnhanceRequest(BaseModel):
    prompt: str
    modelId: str = "default"

    @field_validator('prompt')
    def not_blank(cls, v):
        if not v.strip():
            raise ValueError("Prompt is required")
        return v


def _parse(model, payload: Any):
    if not isinstance(payload, dict):
        raise PromptValidationError(
            f"Expected a JSON object for {model.__name__}, got {type(payload).__name__}"
        )
    try:
        return model(**payload)
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise PromptValidationError(f"Invalid {model.__name__}: {details}")


@dataclass(frozen=True)
class EnhancementResult:
    enhanced: str
    quality_score: int
    mode: str  # "ai-synthesized", "best-effort", "deterministic-fallback"
    analysis: AnalysisResult
    rewrite: Optional[RewrittenPrompt] = None
    target_model: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enhanced": self.enhanced,
            "qualityScore": self.quality_score,
            "mode": self.mode,
            "analysis": self.analysis.to_dict(),
            "rewrite": self.rewrite.to_dict() if self.rewrite else None,
            "targetModel": dict(self.target_model),
        }


class PromptQualityService:
    """Analysis, enhancement and dual-path benchmarking for a single process."""

    def __init__(
        self,
        executor: DualPathExecutor,
        rate_limiter: RateLimiter,
        rewriter: Optional[PromptRewriter] = None,
        analyzer: Optional[StructuralAnalyzer] = None,
        scorer: Optional[QualityScorer] = None,
        validator: Optional[ParityValidator] = None,
    ):
        self.executor = executor
        self.rate_limiter = rate_limiter
        self.rewriter = rewriter
        self.analyzer = analyzer or StructuralAnalyzer()
        self.scorer = scorer or QualityScorer(self.analyzer.signals)
        self.validator = validator or ParityValidator()

    def analyze(self, payload: Union[str, Dict[str, Any]]) -> AnalysisResult:
        """
        Analyze a prompt.

        Args:
            payload: Prompt text, or {"prompt": text}

        Raises:
            PromptValidationError: for anything other than a string prompt
        """
        if isinstance(payload, str):
            text = payload
        else:
            text = _parse(AnalyzeRequest, payload).prompt
        return self.scorer.score(text, self.analyzer.analyze(text))

    def _check_rate_limit(self, identifier: str):
        decision = self.rate_limiter.check(identifier)
        if not decision.allowed:
            raise RateLimitExceededError(identifier, decision)
        return decision

    async def benchmark(self, payload: Dict[str, Any], identifier: str) -> BenchmarkReport:
        """
        Execute original and enhanced prompts and judge parity.

        Parity rejections are logged and returned in the report, never raised.

        Raises:
            PromptValidationError: malformed payload
            RateLimitExceededError: identifier is over its window; nothing ran
        """
        request = _parse(BenchmarkRequest, payload)
        self._check_rate_limit(identifier)

        original, enhanced = await self.executor.benchmark(
            request.originalText, request.enhancedText, request.modelId
        )
        verdict = self.validator.validate(original, enhanced)
        if not verdict.accepted:
            logger.warning(
                "Parity rejected for %s: %s", request.modelId, "; ".join(verdict.reasons)
            )

        return BenchmarkReport(
            output_a=original,
            output_b=enhanced,
            verdict=verdict,
            model=self.executor.registry.describe(request.modelId),
        )

    async def enhance(self, payload: Dict[str, Any], identifier: str) -> EnhancementResult:
        """
        Produce an enhanced prompt.

        Model rewrites are attempted first; when none is usable the
        deterministic assembly is returned without any network call.
        The result describes the execution profile of the requested modelId;
        unknown ids resolve to the default profile.
        """
        request = _parse(EnhanceRequest, payload)
        analysis = self.analyze(request.prompt)
        target_model = self.executor.registry.describe(request.modelId)

        if self.rewriter is not None:
            self._check_rate_limit(identifier)
            rewrite, passed = await self.rewriter.rewrite_with_retries(request.prompt, analysis)
            if rewrite is not None:
                return EnhancementResult(
                    enhanced=rewrite.prompt,
                    quality_score=rewrite.quality_score,
                    mode="ai-synthesized" if passed else "best-effort",
                    analysis=analysis,
                    rewrite=rewrite,
                    target_model=target_model,
                )

        logger.info("Using deterministic prompt assembly")
        return self.deterministic_enhancement(request.prompt, analysis, request.modelId)

    def deterministic_enhancement(
        self,
        prompt: str,
        analysis: Optional[AnalysisResult] = None,
        model_id: str = "default",
    ) -> EnhancementResult:
        analysis = analysis or self.analyze(prompt)
        return EnhancementResult(
            enhanced=analysis.improved_prompt or prompt.strip(),
            quality_score=DETERMINISTIC_FALLBACK_SCORE,
            mode="deterministic-fallback",
            analysis=analysis,
            target_model=self.executor.registry.describe(model_id),
        )


def create_service(
    config: Optional[EngineConfig] = None,
    invoker: Optional[ModelInvoker] = None,
    store: Optional[RateLimitStore] = None,
) -> PromptQualityService:
    """
    Wire a service from configuration.

    Args:
        config: Engine configuration (defaults to EngineConfig())
        invoker: Model boundary (defaults to an OpenRouterInvoker from config)
        store: Rate limit store shared by every request handler
    """
    config = config or EngineConfig()

    if invoker is None:
        invoker = OpenRouterInvoker(
            api_key=config.invoker.api_key,
            base_url=config.invoker.base_url,
            timeout=config.invoker.timeout_seconds,
            model_aliases=config.invoker.model_aliases,
        )

    registry = ModelAdapterRegistry.with_overrides(build_profiles(config))
    analyzer = StructuralAnalyzer(extra_rules=build_recognizer_rules(config))

    return PromptQualityService(
        executor=DualPathExecutor(invoker, registry, timeout=config.benchmark.timeout_seconds),
        rate_limiter=RateLimiter(
            store or InMemoryRateLimitStore(config.rate_limit.purge_interval_seconds),
            max_requests=config.rate_limit.max_requests,
            window_seconds=config.rate_limit.window_seconds,
        ),
        rewriter=PromptRewriter(
            invoker,
            model_id=config.rewriter.model_id,
            temperatures=tuple(config.rewriter.temperatures),
            min_multiplier=config.rewriter.min_multiplier,
            max_multiplier=config.rewriter.max_multiplier,
            max_output_tokens=config.rewriter.max_output_tokens,
        ),
        analyzer=analyzer,
    )
