"""
Prompt quality analysis and dual-path execution engine.

Scores prompts against six structural categories, rewrites weak prompts, and
benchmarks an original prompt against its enhanced rewrite on a target model.
"""

from .analysis_schema import (
    StructuralCategory,
    QualityTier,
    Severity,
    CategoryFinding,
    PromptIssue,
    PromptSuggestion,
    SurfaceMetrics,
    AnalysisResult,
)
from .structural_analyzer import StructuralAnalyzer
from .quality_scorer import QualityScorer, analyze_prompt, grade_for_score
from .model_adapters import ExecutionProfile, ModelAdapterRegistry
from .execution_schema import (
    PathKind,
    AppliedProfile,
    OutputMetrics,
    ExecutionOutcome,
    ParityVerdict,
    BenchmarkReport,
)
from .model_invoker import ModelInvoker, OpenRouterInvoker, CallableInvoker
from .dual_path_executor import DualPathExecutor
from .parity_validator import ParityValidator
from .rate_limiter import RateLimiter, RateLimitDecision, InMemoryRateLimitStore
from .prompt_rewriter import PromptRewriter, RewrittenPrompt
from .exceptions import (
    PromptParityError,
    InvocationError,
    PromptValidationError,
    RateLimitExceededError,
)
from .config_loader import ConfigLoader, load_engine_config
from .service import PromptQualityService, EnhancementResult, create_service

__all__ = [
    "StructuralCategory",
    "QualityTier",
    "Severity",
    "CategoryFinding",
    "PromptIssue",
    "PromptSuggestion",
    "SurfaceMetrics",
    "AnalysisResult",
    "StructuralAnalyzer",
    "QualityScorer",
    "analyze_prompt",
    "grade_for_score",
    "ExecutionProfile",
    "ModelAdapterRegistry",
    "PathKind",
    "AppliedProfile",
    "OutputMetrics",
    "ExecutionOutcome",
    "ParityVerdict",
    "BenchmarkReport",
    "ModelInvoker",
    "OpenRouterInvoker",
    "CallableInvoker",
    "DualPathExecutor",
    "ParityValidator",
    "RateLimiter",
    "RateLimitDecision",
    "InMemoryRateLimitStore",
    "PromptRewriter",
    "RewrittenPrompt",
    "PromptParityError",
    "InvocationError",
    "PromptValidationError",
    "RateLimitExceededError",
    "PromptQualityService",
    "EnhancementResult",
    "ConfigLoader",
    "load_engine_config",
    "create_service",
]
