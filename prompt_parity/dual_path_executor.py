"""
DualPathExecutor - runs an original and an enhanced prompt concurrently.

- Original path: no system instructions, temperature 1.0, nucleus-p 1.0,
  600 output tokens, whatever the target model. Simulates a naive call.
- Enhanced path: instructions and sampling taken from the model's
  ExecutionProfile.

Each path is bounded by its own timeout and isolated from the other: a failure
or timeout turns that path into a zero-metric sentinel outcome and never
propagates.
"""

import asyncio
import logging
import time
from typing import Optional, Tuple

from .execution_schema import (
    PathKind,
    AppliedProfile,
    OutputMetrics,
    ExecutionOutcome,
)
from .model_adapters import ModelAdapterRegistry
from .model_invoker import ModelInvoker
from .output_metrics import calculate_output_metrics

logger = logging.getLogger(__name__)

ORIGINAL_PROFILE = AppliedProfile(
    system_instructions=None,
    temperature=1.0,
    nucleus_p=1.0,
    max_output_tokens=600,
)


class DualPathExecutor:
    """Benchmarks an original prompt against its enhanced rewrite."""

    def __init__(
        self,
        invoker: ModelInvoker,
        registry: Optional[ModelAdapterRegistry] = None,
        timeout: float = 60.0,
    ):
        """
        Initialize the executor.

        Args:
            invoker: Model boundary both paths are executed against
            registry: Execution profiles (defaults to the built-in table)
            timeout: Per-path timeout in seconds
        """
        self.invoker = invoker
        self.registry = registry or ModelAdapterRegistry()
        self.timeout = timeout

    def enhanced_profile(self, model_id: str) -> AppliedProfile:
        profile = self.registry.resolve(model_id)
        return AppliedProfile(
            system_instructions=profile.system_instructions,
            temperature=profile.temperature,
            nucleus_p=profile.nucleus_p,
            max_output_tokens=profile.max_output_tokens,
        )

    async def run_path(
        self,
        text: str,
        model_id: str,
        path_kind: PathKind,
        applied: AppliedProfile,
        timeout: Optional[float] = None,
    ) -> ExecutionOutcome:
        """
        Execute one path and compute its metrics.

        Never raises for invocation failures; returns a sentinel outcome instead.
        """
        path_timeout = timeout if timeout is not None else self.timeout
        start_time = time.time()

        try:
            output = await asyncio.wait_for(
                self.invoker.invoke(
                    model_id=model_id,
                    user_text=text,
                    system_instructions=applied.system_instructions,
                    temperature=applied.temperature,
                    nucleus_p=applied.nucleus_p,
                    max_output_tokens=applied.max_output_tokens,
                    timeout=path_timeout,
                ),
                timeout=path_timeout,
            )
        except asyncio.TimeoutError:
            return self._failed_outcome(
                model_id, path_kind, applied, start_time,
                f"Invocation timed out after {path_timeout}s",
            )
        except Exception as e:
            return self._failed_outcome(model_id, path_kind, applied, start_time, str(e) or type(e).__name__)

        latency_ms = (time.time() - start_time) * 1000
        return ExecutionOutcome(
            text=output,
            path_kind=path_kind,
            applied_profile=applied,
            metrics=calculate_output_metrics(output),
            model_id=model_id,
            latency_ms=latency_ms,
        )

    async def benchmark(
        self,
        original_text: str,
        enhanced_text: str,
        model_id: str,
        timeout: Optional[float] = None,
    ) -> Tuple[ExecutionOutcome, ExecutionOutcome]:
        """
        Run both paths in parallel.

        Args:
            original_text: The user's prompt as written
            enhanced_text: The rewritten prompt
            model_id: Target model id (unknown ids use the default profile)
            timeout: Per-path timeout override in seconds

        Returns:
            (original outcome, enhanced outcome), always two outcomes
        """
        enhanced_applied = self.enhanced_profile(model_id)
        start_time = time.time()

        results = await asyncio.gather(
            self.run_path(original_text, model_id, PathKind.ORIGINAL, ORIGINAL_PROFILE, timeout),
            self.run_path(enhanced_text, model_id, PathKind.ENHANCED, enhanced_applied, timeout),
            return_exceptions=True,
        )

        # run_path only lets BaseException subclasses such as CancelledError through
        original, enhanced = results
        if isinstance(original, BaseException):
            original = self._failed_outcome(
                model_id, PathKind.ORIGINAL, ORIGINAL_PROFILE, start_time, repr(original)
            )
        if isinstance(enhanced, BaseException):
            enhanced = self._failed_outcome(
                model_id, PathKind.ENHANCED, enhanced_applied, start_time, repr(enhanced)
            )

        return original, enhanced

    def _failed_outcome(
        self,
        model_id: str,
        path_kind: PathKind,
        applied: AppliedProfile,
        start_time: float,
        error: str,
    ) -> ExecutionOutcome:
        logger.warning("%s path failed for %s: %s", path_kind.value, model_id, error)
        return ExecutionOutcome(
            text="",
            path_kind=path_kind,
            applied_profile=applied,
            metrics=OutputMetrics(),
            model_id=model_id,
            latency_ms=(time.time() - start_time) * 1000,
            error=error,
        )
