"""
Unit tests for dual-path benchmark execution.

Tests cover:
- Applied profiles for the original and enhanced paths
- Concurrent execution of both paths
- Timeout and failure isolation
"""

import asyncio

import pytest

from prompt_parity.dual_path_executor import DualPathExecutor, ORIGINAL_PROFILE
from prompt_parity.exceptions import InvocationError
from prompt_parity.execution_schema import PathKind, OutputMetrics
from prompt_parity.model_invoker import CallableInvoker


ENHANCED_OUTPUT = "## Overview\n- point one\n- point two\n```\ncode\n```\n"


async def echo(**call):
    if call["system_instructions"] is None:
        return "plain answer"
    return ENHANCED_OUTPUT


# ============================================================================
# Profile Tests
# ============================================================================

class TestProfiles:
    """Tests for the parameters each path is executed with."""

    def test_original_profile_is_fixed(self):
        assert ORIGINAL_PROFILE.system_instructions is None
        assert ORIGINAL_PROFILE.temperature == 1.0
        assert ORIGINAL_PROFILE.nucleus_p == 1.0
        assert ORIGINAL_PROFILE.max_output_tokens == 600

    def test_enhanced_profile_from_registry(self):
        executor = DualPathExecutor(CallableInvoker(echo))
        applied = executor.enhanced_profile("gemini-2.5")
        assert applied.temperature == 0.65
        assert applied.nucleus_p == 0.85
        assert applied.max_output_tokens == 3072
        assert applied.system_instructions

    @pytest.mark.asyncio
    async def test_invocation_parameters(self):
        invoker = CallableInvoker(echo)
        executor = DualPathExecutor(invoker)

        await executor.benchmark("original", "enhanced", "claude-sonnet-4.5")

        by_text = {call["user_text"]: call for call in invoker.calls}
        original = by_text["original"]
        enhanced = by_text["enhanced"]

        assert original["model_id"] == "claude-sonnet-4.5"
        assert original["system_instructions"] is None
        assert original["temperature"] == 1.0
        assert original["nucleus_p"] == 1.0
        assert original["max_output_tokens"] == 600

        assert enhanced["system_instructions"].startswith("You are a helpful")
        assert enhanced["temperature"] == 0.7
        assert enhanced["nucleus_p"] == 0.95
        assert enhanced["max_output_tokens"] == 4096

    @pytest.mark.asyncio
    async def test_unknown_model_uses_default_profile(self):
        invoker = CallableInvoker(echo)
        executor = DualPathExecutor(invoker)

        _, enhanced = await executor.benchmark("a", "b", "unknown-model-xyz")

        assert enhanced.error is None
        assert enhanced.applied_profile.temperature == 0.7
        assert enhanced.applied_profile.max_output_tokens == 1024


# ============================================================================
# Benchmark Execution Tests
# ============================================================================

class TestBenchmark:
    """Tests for DualPathExecutor.benchmark."""

    @pytest.mark.asyncio
    async def test_returns_both_outcomes(self):
        executor = DualPathExecutor(CallableInvoker(echo))
        original, enhanced = await executor.benchmark("a", "b", "gpt-5.2")

        assert original.path_kind == PathKind.ORIGINAL
        assert enhanced.path_kind == PathKind.ENHANCED
        assert original.text == "plain answer"
        assert enhanced.text == ENHANCED_OUTPUT
        assert enhanced.metrics.structure_score == 10 + 3 + 3 + 20
        assert original.metrics.structure_score == 0
        assert not original.failed and not enhanced.failed

    @pytest.mark.asyncio
    async def test_paths_run_concurrently(self):
        started = []
        both_started = asyncio.Event()

        async def rendezvous(**call):
            started.append(call["user_text"])
            if len(started) == 2:
                both_started.set()
            # Sequential execution would never reach the second call
            await both_started.wait()
            return "done"

        executor = DualPathExecutor(CallableInvoker(rendezvous), timeout=2.0)
        original, enhanced = await executor.benchmark("a", "b", "gpt-5.2")

        assert not original.failed
        assert not enhanced.failed
        assert sorted(started) == ["a", "b"]

    @pytest.mark.asyncio
    async def test_timeout_yields_sentinel(self):
        async def slow_original(**call):
            if call["system_instructions"] is None:
                await asyncio.sleep(5)
            return ENHANCED_OUTPUT

        executor = DualPathExecutor(CallableInvoker(slow_original), timeout=0.1)
        original, enhanced = await executor.benchmark("a", "b", "gpt-5.2")

        assert original.failed
        assert "timed out" in original.error
        assert original.text == ""
        assert original.metrics == OutputMetrics()
        assert original.applied_profile == ORIGINAL_PROFILE

        assert not enhanced.failed
        assert enhanced.text == ENHANCED_OUTPUT

    @pytest.mark.asyncio
    async def test_timeout_override(self):
        async def slow(**call):
            await asyncio.sleep(5)
            return "late"

        executor = DualPathExecutor(CallableInvoker(slow), timeout=60.0)
        original, enhanced = await executor.benchmark("a", "b", "gpt-5.2", timeout=0.05)

        assert original.failed and enhanced.failed

    @pytest.mark.asyncio
    async def test_failure_is_isolated(self):
        async def failing_enhanced(**call):
            if call["system_instructions"] is not None:
                raise InvocationError("HTTP 500: Internal Server Error", call["model_id"])
            return "plain answer"

        executor = DualPathExecutor(CallableInvoker(failing_enhanced))
        original, enhanced = await executor.benchmark("a", "b", "grok-3")

        assert original.text == "plain answer"
        assert original.error is None
        assert enhanced.error == "HTTP 500: Internal Server Error"
        assert enhanced.metrics == OutputMetrics()

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_isolated(self):
        async def broken(**call):
            raise RuntimeError()

        executor = DualPathExecutor(CallableInvoker(broken))
        original, enhanced = await executor.benchmark("a", "b", "gpt-5.2")

        assert original.error == "RuntimeError"
        assert enhanced.error == "RuntimeError"

    @pytest.mark.asyncio
    async def test_outcome_serialization_hides_instructions(self):
        executor = DualPathExecutor(CallableInvoker(echo))
        _, enhanced = await executor.benchmark("a", "b", "gpt-5.2")

        data = enhanced.to_dict(include_instructions=False)
        assert "systemInstructions" not in data["appliedProfile"]
        assert data["appliedProfile"]["hasSystemInstructions"] is True
        assert data["pathKind"] == "enhanced"
