"""
Unit tests for the PromptQualityService facade.

Tests cover:
- Request validation
- Rate limiting before any model invocation
- Benchmark reports and logged parity rejections
- Enhancement modes and the deterministic fallback
"""

import logging

import pytest

from prompt_parity.analysis_schema import StructuralCategory
from prompt_parity.config_schema import EngineConfig
from prompt_parity.dual_path_executor import DualPathExecutor
from prompt_parity.exceptions import PromptValidationError, RateLimitExceededError, InvocationError
from prompt_parity.model_adapters import ModelAdapterRegistry
from prompt_parity.model_invoker import CallableInvoker
from prompt_parity.prompt_rewriter import PromptRewriter
from prompt_parity.rate_limiter import InMemoryRateLimitStore, RateLimiter
from prompt_parity.service import PromptQualityService, create_service

STRUCTURED_OUTPUT = (
    "## Overview\nA focused answer.\n## Steps\n- warm up\n- train\n## Example\n```\nplan()\n```\n"
).ljust(400, ".")


async def benchmark_model(**call):
    if call["system_instructions"] is None:
        return "x" * 50
    return STRUCTURED_OUTPUT


def make_service(fn=benchmark_model, max_requests=5, rewriter_fn=None):
    invoker = CallableInvoker(fn)
    rewriter = PromptRewriter(CallableInvoker(rewriter_fn)) if rewriter_fn else None
    service = PromptQualityService(
        executor=DualPathExecutor(invoker, ModelAdapterRegistry(), timeout=2.0),
        rate_limiter=RateLimiter(InMemoryRateLimitStore(), max_requests=max_requests),
        rewriter=rewriter,
    )
    return service, invoker


# ============================================================================
# Analyze
# ============================================================================

class TestAnalyze:

    def test_string_payload(self):
        service, _ = make_service()
        assert service.analyze("hur blir jag bra på chins?").score == 0

    def test_dict_payload(self):
        service, _ = make_service()
        result = service.analyze({"prompt": "Write something nice"})
        assert result.score == 15

    def test_missing_field(self):
        service, _ = make_service()
        with pytest.raises(PromptValidationError, match="prompt"):
            service.analyze({"text": "hello"})

    @pytest.mark.parametrize("payload", [None, 42, ["prompt"]])
    def test_non_string_payload(self, payload):
        service, _ = make_service()
        with pytest.raises(PromptValidationError):
            service.analyze(payload)

    def test_non_string_prompt_field(self):
        service, _ = make_service()
        with pytest.raises(PromptValidationError):
            service.analyze({"prompt": 42})


# ============================================================================
# Benchmark
# ============================================================================

class TestBenchmark:

    @pytest.mark.asyncio
    async def test_accepted_report(self):
        service, invoker = make_service()
        report = await service.benchmark(
            {"originalText": "How do I train?", "enhancedText": "You are a coach...", "modelId": "gpt-5.2"},
            identifier="10.0.0.1",
        )

        assert report.verdict.accepted is True
        assert report.output_a.text == "x" * 50
        assert report.output_b.metrics.structure_score >= 10
        assert report.model["modelId"] == "gpt-5.2"
        assert len(invoker.calls) == 2

    @pytest.mark.asyncio
    async def test_report_shape(self):
        service, _ = make_service()
        report = await service.benchmark(
            {"originalText": "a", "enhancedText": "b", "modelId": "unknown-model-xyz"},
            identifier="10.0.0.1",
        )
        data = report.to_dict()
        assert set(data) == {"outputA", "outputB", "verdict", "model"}
        assert data["model"]["isDefault"] is True
        assert "systemInstructions" not in data["outputB"]["appliedProfile"]

    @pytest.mark.asyncio
    async def test_rejection_logged_not_raised(self, caplog):
        async def same(**call):
            return "identical output"

        service, _ = make_service(fn=same)
        with caplog.at_level(logging.WARNING, logger="prompt_parity.service"):
            report = await service.benchmark(
                {"originalText": "a", "enhancedText": "b", "modelId": "gpt-5.2"},
                identifier="10.0.0.1",
            )

        assert report.verdict.accepted is False
        assert "Parity rejected for gpt-5.2" in caplog.text

    @pytest.mark.asyncio
    async def test_failed_path_still_reported(self):
        async def flaky(**call):
            if call["system_instructions"] is None:
                raise InvocationError("HTTP 502: Bad Gateway")
            return STRUCTURED_OUTPUT

        service, _ = make_service(fn=flaky)
        report = await service.benchmark(
            {"originalText": "a", "enhancedText": "b", "modelId": "gpt-5.2"},
            identifier="10.0.0.1",
        )
        assert report.output_a.error == "HTTP 502: Bad Gateway"
        assert report.output_b.error is None

    @pytest.mark.asyncio
    async def test_rate_limited_before_invocation(self):
        service, invoker = make_service(max_requests=1)
        payload = {"originalText": "a", "enhancedText": "b", "modelId": "gpt-5.2"}

        await service.benchmark(payload, identifier="10.0.0.1")
        with pytest.raises(RateLimitExceededError) as exc_info:
            await service.benchmark(payload, identifier="10.0.0.1")

        assert exc_info.value.decision.allowed is False
        assert len(invoker.calls) == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [
        {"originalText": "a", "enhancedText": "b"},
        {"originalText": "", "enhancedText": "b", "modelId": "gpt-5.2"},
        {"originalText": "a", "enhancedText": "b", "modelId": "   "},
        "not an object",
    ])
    async def test_invalid_payload(self, payload):
        service, invoker = make_service()
        with pytest.raises(PromptValidationError):
            await service.benchmark(payload, identifier="10.0.0.1")
        assert invoker.calls == []

    @pytest.mark.asyncio
    async def test_invalid_payload_does_not_consume_quota(self):
        service, _ = make_service(max_requests=1)
        with pytest.raises(PromptValidationError):
            await service.benchmark({}, identifier="10.0.0.1")
        report = await service.benchmark(
            {"originalText": "a", "enhancedText": "b", "modelId": "gpt-5.2"},
            identifier="10.0.0.1",
        )
        assert report.output_a.text


# ============================================================================
# Enhance
# ============================================================================

class TestEnhance:

    @pytest.mark.asyncio
    async def test_ai_synthesized(self):
        prompt = "Write a poem"

        async def rewrite(**call):
            return ("Compose a short free verse poem about autumn light. " * 2).strip()

        service, _ = make_service(rewriter_fn=rewrite)
        result = await service.enhance({"prompt": prompt}, identifier="u1")

        assert result.mode == "ai-synthesized"
        assert result.quality_score == 100
        assert result.rewrite.temperature == 0.5

    @pytest.mark.asyncio
    async def test_best_effort(self):
        async def rambling(**call):
            return ("x " * 100).strip()

        service, _ = make_service(rewriter_fn=rambling)
        result = await service.enhance({"prompt": "Write a poem"}, identifier="u1")

        assert result.mode == "best-effort"
        assert result.enhanced == ("x " * 100).strip()

    @pytest.mark.asyncio
    async def test_deterministic_fallback(self):
        async def down(**call):
            raise InvocationError("HTTP 503: Service Unavailable")

        service, _ = make_service(rewriter_fn=down)
        result = await service.enhance({"prompt": "hur blir jag bra på chins?"}, identifier="u1")

        assert result.mode == "deterministic-fallback"
        assert result.quality_score == 60
        assert result.enhanced == result.analysis.improved_prompt
        assert result.enhanced.startswith("You are an experienced expert in the relevant field.")

    @pytest.mark.asyncio
    async def test_no_rewriter_skips_network(self):
        service, _ = make_service()
        result = await service.enhance({"prompt": "Write a poem"}, identifier="u1")
        assert result.mode == "deterministic-fallback"
        assert result.rewrite is None

    def test_adequate_prompt_kept(self):
        service, _ = make_service()
        prompt = (
            "  Write a 4-week pull-up training plan for a beginner. "
            "You are an experienced strength coach.\n"
            "Instructions:\n1. Start with an assessment\n2. Progress weekly\n"
            "Max 300 words, professional tone, in English.\n"
            "Format: a table per week.\nAvoid generic motivational phrases.  "
        )
        result = service.deterministic_enhancement(prompt)
        assert result.enhanced == prompt.strip()

    @pytest.mark.asyncio
    async def test_rate_limited(self):
        async def rewrite(**call):
            return "unused"

        service, _ = make_service(max_requests=1, rewriter_fn=rewrite)
        await service.enhance({"prompt": "Write a poem"}, identifier="u1")
        with pytest.raises(RateLimitExceededError):
            await service.enhance({"prompt": "Write a poem"}, identifier="u1")

    @pytest.mark.asyncio
    async def test_empty_prompt_rejected(self):
        service, _ = make_service()
        with pytest.raises(PromptValidationError, match="Prompt is required"):
            await service.enhance({"prompt": "   "}, identifier="u1")

    @pytest.mark.asyncio
    async def test_to_dict(self):
        service, _ = make_service()
        data = (await service.enhance({"prompt": "Write a poem"}, identifier="u1")).to_dict()
        assert set(data) == {"enhanced", "qualityScore", "mode", "analysis", "rewrite", "targetModel"}
        assert data["analysis"]["grade"] == "F"
        assert data["targetModel"]["isDefault"] is True

    @pytest.mark.asyncio
    async def test_target_model_from_request(self):
        async def rewrite(**call):
            return ("Compose a short free verse poem about autumn light. " * 2).strip()

        service, _ = make_service(rewriter_fn=rewrite)
        result = await service.enhance(
            {"prompt": "Write a poem", "modelId": "claude-sonnet-4.5"}, identifier="u1"
        )

        assert result.target_model["modelId"] == "claude-sonnet-4.5"
        assert result.target_model["isDefault"] is False
        assert result.target_model["family"] == "claude"

    @pytest.mark.asyncio
    async def test_target_model_on_deterministic_fallback(self):
        service, _ = make_service()
        result = await service.enhance({"prompt": "Write a poem", "modelId": "gpt-5.2"}, identifier="u1")

        assert result.mode == "deterministic-fallback"
        assert result.target_model["modelId"] == "gpt-5.2"
        assert result.target_model["family"] == "gpt"


# ============================================================================
# Wiring
# ============================================================================

class TestCreateService:

    @pytest.mark.asyncio
    async def test_wires_from_config(self):
        config = EngineConfig(
            rate_limit={"max_requests": 1, "window_seconds": 60, "purge_interval_seconds": 5},
            profiles=[{
                "model_id": "local-llm",
                "family": "gpt",
                "system_instructions": "Use headers.",
                "temperature": 0.2,
                "nucleus_p": 0.8,
                "max_output_tokens": 256,
            }],
            recognizers=[{"category": "constraints", "name": "en-exclude", "pattern": r"\bexclude\b"}],
        )
        invoker = CallableInvoker(benchmark_model)
        service = create_service(config, invoker=invoker)

        assert service.executor.registry.resolve("local-llm").max_output_tokens == 256
        assert service.executor.registry.is_registered("gpt-5.2")
        assert service.rewriter.temperatures == (0.5, 0.65)
        assert service.rate_limiter.store.purge_interval == 5
        assert service.analyze("Write a poem and exclude rhymes").findings[StructuralCategory.CONSTRAINTS].present

        await service.benchmark(
            {"originalText": "a", "enhancedText": "b", "modelId": "local-llm"}, identifier="ip"
        )
        enhanced_call = [c for c in invoker.calls if c["system_instructions"]][0]
        assert enhanced_call["temperature"] == 0.2
        with pytest.raises(RateLimitExceededError):
            await service.benchmark(
                {"originalText": "a", "enhancedText": "b", "modelId": "local-llm"}, identifier="ip"
            )

    def test_default_invoker_requires_key(self, monkeypatch):
        monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
        with pytest.raises(ValueError):
            create_service(EngineConfig())
