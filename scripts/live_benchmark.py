#!/usr/bin/env python3
"""
Live dual-path benchmark against OpenRouter.

Analyzes a prompt, enhances it, then runs the original and enhanced versions
side by side on one model and prints the parity verdict.
Requires OPENROUTER_API_KEY in the environment or .env; set PROMPT_PARITY_CONFIG
to use a configuration file other than config/engine.yaml.
"""

import asyncio
import logging
import sys
sys.path.insert(0, '.')

from prompt_parity.config_loader import load_engine_config
from prompt_parity.exceptions import RateLimitExceededError
from prompt_parity.service import create_service


async def run_live_benchmark(prompt: str, model_id: str):
    print("=" * 60)
    print("LIVE BENCHMARK: Dual-Path Execution")
    print("=" * 60)

    config = load_engine_config()
    service = create_service(config)

    analysis = service.analyze(prompt)
    print(f"\nPrompt: \"{prompt}\"")
    print(f"Score: {analysis.score}/100 ({analysis.grade})")
    print(f"Missing: {', '.join(c.value for c in analysis.missing_categories) or 'nothing'}")

    print("\n" + "-" * 60)
    print("Enhancing prompt...")
    print("-" * 60)

    try:
        enhancement = await service.enhance({"prompt": prompt}, identifier="live-benchmark")
    except RateLimitExceededError as e:
        print(f"✗ {e} (resets at {e.decision.reset_at.isoformat()})")
        return None

    print(f"✓ Mode: {enhancement.mode} (quality {enhancement.quality_score})")
    print(f"\n{enhancement.enhanced}")

    print("\n" + "-" * 60)
    print(f"Running both paths on {model_id}...")
    print("-" * 60)

    report = await service.benchmark(
        {"originalText": prompt, "enhancedText": enhancement.enhanced, "modelId": model_id},
        identifier="live-benchmark",
    )

    for label, outcome in (("A (original)", report.output_a), ("B (enhanced)", report.output_b)):
        status = "✓" if not outcome.failed else "✗"
        print(f"\n  {status} Output {label}")
        print(f"    Latency: {outcome.latency_ms:.0f}ms")
        print(f"    Length: {outcome.metrics.length}")
        print(f"    Structure: {outcome.metrics.structure_score}")
        print(f"    Specificity: {outcome.metrics.specificity_score}")
        if outcome.failed:
            print(f"    Error: {outcome.error}")
        else:
            content = outcome.text[:200] + "..." if len(outcome.text) > 200 else outcome.text
            print(f"    Response: {content}")

    verdict = report.verdict
    print("\n" + "=" * 60)
    print("VERDICT")
    print("=" * 60)
    print(f"Accepted: {verdict.accepted} ({verdict.criteria_met}/3 criteria)")
    print(f"Length ratio: {verdict.length_ratio:.2f}x")
    print(f"Structure delta: {verdict.structure_delta:+d}")
    print(f"Specificity delta: {verdict.specificity_delta:+d}")
    for reason in verdict.reasons:
        print(f"  - {reason}")

    return report


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    prompt = sys.argv[1] if len(sys.argv) > 1 else "hur blir jag bra på chins?"
    model_id = sys.argv[2] if len(sys.argv) > 2 else "gpt-5.1"
    report = asyncio.run(run_live_benchmark(prompt, model_id))
    if report is not None:
        print("\n✓ Live benchmark completed!")
