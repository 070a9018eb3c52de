#!/usr/bin/env python3
"""
Analyze prompts from the command line and print the quality report.

Usage:
    python scripts/analyze_prompt.py "hur blir jag bra på chins?"
    python scripts/analyze_prompt.py --json "Write a poem"
"""

import json
import sys
sys.path.insert(0, '.')

from prompt_parity.quality_scorer import analyze_prompt, format_analysis_report


SAMPLE_PROMPTS = [
    "hur blir jag bra på chins?",
    "Write something nice",
    (
        "Write a 4-week pull-up training plan for a beginner. "
        "You are an experienced strength coach.\n"
        "Instructions:\n1. Start with an assessment\n2. Progress weekly\n"
        "Max 300 words, professional tone, in English.\n"
        "Format: a table per week.\nAvoid generic motivational phrases."
    ),
]


def main(argv):
    as_json = "--json" in argv
    prompts = [a for a in argv if a != "--json"] or SAMPLE_PROMPTS

    for prompt in prompts:
        result = analyze_prompt(prompt)
        if as_json:
            print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        else:
            print(f"\n📝 Prompt: \"{prompt[:60]}{'...' if len(prompt) > 60 else ''}\"")
            print(format_analysis_report(result))


if __name__ == "__main__":
    main(sys.argv[1:])
