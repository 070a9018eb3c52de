"""
Recognizer rule table for structural prompt analysis.

Each rule binds a regular expression to one StructuralCategory. The analyzer walks
the rules of a category in table order and the first match wins, so more specific
phrasing is listed before generic phrasing. Patterns cover Swedish and English.

The table is pure data: extend or localize it by passing extra rules to
StructuralAnalyzer (or via the `recognizers` section of the engine config).
"""

import re
from dataclasses import dataclass, field
from typing import List, Dict, Iterable

from .analysis_schema import StructuralCategory


@dataclass(frozen=True)
class RecognizerRule:
    """A single {category, rule, matcher} entry."""
    category: StructuralCategory
    name: str
    pattern: str
    flags: int = re.IGNORECASE
    matcher: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "matcher", re.compile(self.pattern, self.flags))

    def search(self, text: str):
        return self.matcher.search(text)


_C = StructuralCategory

DEFAULT_RULES: List[RecognizerRule] = [
    # Task: imperative verbs at the start of the prompt, or explicit requests
    RecognizerRule(_C.TASK, "sv-imperative", r"^(skriv|skapa|gör|generera|analysera|sammanfatta|förklara|jämför|lista|beskriv)"),
    RecognizerRule(_C.TASK, "en-imperative", r"^(write|create|make|generate|analyze|summarize|explain|compare|list|describe)"),
    RecognizerRule(_C.TASK, "sv-want", r"jag vill (ha|att du)"),
    RecognizerRule(_C.TASK, "sv-can-you", r"kan du (hjälpa|skriva|skapa)"),
    RecognizerRule(_C.TASK, "en-can-you", r"can you (help|write|create)"),
    RecognizerRule(_C.TASK, "en-want", r"i (want|need) you to"),

    # Role: persona assertions
    RecognizerRule(_C.ROLE, "sv-you-are", r"du är (en |ett )?(.+?)(?:\.|,|som)"),
    RecognizerRule(_C.ROLE, "sv-act-as", r"agera som (en |ett )?(.+?)(?:\.|,)"),
    RecognizerRule(_C.ROLE, "sv-as-expert", r"som (en |ett )?(expert|specialist|konsult|coach|rådgivare|utvecklare|designer)"),
    RecognizerRule(_C.ROLE, "en-role-is", r"your role is"),
    RecognizerRule(_C.ROLE, "en-act-as", r"act as"),
    RecognizerRule(_C.ROLE, "en-you-are", r"you are (a|an) (.+?)(?:\.|,|who)"),

    # Instructions: enumerations and explicit step/requirement markers
    RecognizerRule(_C.INSTRUCTIONS, "numbered-list", r"\d+\.\s+", re.IGNORECASE | re.MULTILINE),
    RecognizerRule(_C.INSTRUCTIONS, "bullet-list", r"[-•]\s+", re.IGNORECASE | re.MULTILINE),
    RecognizerRule(_C.INSTRUCTIONS, "sv-step-by-step", r"steg för steg"),
    RecognizerRule(_C.INSTRUCTIONS, "sv-instructions", r"instruktioner?:"),
    RecognizerRule(_C.INSTRUCTIONS, "sv-requirements", r"krav:"),
    RecognizerRule(_C.INSTRUCTIONS, "sv-must-contain", r"ska innehålla"),
    RecognizerRule(_C.INSTRUCTIONS, "en-step-by-step", r"step by step"),
    RecognizerRule(_C.INSTRUCTIONS, "en-instructions", r"(instructions?|requirements):"),

    # Parameters: quantities, length/tone/language qualifiers
    RecognizerRule(_C.PARAMETERS, "sv-max", r"max(imalt)?\s+\d+"),
    RecognizerRule(_C.PARAMETERS, "sv-min", r"minst\s+\d+"),
    RecognizerRule(_C.PARAMETERS, "sv-between", r"mellan\s+\d+"),
    RecognizerRule(_C.PARAMETERS, "sv-length", r"(kort|medel|lång|koncis|detaljerad)"),
    RecognizerRule(_C.PARAMETERS, "tone-register", r"(formell|informell|professionell|casual)"),
    RecognizerRule(_C.PARAMETERS, "language", r"(svenska|engelska|english|swedish)"),
    RecognizerRule(_C.PARAMETERS, "sv-tone", r"ton:"),
    RecognizerRule(_C.PARAMETERS, "sv-language", r"språk:"),
    RecognizerRule(_C.PARAMETERS, "en-at-least", r"at least\s+\d+"),
    RecognizerRule(_C.PARAMETERS, "en-length", r"\b(brief|concise|detailed|formal|informal|professional)\b"),
    RecognizerRule(_C.PARAMETERS, "en-tone", r"(tone|language):"),

    # Output format directives
    RecognizerRule(_C.OUTPUT_FORMAT, "format-label", r"format:"),
    RecognizerRule(_C.OUTPUT_FORMAT, "sv-as-a", r"som (en |ett )?(lista|tabell|json|markdown|kod|bullet points)"),
    RecognizerRule(_C.OUTPUT_FORMAT, "sv-structure-as", r"strukturera som"),
    RecognizerRule(_C.OUTPUT_FORMAT, "sv-return-as", r"returnera som"),
    RecognizerRule(_C.OUTPUT_FORMAT, "output-label", r"output:"),
    RecognizerRule(_C.OUTPUT_FORMAT, "en-as-a", r"\bas (a |an )?(list|table|json|markdown|bullet points)\b"),
    RecognizerRule(_C.OUTPUT_FORMAT, "en-return-as", r"(return|format|structure) (it |the answer )?as"),

    # Constraints: exclusion phrasing
    RecognizerRule(_C.CONSTRAINTS, "sv-avoid", r"undvik"),
    RecognizerRule(_C.CONSTRAINTS, "en-avoid", r"avoid"),
    RecognizerRule(_C.CONSTRAINTS, "sv-do-not", r"inte (inkludera|nämna|använda)"),
    RecognizerRule(_C.CONSTRAINTS, "sv-no-cliches", r"inga? (klichéer|klyschor|generiska)"),
    RecognizerRule(_C.CONSTRAINTS, "sv-skip", r"skippa"),
    RecognizerRule(_C.CONSTRAINTS, "sv-omit", r"utelämna"),
    RecognizerRule(_C.CONSTRAINTS, "en-do-not", r"(do not|don't|never) (include|mention|use)"),
]


def group_rules(rules: Iterable[RecognizerRule]) -> Dict[StructuralCategory, List[RecognizerRule]]:
    """Bucket rules by category, preserving table order within each bucket."""
    grouped: Dict[StructuralCategory, List[RecognizerRule]] = {c: [] for c in StructuralCategory}
    for rule in rules:
        grouped[rule.category].append(rule)
    return grouped


@dataclass(frozen=True)
class QualitySignals:
    """Whole-prompt signals used to assign a quality tier to present categories."""
    specificity: re.Pattern = re.compile(
        r"\b(specifikt|exakt|precis|detaljerad|specifically|exactly|precise|detailed)\b", re.IGNORECASE
    )
    numbers: re.Pattern = re.compile(
        r"\b\d+\s*(ord|meningar|punkter|sidor|minuter|words|sentences|points|bullets|pages|minutes)\b",
        re.IGNORECASE,
    )
    examples: re.Pattern = re.compile(
        r"\b(exempel|t\.ex\.|e\.g\.|som|såsom|example|for instance|such as)\b", re.IGNORECASE
    )
    structure: re.Pattern = re.compile(r"\n.*\n")
    vague: re.Pattern = re.compile(
        r"\b(något|lite|bra|fin|trevlig|intressant|something|stuff|nice|interesting)\b", re.IGNORECASE
    )
    min_words: int = 10


DEFAULT_SIGNALS = QualitySignals()
