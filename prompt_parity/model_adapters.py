"""
Model adapter registry: one execution profile per target model.

Each entry is tuned independently (instructions, sampling values and token
budget are not derived from the family). Unregistered ids resolve to a
conservative default profile.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Any


@dataclass(frozen=True)
class ModelFeatures:
    supports_reasoning: bool = False
    supports_streaming: bool = True
    supports_vision: bool = False


@dataclass(frozen=True)
class ExecutionProfile:
    """System instructions and sampling parameters for one model id."""
    model_id: str
    family: str  # gpt, claude, gemini, grok, sora, banana
    system_instructions: str
    temperature: float  # 0-2
    nucleus_p: float  # 0-1
    max_output_tokens: int
    reasoning_bias: float = 0.5  # higher = more verbose, analytical output
    features: ModelFeatures = field(default_factory=ModelFeatures)

    def __post_init__(self):
        if not 0.0 <= self.temperature <= 2.0:
            raise ValueError(f"{self.model_id}: temperature must be within 0..2")
        if not 0.0 <= self.nucleus_p <= 1.0:
            raise ValueError(f"{self.model_id}: nucleus_p must be within 0..1")
        if self.max_output_tokens <= 0:
            raise ValueError(f"{self.model_id}: max_output_tokens must be positive")
        if not 0.0 <= self.reasoning_bias <= 1.0:
            raise ValueError(f"{self.model_id}: reasoning_bias must be within 0..1")

    @property
    def has_instructions(self) -> bool:
        return bool(self.system_instructions.strip())

    def describe(self) -> Dict[str, Any]:
        """Observability metadata; never includes the instruction text itself."""
        return {
            "modelId": self.model_id,
            "family": self.family,
            "temperature": self.temperature,
            "nucleusP": self.nucleus_p,
            "maxOutputTokens": self.max_output_tokens,
            "hasInstructions": self.has_instructions,
            "instructionLength": len(self.system_instructions),
            "reasoningBias": self.reasoning_bias,
            "features": {
                "supportsReasoning": self.features.supports_reasoning,
                "supportsStreaming": self.features.supports_streaming,
                "supportsVision": self.features.supports_vision,
            },
        }


_BUILTIN_PROFILES: List[ExecutionProfile] = [
    # GPT family
    ExecutionProfile(
        model_id="gpt-5.2",
        family="gpt",
        system_instructions="""You are a highly capable AI assistant optimized for precise, actionable responses.

EXECUTION RULES:
1. Follow the prompt structure exactly as given
2. Address every requirement explicitly
3. Use clear section headers for organization
4. Provide specific, implementable details
5. Include examples where applicable
6. End with concrete next steps

QUALITY STANDARDS:
- Be thorough but concise
- Prioritize actionability over explanation
- Structure output for easy scanning
- Validate completeness before responding""",
        temperature=0.7,
        nucleus_p=0.9,
        max_output_tokens=4096,
        reasoning_bias=0.8,
        features=ModelFeatures(supports_reasoning=True, supports_vision=True),
    ),
    ExecutionProfile(
        model_id="gpt-5.1",
        family="gpt",
        system_instructions=(
            "You are a precise AI assistant. Structure your responses clearly with headers "
            "and bullet points. Address all requirements explicitly."
        ),
        temperature=0.6,
        nucleus_p=0.85,
        max_output_tokens=3072,
        reasoning_bias=0.7,
        features=ModelFeatures(supports_reasoning=True, supports_vision=True),
    ),
    # Claude family
    ExecutionProfile(
        model_id="claude-sonnet-4.5",
        family="claude",
        system_instructions="""You are a helpful, harmless and honest AI assistant.

When responding to structured prompts:
1. Parse all requirements systematically
2. Address each section in order
3. Provide detailed, well-reasoned responses
4. Use markdown formatting for clarity
5. Include relevant examples and edge cases
6. Acknowledge constraints explicitly
7. Conclude with actionable recommendations

Your responses should be comprehensive yet focused.""",
        temperature=0.7,
        nucleus_p=0.95,
        max_output_tokens=4096,
        reasoning_bias=0.85,
        features=ModelFeatures(supports_reasoning=True, supports_vision=True),
    ),
    ExecutionProfile(
        model_id="claude-opus-4.1",
        family="claude",
        system_instructions=(
            "Provide exhaustive, deeply analytical responses. Structure with clear hierarchy. "
            "Address edge cases and implications."
        ),
        temperature=0.75,
        nucleus_p=0.95,
        max_output_tokens=8192,
        reasoning_bias=0.95,
        features=ModelFeatures(supports_reasoning=True, supports_vision=True),
    ),
    # Gemini family
    ExecutionProfile(
        model_id="gemini-3",
        family="gemini",
        system_instructions="""For structured prompts:

OUTPUT REQUIREMENTS:
• Use clear section headers (##)
• Include bullet points for lists
• Provide code examples when relevant
• Add implementation considerations
• Structure for scannability

QUALITY FOCUS:
• Complete coverage of requirements
• Practical, actionable guidance
• Clear next steps""",
        temperature=0.7,
        nucleus_p=0.9,
        max_output_tokens=4096,
        reasoning_bias=0.75,
        features=ModelFeatures(supports_reasoning=True, supports_vision=True),
    ),
    ExecutionProfile(
        model_id="gemini-2.5",
        family="gemini",
        system_instructions="Provide structured, clear responses with headers and examples. Be thorough but concise.",
        temperature=0.65,
        nucleus_p=0.85,
        max_output_tokens=3072,
        reasoning_bias=0.7,
        features=ModelFeatures(supports_reasoning=True),
    ),
    # Grok family
    ExecutionProfile(
        model_id="grok-3",
        family="grok",
        system_instructions="""Be direct, insightful, and unfiltered.

FOR STRUCTURED PROMPTS:
- Address requirements in order
- Be specific and actionable
- Include real-world considerations
- Challenge assumptions when relevant
- Provide concrete examples""",
        temperature=0.8,
        nucleus_p=0.9,
        max_output_tokens=4096,
        reasoning_bias=0.7,
        features=ModelFeatures(supports_reasoning=True),
    ),
    ExecutionProfile(
        model_id="grok-2",
        family="grok",
        system_instructions="Be direct and specific. Structure your responses clearly.",
        temperature=0.75,
        nucleus_p=0.85,
        max_output_tokens=2048,
        reasoning_bias=0.6,
    ),
    # Visual generation
    ExecutionProfile(
        model_id="sora",
        family="sora",
        system_instructions="""For structured visual prompts:

VISUAL GENERATION FOCUS:
- Parse visual requirements precisely
- Note composition, lighting, and style
- Consider motion and transitions
- Output detailed scene descriptions
- Include technical parameters""",
        temperature=0.85,
        nucleus_p=0.95,
        max_output_tokens=2048,
        reasoning_bias=0.5,
        features=ModelFeatures(supports_streaming=False, supports_vision=True),
    ),
    ExecutionProfile(
        model_id="nano-banana-pro",
        family="banana",
        system_instructions="""Optimize for fast, structured outputs.

RESPONSE FORMAT:
1. Parse requirements systematically
2. Use markdown headers
3. Be concise but complete
4. Include actionable items
5. End with next steps""",
        temperature=0.6,
        nucleus_p=0.8,
        max_output_tokens=2048,
        reasoning_bias=0.5,
    ),
]

DEFAULT_PROFILE = ExecutionProfile(
    model_id="default",
    family="gpt",
    system_instructions="Provide structured, detailed responses using markdown formatting.",
    temperature=0.7,
    nucleus_p=0.9,
    max_output_tokens=1024,
    reasoning_bias=0.5,
)


class ModelAdapterRegistry:
    """Read-only lookup of execution profiles by model id."""

    def __init__(
        self,
        profiles: Optional[Iterable[ExecutionProfile]] = None,
        default: ExecutionProfile = DEFAULT_PROFILE,
    ):
        """
        Initialize the registry.

        Args:
            profiles: Profiles to register (defaults to the built-in table).
                Later entries override earlier ones with the same id.
            default: Profile returned for unregistered ids
        """
        source = _BUILTIN_PROFILES if profiles is None else profiles
        self._profiles: Dict[str, ExecutionProfile] = {p.model_id: p for p in source}
        self.default = default

    @classmethod
    def with_overrides(cls, overrides: Iterable[ExecutionProfile]) -> "ModelAdapterRegistry":
        """Built-in table plus configured profiles (same id replaces the built-in)."""
        return cls(list(_BUILTIN_PROFILES) + list(overrides))

    def resolve(self, model_id: str) -> ExecutionProfile:
        return self._profiles.get(model_id, self.default)

    def is_registered(self, model_id: str) -> bool:
        return model_id in self._profiles

    def registered_ids(self) -> List[str]:
        return list(self._profiles.keys())

    def get_ids_by_family(self, family: str) -> List[str]:
        return [p.model_id for p in self._profiles.values() if p.family == family]

    def describe(self, model_id: str) -> Dict[str, Any]:
        profile = self.resolve(model_id)
        info = profile.describe()
        info["requestedModelId"] = model_id
        info["isDefault"] = not self.is_registered(model_id)
        return info
