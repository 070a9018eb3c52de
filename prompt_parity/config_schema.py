from typing import List, Dict, Optional
from pydantic import BaseModel, Field, field_validator

from .analysis_schema import StructuralCategory


class InvokerSettings(BaseModel):
    base_url: str = "https://openrouter.ai/api/v1"
    api_key: Optional[str] = None  # falls back to OPENROUTER_API_KEY
    timeout_seconds: float = 120.0
    model_aliases: Dict[str, str] = Field(default_factory=dict)

    @field_validator('api_key', mode='before')
    def unresolved_env_is_missing(cls, v):
        # ${VAR} left in place by the loader means the variable is unset
        if isinstance(v, str) and (not v or v.startswith("${")):
            return None
        return v


class BenchmarkSettings(BaseModel):
    timeout_seconds: float = Field(default=60.0, gt=0)


class RateLimitSettings(BaseModel):
    max_requests: int = Field(default=5, gt=0)
    window_seconds: float = Field(default=60.0, gt=0)
    purge_interval_seconds: float = Field(default=60.0, ge=0)


class RewriterSettings(BaseModel):
    model_id: str = "gpt-4o-mini"
    temperatures: List[float] = Field(default_factory=lambda: [0.5, 0.65], min_length=1)
    min_multiplier: float = 3.0
    max_multiplier: float = 10.0
    max_output_tokens: int = Field(default=1024, gt=0)


class FeaturesConfig(BaseModel):
    supports_reasoning: bool = False
    supports_streaming: bool = True
    supports_vision: bool = False


class ProfileConfig(BaseModel):
    model_id: str
    family: str
    system_instructions: str = ""
    temperature: float = Field(ge=0.0, le=2.0)
    nucleus_p: float = Field(ge=0.0, le=1.0)
    max_output_tokens: int = Field(gt=0)
    reasoning_bias: float = Field(default=0.5, ge=0.0, le=1.0)
    features: FeaturesConfig = Field(default_factory=FeaturesConfig)


class RecognizerRuleConfig(BaseModel):
    category: StructuralCategory
    name: str
    pattern: str

    @field_validator('category', mode='before')
    def accept_snake_case(cls, v):
        if v == "output_format":
            return StructuralCategory.OUTPUT_FORMAT.value
        return v


class EngineConfig(BaseModel):
    invoker: InvokerSettings = Field(default_factory=InvokerSettings)
    benchmark: BenchmarkSettings = Field(default_factory=BenchmarkSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    rewriter: RewriterSettings = Field(default_factory=RewriterSettings)
    profiles: List[ProfileConfig] = Field(default_factory=list)
    recognizers: List[RecognizerRuleConfig] = Field(default_factory=list)
