"""
Exception types raised across the prompt quality engine.
"""

from typing import Optional


class PromptParityError(Exception):
    """Base class for all engine errors."""


class InvocationError(PromptParityError):
    """The model boundary failed, returned nothing usable, or timed out."""

    def __init__(self, message: str, model_id: Optional[str] = None):
        super().__init__(message)
        self.model_id = model_id


class PromptValidationError(PromptParityError):
    """A request payload was malformed (wrong type, missing field, empty prompt)."""


class RateLimitExceededError(PromptParityError):
    """The caller exhausted its request window; nothing was executed."""

    def __init__(self, identifier: str, decision):
        super().__init__(f"Rate limit exceeded for {identifier}")
        self.identifier = identifier
        self.decision = decision
