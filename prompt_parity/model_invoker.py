"""
ModelInvoker boundary: text in, text out, given sampling parameters.

The engine depends only on the abstract ModelInvoker. OpenRouterInvoker talks to
any OpenAI-compatible /chat/completions endpoint (OpenRouter by default) with
httpx; CallableInvoker wraps a plain coroutine function for stubs and tests.
"""

import logging
import os
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Dict, List, Optional, Any

import httpx
from dotenv import load_dotenv

from .exceptions import InvocationError

load_dotenv()

logger = logging.getLogger(__name__)


class ModelInvoker(ABC):
    """Any transport able to turn a prompt into generated text."""

    @abstractmethod
    async def invoke(
        self,
        model_id: str,
        user_text: str,
        system_instructions: Optional[str] = None,
        temperature: float = 1.0,
        nucleus_p: float = 1.0,
        max_output_tokens: int = 1024,
        timeout: Optional[float] = None,
    ) -> str:
        """
        Generate text for a prompt.

        Raises:
            InvocationError: on any transport, provider or timeout failure
        """


class OpenRouterInvoker(ModelInvoker):
    """
    Invoke models through an OpenAI-compatible chat completions API.

    A fresh AsyncClient is opened per call unless one is injected, so the
    invoker holds no connection state of its own.
    """

    OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = 120.0,
        model_aliases: Optional[Dict[str, str]] = None,
        client: Optional[httpx.AsyncClient] = None,
        app_title: str = "Prompt Parity Engine",
    ):
        """
        Initialize the invoker.

        Args:
            api_key: API key (defaults to OPENROUTER_API_KEY env var)
            base_url: Endpoint root (defaults to OpenRouter)
            timeout: Default request timeout in seconds
            model_aliases: Maps registry model ids to provider model ids
            client: Shared AsyncClient, owned by the caller
            app_title: Sent as X-Title for provider-side attribution
        """
        self.api_key = api_key or os.getenv("OPENROUTER_API_KEY")
        if not self.api_key:
            raise ValueError("OPENROUTER_API_KEY not found in environment or parameters")

        self.base_url = (base_url or self.OPENROUTER_BASE_URL).rstrip("/")
        self.timeout = timeout
        self.model_aliases = dict(model_aliases or {})
        self.app_title = app_title
        self._client = client

    def provider_model(self, model_id: str) -> str:
        return self.model_aliases.get(model_id, model_id)

    def build_payload(
        self,
        model_id: str,
        user_text: str,
        system_instructions: Optional[str],
        temperature: float,
        nucleus_p: float,
        max_output_tokens: int,
    ) -> Dict[str, Any]:
        messages: List[Dict[str, str]] = []
        if system_instructions:
            messages.append({"role": "system", "content": system_instructions})
        messages.append({"role": "user", "content": user_text})

        return {
            "model": self.provider_model(model_id),
            "messages": messages,
            "temperature": temperature,
            "top_p": nucleus_p,
            "max_tokens": max_output_tokens,
        }

    async def invoke(
        self,
        model_id: str,
        user_text: str,
        system_instructions: Optional[str] = None,
        temperature: float = 1.0,
        nucleus_p: float = 1.0,
        max_output_tokens: int = 1024,
        timeout: Optional[float] = None,
    ) -> str:
        payload = self.build_payload(
            model_id, user_text, system_instructions, temperature, nucleus_p, max_output_tokens
        )
        request_timeout = timeout if timeout is not None else self.timeout
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "X-Title": self.app_title,
        }
        url = f"{self.base_url}/chat/completions"

        try:
            if self._client is not None:
                response = await self._client.post(url, headers=headers, json=payload, timeout=request_timeout)
            else:
                async with httpx.AsyncClient(timeout=request_timeout) as client:
                    response = await client.post(url, headers=headers, json=payload)
        except httpx.TimeoutException:
            raise InvocationError(f"Request timed out after {request_timeout}s", model_id)
        except httpx.HTTPError as e:
            raise InvocationError(f"Transport error: {e}", model_id)

        if response.status_code != 200:
            raise InvocationError(f"HTTP {response.status_code}: {response.text}", model_id)

        try:
            data = response.json()
        except ValueError:
            raise InvocationError("Response body is not JSON", model_id)

        choices = data.get("choices", []) if isinstance(data, dict) else []
        if not choices:
            raise InvocationError("No choices in response", model_id)

        choice = choices[0] if isinstance(choices[0], dict) else {}
        message = choice.get("message") or {}
        content = message.get("content") if isinstance(message, dict) else None
        if not (isinstance(content, str) and content.strip()):
            raise InvocationError("Empty completion", model_id)

        logger.debug(
            "Invoked %s (finish_reason=%s, usage=%s)",
            payload["model"],
            choice.get("finish_reason", "unknown"),
            data.get("usage", {}),
        )
        return content


InvokeFn = Callable[..., Awaitable[str]]


class CallableInvoker(ModelInvoker):
    """Adapts a coroutine function with the invoke() keyword signature."""

    def __init__(self, fn: InvokeFn):
        self.fn = fn
        self.calls: List[Dict[str, Any]] = []

    async def invoke(
        self,
        model_id: str,
        user_text: str,
        system_instructions: Optional[str] = None,
        temperature: float = 1.0,
        nucleus_p: float = 1.0,
        max_output_tokens: int = 1024,
        timeout: Optional[float] = None,
    ) -> str:
        call = {
            "model_id": model_id,
            "user_text": user_text,
            "system_instructions": system_instructions,
            "temperature": temperature,
            "nucleus_p": nucleus_p,
            "max_output_tokens": max_output_tokens,
            "timeout": timeout,
        }
        self.calls.append(call)
        return await self.fn(**call)
