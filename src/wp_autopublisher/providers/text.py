"""Text generation provider for article drafting.

Perplexity (the default) is called directly over its OpenAI-compatible
chat completions endpoint so HTTP status codes map to stable error codes.
Other vendors go through Agno's unified model interface.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

import httpx

from ..core.types import Failure, Result, Success
from .config import ProviderConfig, TextProviderConfig, load_provider_config

_logger = logging.getLogger("ai_calls")

# Type for AI event callback
AIEventCallback = Callable[[dict[str, Any]], Awaitable[None]] | None

DEFAULT_MODEL = "sonar-pro"
DEFAULT_MAX_TOKENS = 20000
COST_PER_1K_TOKENS = 0.002

ARTICLE_SYSTEM_PROMPT = (
    "You are an expert content writer and researcher. Generate well-researched, engaging "
    "articles with proper structure, citations, and SEO optimization. Always provide accurate, "
    "up-to-date information with proper sourcing."
)

PERPLEXITY_MODELS = ("sonar-pro", "sonar", "llama-3.1-8b-instruct", "llama-3.1-70b-instruct")
PERPLEXITY_MODEL_ALIASES = {
    "gpt-4": "sonar-pro",
    "gpt-4-turbo": "sonar-pro",
    "gpt-3.5-turbo": "sonar",
    "gpt-4o": "sonar-pro",
    "claude-3-5-sonnet": "sonar-pro",
    "llama-3.1-sonar-large-128k-online": "sonar-pro",
    "llama-3.1-sonar-huge-128k-online": "sonar-pro",
}


class ProviderError(Exception):
    """Generation provider failure with a stable code."""

    def __init__(
        self,
        message: str,
        code: str,
        provider: str,
        is_retryable: bool = False,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.provider = provider
        self.is_retryable = is_retryable
        self.status_code = status_code

    def to_failure(self) -> Failure:
        return Failure(
            str(self),
            {
                "code": self.code,
                "provider": self.provider,
                "is_retryable": self.is_retryable,
                "status_code": self.status_code,
            },
        )


# Known provider error codes with retry guidance
PROVIDER_ERROR_CODES = {
    "AUTHENTICATION_FAILED": {
        "description": "API key missing or rejected",
        "user_message": "The AI provider rejected the API key. Check the configured key.",
        "is_retryable": False,
    },
    "RATE_LIMIT_EXCEEDED": {
        "description": "Provider rate limit reached",
        "user_message": "The AI provider rate limit was reached. Try again later.",
        "is_retryable": True,
    },
    "INVALID_REQUEST": {
        "description": "Provider rejected the request payload",
        "user_message": "The AI provider rejected the request. Check model and parameters.",
        "is_retryable": False,
    },
    "EMPTY_RESPONSE": {
        "description": "Provider returned no content",
        "user_message": "The AI provider returned an empty response.",
        "is_retryable": True,
    },
    "MALFORMED_RESPONSE": {
        "description": "Provider response body was not the expected JSON",
        "user_message": "The AI provider returned an unreadable response.",
        "is_retryable": True,
    },
    "SERVICE_UNAVAILABLE": {
        "description": "Provider unavailable or returned an unexpected status",
        "user_message": "The AI provider is unavailable. Try again later.",
        "is_retryable": True,
    },
    "TIMEOUT": {
        "description": "Provider did not answer within the timeout",
        "user_message": "The AI provider timed out.",
        "is_retryable": True,
    },
    "NETWORK_ERROR": {
        "description": "Transport failure reaching the provider",
        "user_message": "Could not reach the AI provider.",
        "is_retryable": True,
    },
}


def _provider_error(code: str, provider: str, message: str | None = None, status_code: int | None = None) -> ProviderError:
    info = PROVIDER_ERROR_CODES[code]
    return ProviderError(
        message or info["description"],
        code=code,
        provider=provider,
        is_retryable=info["is_retryable"],
        status_code=status_code,
    )


def error_code_for_status(status_code: int) -> str:
    """Map an HTTP status from the provider to a stable error code."""
    if status_code == 401:
        return "AUTHENTICATION_FAILED"
    if status_code == 429:
        return "RATE_LIMIT_EXCEEDED"
    if status_code == 400:
        return "INVALID_REQUEST"
    return "SERVICE_UNAVAILABLE"


def validate_perplexity_model(model: str | None) -> str:
    """Return a model id Perplexity accepts, mapping known aliases."""
    if not model:
        return DEFAULT_MODEL
    if model in PERPLEXITY_MODELS:
        return model
    mapped = PERPLEXITY_MODEL_ALIASES.get(model)
    if mapped:
        _logger.warning(f"Auto-mapped model '{model}' to '{mapped}'")
        return mapped
    _logger.warning(f"Unknown model '{model}', using fallback '{DEFAULT_MODEL}'")
    return DEFAULT_MODEL


def estimate_cost(total_tokens: int) -> float:
    return (total_tokens / 1000) * COST_PER_1K_TOKENS


@dataclass
class GenerationResponse:
    """Raw text returned by a generation provider plus call metadata."""

    text: str
    provider: str
    model: str
    duration_seconds: float = 0.0
    total_tokens: int = 0
    cost: float = 0.0
    citations: list[str] = field(default_factory=list)


def _create_agno_model(provider_name: str, provider_config: TextProviderConfig) -> Any:
    """Create an Agno model instance for a non-Perplexity provider."""
    model_id = provider_config.model
    api_key = provider_config.get_api_key()
    base_url = provider_config.get_base_url()
    kind = provider_config.type

    if kind == "openai":
        from agno.models.openai import OpenAIChat
        return OpenAIChat(id=model_id, api_key=api_key)

    elif kind == "anthropic":
        from agno.models.anthropic import Claude
        return Claude(id=model_id, api_key=api_key)

    elif kind == "groq":
        from agno.models.groq import Groq
        return Groq(id=model_id, api_key=api_key)

    elif kind == "gemini":
        from agno.models.google import Gemini
        return Gemini(id=model_id, api_key=api_key)

    elif kind == "ollama":
        from agno.models.ollama import Ollama
        return Ollama(id=model_id, host=base_url or "http://localhost:11434")

    else:
        # Any OpenAI-compatible endpoint
        from agno.models.openai.like import OpenAILike
        return OpenAILike(id=model_id, api_key=api_key, base_url=base_url)


class TextProvider:
    """Article text generation across configured providers.

    Providers are tried in priority order. With ``fallback_on_error`` the
    next provider is tried after a failure; otherwise the first failure is
    returned.

    Usage:
        provider = TextProvider()
        result = await provider.generate(prompt, system=ARTICLE_SYSTEM_PROMPT)
        if result.is_success():
            text = result.value.text
    """

    def __init__(
        self,
        config: ProviderConfig | None = None,
        event_callback: AIEventCallback = None,
        provider_override: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize the text provider.

        Args:
            config: Provider configuration. If None, loads from default config file.
            event_callback: Optional callback for AI events (for progress tracking).
            provider_override: Provider name to try first.
            http_client: Optional pre-built client (tests inject a mock transport).
        """
        self.config = config or load_provider_config()
        self._event_callback = event_callback
        self._provider_override = provider_override
        self._http_client = http_client
        self._owns_client = http_client is None
        self._current_provider: str | None = None
        self._current_model: str | None = None
        self._total_calls = 0
        self._total_cost = 0.0

    async def _emit_event(self, event: dict[str, Any]) -> None:
        """Emit an AI event if callback is set."""
        if self._event_callback:
            await self._event_callback(event)

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=float(self.config.provider_settings.timeout_seconds))
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client if this provider created it."""
        if self._http_client and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None

    def _get_providers(self) -> list[tuple[str, TextProviderConfig]]:
        """Get list of providers to try, respecting override."""
        providers = list(self.config.get_enabled_text_providers())
        if self._provider_override:
            override_name = self._provider_override.lower()
            if not any(name == override_name for name, _ in providers) and override_name in self.config.text_providers:
                providers.insert(0, (override_name, self.config.text_providers[override_name]))
            else:
                providers = sorted(providers, key=lambda x: 0 if x[0] == override_name else 1)
        return providers

    async def generate(
        self,
        prompt: str,
        system: str | None = ARTICLE_SYSTEM_PROMPT,
        task: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        model: str | None = None,
    ) -> Result[GenerationResponse]:
        """Generate a completion for a single instruction string.

        Args:
            prompt: The user prompt to send to the model.
            system: System prompt for context.
            task: Optional task name for tracking.
            temperature: Sampling temperature.
            max_tokens: Maximum tokens to generate.
            model: Model id override for the first provider.

        Returns:
            Success with the response, or Failure carrying a stable ``code``.
        """
        providers = self._get_providers()
        if not providers:
            return Failure("No text providers are enabled", {"code": "SERVICE_UNAVAILABLE", "is_retryable": False})

        failed_providers: list[str] = []
        last_error: ProviderError | None = None

        for index, (provider_name, provider_config) in enumerate(providers):
            model_id = (model if index == 0 and model else None) or provider_config.model
            if provider_config.type == "perplexity":
                model_id = validate_perplexity_model(model_id)

            self._current_provider = provider_name
            self._current_model = model_id

            await self._emit_event({
                "type": "text_call",
                "provider": provider_name,
                "model": model_id,
                "prompt_preview": prompt[:200],
                "task": task,
                "failed_providers": failed_providers.copy(),
            })
            _logger.info(
                f"AI_REQUEST | provider:{provider_name} | model:{model_id} | task:{task}\n"
                f"--- SYSTEM ---\n{system or '(none)'}\n"
                f"--- PROMPT ---\n{prompt}\n"
                f"--- END REQUEST ---"
            )

            start_time = time.time()
            try:
                if provider_config.type == "perplexity":
                    response = await self._generate_perplexity(
                        provider_name, provider_config, model_id, prompt, system, temperature, max_tokens
                    )
                else:
                    response = await self._generate_agno(provider_name, provider_config, model_id, prompt, system)
            except ProviderError as e:
                last_error = e
                failed_providers.append(provider_name)
                _logger.warning(f"Provider {provider_name} failed: {e.code} | {e}")
                await self._emit_event({
                    "type": "text_error",
                    "provider": provider_name,
                    "error": str(e)[:100],
                    "code": e.code,
                    "failed_providers": failed_providers.copy(),
                })
                if self.config.provider_settings.fallback_on_error:
                    continue
                return e.to_failure()

            response.duration_seconds = time.time() - start_time
            self._total_calls += 1
            self._total_cost += response.cost

            _logger.info(
                f"AI_RESPONSE | provider:{provider_name} | model:{response.model} | task:{task} | "
                f"duration:{response.duration_seconds:.2f}s | tokens:{response.total_tokens} | "
                f"cost:${response.cost:.4f}\n"
                f"--- RESPONSE ---\n{response.text}\n"
                f"--- END RESPONSE ---"
            )
            await self._emit_event({
                "type": "text_response",
                "provider": provider_name,
                "model": response.model,
                "response_preview": response.text[:200],
                "duration_seconds": response.duration_seconds,
                "cost_usd": response.cost,
                "total_calls": self._total_calls,
                "total_cost": self._total_cost,
                "failed_providers": failed_providers.copy(),
            })
            return Success(response)

        if last_error is None:
            return Failure("No text provider produced a response", {"code": "SERVICE_UNAVAILABLE", "is_retryable": False})
        return last_error.to_failure()

    async def _generate_perplexity(
        self,
        provider_name: str,
        provider_config: TextProviderConfig,
        model_id: str,
        prompt: str,
        system: str | None,
        temperature: float,
        max_tokens: int | None,
    ) -> GenerationResponse:
        """Call an OpenAI-compatible chat completions endpoint.

        Raises:
            ProviderError: On any HTTP, transport or payload failure.
        """
        api_key = provider_config.get_api_key()
        if not api_key:
            raise _provider_error(
                "AUTHENTICATION_FAILED", provider_name, f"API key not set ({provider_config.api_key_env})"
            )

        base_url = (provider_config.get_base_url() or "https://api.perplexity.ai").rstrip("/")
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        payload = {
            "model": model_id,
            "messages": messages,
            "max_tokens": max_tokens or DEFAULT_MAX_TOKENS,
            "temperature": temperature,
            "top_p": 0.9,
            "return_citations": True,
            "return_images": False,
        }

        client = await self._get_http_client()
        try:
            response = await client.post(
                f"{base_url}/chat/completions",
                json=payload,
                headers={
                    "Authorization": f"Bearer {api_key}",
                    "Content-Type": "application/json",
                    "User-Agent": "wp-autopublisher/0.1",
                },
                timeout=float(provider_config.timeout),
            )
        except httpx.TimeoutException as e:
            raise _provider_error("TIMEOUT", provider_name, f"Timed out after {provider_config.timeout}s: {e}") from e
        except httpx.HTTPError as e:
            raise _provider_error("NETWORK_ERROR", provider_name, str(e)) from e

        if response.status_code >= 400:
            code = error_code_for_status(response.status_code)
            detail = ""
            try:
                detail = (response.json().get("error") or {}).get("message", "")
            except (ValueError, AttributeError):
                detail = response.text[:200]
            message = f"HTTP {response.status_code}: {detail or PROVIDER_ERROR_CODES[code]['description']}"
            raise _provider_error(code, provider_name, message, status_code=response.status_code)

        try:
            data = response.json()
            choices = data.get("choices") or []
            text = (choices[0].get("message") or {}).get("content") if choices else None
        except (ValueError, AttributeError, IndexError) as e:
            raise _provider_error("MALFORMED_RESPONSE", provider_name, str(e), status_code=response.status_code) from e

        text = str(text or "")
        if not text.strip():
            raise _provider_error("EMPTY_RESPONSE", provider_name, f"Empty response from {provider_name}")

        total_tokens = int((data.get("usage") or {}).get("total_tokens") or 0)
        return GenerationResponse(
            text=text,
            provider=provider_name,
            model=data.get("model") or model_id,
            total_tokens=total_tokens,
            cost=estimate_cost(total_tokens),
            citations=[c for c in data.get("citations") or [] if isinstance(c, str)],
        )

    async def _generate_agno(
        self,
        provider_name: str,
        provider_config: TextProviderConfig,
        model_id: str,
        prompt: str,
        system: str | None,
    ) -> GenerationResponse:
        """Run the prompt through an Agno agent.

        Raises:
            ProviderError: If the agent fails or returns nothing.
        """
        from agno.agent import Agent

        model = _create_agno_model(provider_name, provider_config.model_copy(update={"model": model_id}))
        agent = Agent(model=model, instructions=system, markdown=False)

        try:
            response = await agent.arun(prompt)
        except Exception as e:
            message = str(e)
            lowered = message.lower()
            if "401" in message or "unauthorized" in lowered or "api key" in lowered:
                code = "AUTHENTICATION_FAILED"
            elif "429" in message or "rate limit" in lowered:
                code = "RATE_LIMIT_EXCEEDED"
            elif "timeout" in lowered or "timed out" in lowered:
                code = "TIMEOUT"
            else:
                code = "SERVICE_UNAVAILABLE"
            raise _provider_error(code, provider_name, message) from e

        text = response.content or ""
        # Reasoning models may put the answer in reasoning_content
        if not text and getattr(response, "reasoning_content", None):
            text = response.reasoning_content
        if not isinstance(text, str) or not text.strip():
            raise _provider_error("EMPTY_RESPONSE", provider_name, f"Empty response from {provider_name}")

        metrics = getattr(response, "metrics", None) or {}
        total_tokens = 0
        if isinstance(metrics, dict):
            tokens = metrics.get("total_tokens") or 0
            total_tokens = int(sum(tokens) if isinstance(tokens, list) else tokens)

        return GenerationResponse(
            text=text,
            provider=provider_name,
            model=getattr(response, "model", None) or model_id,
            total_tokens=total_tokens,
            cost=estimate_cost(total_tokens),
        )

    @property
    def current_provider(self) -> str | None:
        """Get the name of the last used provider."""
        return self._current_provider

    @property
    def current_model(self) -> str | None:
        """Get the model id of the last call."""
        return self._current_model
