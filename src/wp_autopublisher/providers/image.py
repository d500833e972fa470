"""AI image generation through OpenAI DALL-E.

Returns the temporary URL from the API. The pipeline downloads it and
re-hosts it on the publishing target before it is considered durable.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import openai
from openai import AsyncOpenAI
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..constants.status import ImageSource
from ..images.base import GeneratedImage, IImageGenerator, ImageGenerationError, ImageRequest
from ..images.prompts import build_dalle_prompt
from .config import ImageProviderConfig

_logger = logging.getLogger("ai_calls")

DEFAULT_DALLE_SIZE = "1792x1024"

TRANSIENT_OPENAI_ERRORS = (
    openai.APIConnectionError,
    openai.RateLimitError,
    openai.InternalServerError,
)


def parse_dimensions(size: str) -> tuple[int, int]:
    """Parse ``WIDTHxHEIGHT``."""
    width, _, height = size.partition("x")
    return int(width), int(height)


class DalleImageGenerator(IImageGenerator):
    """DALL-E 3 image generator.

    Usage:
        generator = DalleImageGenerator(config)
        image = await generator.generate(ImageRequest(title="..."))
    """

    def __init__(
        self,
        config: ImageProviderConfig | None = None,
        api_key: str | None = None,
        client: AsyncOpenAI | None = None,
    ):
        self.config = config or ImageProviderConfig(
            priority=2, type="dalle", model="dall-e-3", api_key_env="OPENAI_API_KEY"
        )
        self._api_key = api_key or self.config.get_api_key()
        self._client = client

    @property
    def provider_name(self) -> str:
        return "dalle"

    def is_available(self) -> bool:
        return self._client is not None or bool(self._api_key)

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self._api_key:
                raise ImageGenerationError("OPENAI_API_KEY not set", code="AUTHENTICATION_FAILED")
            self._client = AsyncOpenAI(api_key=self._api_key, timeout=float(self.config.timeout))
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(TRANSIENT_OPENAI_ERRORS),
        reraise=True,
    )
    async def _create(self, prompt: str, size: str, **kwargs: Any) -> Any:
        client = self._get_client()
        return await client.images.generate(
            model=self.config.model or "dall-e-3",
            prompt=prompt,
            size=size,
            response_format="url",
            n=1,
            **kwargs,
        )

    async def generate(self, request: ImageRequest) -> GeneratedImage:
        """Generate a featured image for an article.

        Raises:
            ImageGenerationError: If the API fails or returns no URL.
        """
        prompt = build_dalle_prompt(request.title, request.content, request.custom_prompt)
        settings = self.config.settings
        size = settings.get("size", DEFAULT_DALLE_SIZE)

        _logger.info(f"IMAGE_REQUEST | provider:dalle | model:{self.config.model} | size:{size}\n{prompt}")
        start_time = time.time()

        try:
            response = await self._create(
                prompt,
                size,
                quality=settings.get("quality", "standard"),
                style=settings.get("style", "natural"),
            )
        except openai.AuthenticationError as e:
            raise ImageGenerationError(str(e), code="AUTHENTICATION_FAILED") from e
        except openai.RateLimitError as e:
            raise ImageGenerationError(str(e), code="RATE_LIMIT_EXCEEDED", is_retryable=True) from e
        except openai.OpenAIError as e:
            raise ImageGenerationError(str(e), code="GENERATION_FAILED", is_retryable=True) from e

        if not response.data or not response.data[0].url:
            raise ImageGenerationError("No image URL in DALL-E response", code="EMPTY_RESPONSE")

        data = response.data[0]
        width, height = parse_dimensions(size)
        duration = time.time() - start_time
        _logger.info(f"IMAGE_RESPONSE | provider:dalle | duration:{duration:.2f}s | url:{data.url[:80]}")

        return GeneratedImage(
            url=data.url,
            width=width,
            height=height,
            alt_text=request.title.strip()[:250],
            source=ImageSource.DALLE,
            prompt=prompt,
            metadata={
                "model": self.config.model,
                "revised_prompt": getattr(data, "revised_prompt", None),
                "expires_in_hours": 1,
            },
        )
