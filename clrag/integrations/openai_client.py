"""OpenAI client wrapper with retry logic for embeddings and streamed completions."""

import hashlib
import os
import random
from collections.abc import AsyncIterator
from typing import Any

from openai import AsyncOpenAI, OpenAIError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..core.config.settings import OpenAISettings
from ..core.exceptions import EmbeddingProviderMisconfigured, GenerationProviderMisconfigured
from ..core.models.enums import EmbeddingInputType
from ..core.storage.base import EmbeddingProvider, TextGenerationProvider
from ..kb.vector_math import normalize
from ..observability.logger import get_logger

logger = get_logger(__name__)

TEST_MODE_DIMENSIONS = 64


def is_test_mode() -> bool:
    return bool(os.getenv("CLRAG_TEST_MODE") or os.getenv("CLRAG_MOCK_OPENAI"))


class OpenAIClient(EmbeddingProvider, TextGenerationProvider):
    """Wrapper for the OpenAI API used as embedding and text generation provider.

    A missing API key does not fail construction; it fails the first call
    with a misconfiguration error, before any request is sent.
    """

    def __init__(
        self,
        api_key: str | None = None,
        embedding_model: str = "text-embedding-3-small",
        completion_model: str = "gpt-4o-mini",
        embedding_dimensions: int | None = None,
        timeout: float = 60,
        max_retries: int = 3,
    ):
        """Initialize OpenAI client.

        Args:
            api_key: OpenAI API key (defaults to OPENAI_API_KEY env var)
            embedding_model: Model used for query embeddings
            completion_model: Model used for cover letter generation
            embedding_dimensions: Optional dimensions for compatible embedding models
            timeout: Request timeout in seconds
            max_retries: Maximum number of SDK-level retries
        """
        self.test_mode = is_test_mode()
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        self.embedding_model = embedding_model
        self.completion_model = completion_model
        self.embedding_dimensions = embedding_dimensions
        self.timeout = timeout
        self.max_retries = max_retries

        self.client: AsyncOpenAI | None = None
        if self.api_key and not self.test_mode:
            self.client = AsyncOpenAI(
                api_key=self.api_key,
                timeout=self.timeout,
                max_retries=max_retries,
            )

        logger.info(
            "openai_client_initialized",
            embedding_model=embedding_model,
            completion_model=completion_model,
            configured=self.is_configured,
            test_mode=self.test_mode,
        )

    @classmethod
    def from_settings(cls, settings: OpenAISettings) -> "OpenAIClient":
        return cls(
            api_key=settings.api_key,
            embedding_model=settings.embedding_model,
            completion_model=settings.completion_model,
            embedding_dimensions=settings.embedding_dimensions,
            timeout=settings.timeout,
            max_retries=settings.max_retries,
        )

    @property
    def is_configured(self) -> bool:
        return self.test_mode or self.client is not None

    async def embed(
        self,
        text: str,
        input_type: EmbeddingInputType | str = EmbeddingInputType.QUERY,
    ) -> list[float]:
        """Embed one text. OpenAI models ignore the query/document distinction."""
        embedding, _ = await self.generate_embedding(text)
        return embedding

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(OpenAIError),
        reraise=True,
    )
    async def generate_embedding(self, text: str) -> tuple[list[float], dict[str, Any]]:
        """Generate text embedding using OpenAI embeddings API.

        Args:
            text: Text to embed

        Returns:
            Tuple of (embedding vector, metadata with usage info)

        Raises:
            EmbeddingProviderMisconfigured: If no API key is configured
            OpenAIError: If API call fails after retries
        """
        logger.info(
            "generating_embedding",
            model=self.embedding_model,
            text_length=len(text),
            test_mode=self.test_mode,
        )

        if self.test_mode:
            embedding = self._fabricate_embedding(text, self.embedding_dimensions or TEST_MODE_DIMENSIONS)
            return embedding, {
                "tokens_used": 0,
                "model": self.embedding_model,
                "dimensions": len(embedding),
                "mock": True,
            }

        if self.client is None:
            raise EmbeddingProviderMisconfigured("OpenAI embeddings", "OPENAI_API_KEY")

        try:
            kwargs: dict[str, Any] = {"model": self.embedding_model, "input": text}
            if self.embedding_dimensions:
                kwargs["dimensions"] = self.embedding_dimensions

            response = await self.client.embeddings.create(**kwargs)
            embedding = response.data[0].embedding

            usage_metadata = {
                "tokens_used": response.usage.total_tokens,
                "model": self.embedding_model,
                "dimensions": len(embedding),
            }

            logger.info(
                "embedding_generated",
                tokens=usage_metadata["tokens_used"],
                dimensions=usage_metadata["dimensions"],
            )

            return embedding, usage_metadata

        except OpenAIError as e:
            logger.error("openai_embedding_error", error=str(e), model=self.embedding_model, exc_info=True)
            raise

    async def complete_stream(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int = 1500,
        temperature: float = 0.6,
    ) -> AsyncIterator[str]:
        """Stream completion text chunks for a system + user prompt pair.

        Raises:
            GenerationProviderMisconfigured: If no API key is configured
            OpenAIError: If opening the stream fails after retries
        """
        if self.test_mode:
            for chunk in self._fabricate_completion():
                yield chunk
            return

        if self.client is None:
            raise GenerationProviderMisconfigured("OpenAI chat completions", "OPENAI_API_KEY")

        logger.info(
            "opening_completion_stream",
            model=self.completion_model,
            prompt_length=len(user_prompt),
            max_tokens=max_tokens,
        )

        stream = await self._open_stream(system_prompt, user_prompt, max_tokens, temperature)
        chunks = 0
        async for event in stream:
            if not event.choices:
                continue
            content = event.choices[0].delta.content
            if content:
                chunks += 1
                yield content

        logger.info("completion_stream_finished", model=self.completion_model, chunks=chunks)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(OpenAIError),
        reraise=True,
    )
    async def _open_stream(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int,
        temperature: float,
    ) -> Any:
        try:
            return await self.client.chat.completions.create(
                model=self.completion_model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                stream=True,
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except OpenAIError as e:
            logger.error("openai_completion_error", error=str(e), model=self.completion_model, exc_info=True)
            raise

    @staticmethod
    def hash_input(text: str) -> str:
        """Create SHA-256 hash of input text."""
        return hashlib.sha256(text.encode()).hexdigest()

    def _fabricate_embedding(self, text: str, dimensions: int) -> list[float]:
        """Deterministic unit vector seeded by the text hash (test mode)."""
        rng = random.Random(int(self.hash_input(text)[:8], 16))
        return normalize([rng.gauss(0, 1) for _ in range(dimensions)])

    @staticmethod
    def _fabricate_completion() -> list[str]:
        return ["Hi,\n\n", "This is a test-mode cover letter.\n\n", "Best regards,\n", "[Your Name]"]
