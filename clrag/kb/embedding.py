"""Query embedding for job postings.

The query vector is a hard prerequisite for retrieval: every failure here is
raised, never turned into an empty vector.
"""

import asyncio

from ..core.exceptions import EmbeddingUnavailable, ProviderMisconfigured
from ..core.models.enums import EmbeddingInputType
from ..core.storage.base import EmbeddingProvider
from ..observability.logger import get_logger

logger = get_logger(__name__)


def build_query_text(job_title: str, job_description: str) -> str:
    """Text embedded for a job: title and description joined by a space."""
    return f"{job_title} {job_description}"


class EmbeddingClient:
    """Turn job text into one query vector via an external provider."""

    def __init__(self, provider: EmbeddingProvider, timeout: float | None = 30):
        """Initialize embedding client.

        Args:
            provider: Embedding provider (e.g. OpenAIClient)
            timeout: Seconds before the provider call counts as unavailable
        """
        self.provider = provider
        self.timeout = timeout
        self.logger = get_logger(f"{__name__}.{self.__class__.__name__}")

    async def embed(self, text: str) -> list[float]:
        """Embed `text` as a search query.

        Raises:
            EmbeddingProviderMisconfigured: No credential is configured
            EmbeddingUnavailable: The provider failed, timed out or returned
                an empty vector
        """
        self.logger.info("embedding_query", text_length=len(text))

        try:
            embedding = await asyncio.wait_for(
                self.provider.embed(text, EmbeddingInputType.QUERY),
                timeout=self.timeout,
            )
        except ProviderMisconfigured:
            raise
        except asyncio.TimeoutError as e:
            self.logger.error("embedding_timeout", timeout=self.timeout)
            raise EmbeddingUnavailable("Embedding provider timed out", cause=e) from e
        except Exception as e:
            self.logger.error("embedding_failed", error=str(e), exc_info=True)
            raise EmbeddingUnavailable("Embedding provider request failed", cause=e) from e

        if embedding is None or len(embedding) == 0:
            self.logger.error("embedding_empty")
            raise EmbeddingUnavailable("Embedding provider returned an empty vector")

        vector = [float(x) for x in embedding]
        self.logger.info("query_embedded", dimensions=len(vector))
        return vector

    async def embed_job(self, job_title: str, job_description: str) -> list[float]:
        """Embed the concatenation of a job's title and description."""
        return await self.embed(build_query_text(job_title, job_description))
