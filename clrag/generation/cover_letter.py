"""CoverLetterGenerator - retrieval, prompt assembly and streamed completion."""

import asyncio
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any

from ..core.config.loader import load_config
from ..core.config.settings import GenerationSettings, OpenAISettings, TimeoutSettings
from ..core.exceptions import GenerationProviderMisconfigured, GenerationUnavailable, ProviderMisconfigured
from ..core.models.retrieval import RetrievalContext
from ..core.orchestrator.retrieval import RetrievalOrchestrator
from ..core.storage.base import TextGenerationProvider, VectorStore
from ..integrations.openai_client import OpenAIClient
from ..observability.logger import get_logger
from .prompt_builder import build_user_prompt, system_prompt

logger = get_logger(__name__)


@dataclass
class GenerationRun:
    context: RetrievalContext
    system_prompt: str
    user_prompt: str
    chunks: AsyncIterator[str]

    async def collect(self) -> str:
        """Drain the stream into one string."""
        parts = [chunk async for chunk in self.chunks]
        return "".join(parts)


class CoverLetterGenerator:
    """Generate a cover letter grounded in the retrieved knowledge base."""

    def __init__(
        self,
        orchestrator: RetrievalOrchestrator,
        provider: TextGenerationProvider,
        settings: GenerationSettings | None = None,
        timeout: float | None = 120,
    ):
        self.orchestrator = orchestrator
        self.provider = provider
        self.settings = settings or GenerationSettings()
        self.timeout = timeout

    @classmethod
    def from_config(
        cls,
        config: dict[str, Any] | None = None,
        store: VectorStore | None = None,
        openai_client: OpenAIClient | None = None,
    ) -> "CoverLetterGenerator":
        config = config if config is not None else load_config()
        client = openai_client or OpenAIClient.from_settings(OpenAISettings.from_config(config))
        orchestrator = RetrievalOrchestrator.from_config(config, store=store, embedding_provider=client)
        return cls(
            orchestrator=orchestrator,
            provider=client,
            settings=GenerationSettings.from_config(config),
            timeout=TimeoutSettings.from_config(config).generation_seconds,
        )

    async def generate(
        self,
        job_title: str,
        job_description: str,
        domain_category: str | None = None,
        client_name: str | None = None,
    ) -> GenerationRun:
        """Retrieve context and open the completion stream.

        Raises:
            GenerationProviderMisconfigured: No generation credential configured
            InvalidDomainCategory, EmbeddingProviderMisconfigured, EmbeddingUnavailable:
                Propagated unchanged from retrieval
        """
        if not getattr(self.provider, "is_configured", True):
            raise GenerationProviderMisconfigured("Text generation", "OPENAI_API_KEY")

        context = await self.orchestrator.retrieve(job_title, job_description, domain_category)

        system = system_prompt(context, self.settings)
        user = build_user_prompt(
            job_title,
            job_description,
            context,
            client_name=client_name,
            strong_match_threshold=self.settings.strong_match_threshold,
        )
        logger.info(
            "generation_prompt_built",
            request_id=context.request_id,
            system_length=len(system),
            user_length=len(user),
            has_knowledge_base=context.has_knowledge_base,
        )

        return GenerationRun(
            context=context,
            system_prompt=system,
            user_prompt=user,
            chunks=self._stream(system, user),
        )

    async def _stream(self, system: str, user: str) -> AsyncIterator[str]:
        stream = self.provider.complete_stream(
            system,
            user,
            max_tokens=self.settings.max_tokens,
            temperature=self.settings.temperature,
        )
        chunks = 0
        try:
            while True:
                try:
                    chunk = await asyncio.wait_for(stream.__anext__(), timeout=self.timeout)
                except StopAsyncIteration:
                    break
                chunks += 1
                yield chunk
        except ProviderMisconfigured:
            raise
        except asyncio.TimeoutError as e:
            logger.error("generation_timeout", timeout=self.timeout, chunks=chunks)
            raise GenerationUnavailable("Generation provider timed out", cause=e) from e
        except GenerationUnavailable:
            raise
        except Exception as e:
            logger.error("generation_failed", error=str(e), chunks=chunks, exc_info=True)
            raise GenerationUnavailable("Generation provider request failed", cause=e) from e

        logger.info("generation_completed", chunks=chunks)
