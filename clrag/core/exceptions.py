"""Exceptions raised by the retrieval core and its provider integrations."""


class CLRAGError(Exception):
    """Base class for all clrag errors."""


class ProviderMisconfigured(CLRAGError):
    """A provider cannot be used because its credentials are missing.

    Raised before any network call is attempted.
    """

    def __init__(self, provider: str, setting: str):
        self.provider = provider
        self.setting = setting
        super().__init__(f"{provider} is not configured: set {setting}")


class EmbeddingProviderMisconfigured(ProviderMisconfigured):
    """No credential is configured for the embedding provider."""


class GenerationProviderMisconfigured(ProviderMisconfigured):
    """No credential is configured for the text generation provider."""


class ProviderUnavailable(CLRAGError):
    """A provider call failed, returned a non-success status or timed out.

    Attributes:
        message: Error description
        cause: The underlying exception, when there is one
    """

    def __init__(self, message: str, cause: BaseException | None = None):
        self.message = message
        self.cause = cause
        if cause is not None:
            message = f"{message}: {type(cause).__name__}: {cause}"
        super().__init__(message)


class EmbeddingUnavailable(ProviderUnavailable):
    """The query embedding could not be produced; retrieval cannot proceed."""


class GenerationUnavailable(ProviderUnavailable):
    """The text generation provider failed."""


class InvalidDomainCategory(CLRAGError, ValueError):
    """An unknown domain category was requested."""

    def __init__(self, domain_category: str, allowed: list[str]):
        self.domain_category = domain_category
        self.allowed = allowed
        super().__init__(
            f"Invalid domain category: {domain_category!r} (expected one of {', '.join(allowed)})"
        )
