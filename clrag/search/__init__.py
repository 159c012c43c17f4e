"""Category search: cascading similarity, hydration and recency fallback."""

from .fallback import FallbackProvider, FallbackResult
from .hydrator import Hydrator
from .matcher import CategoryMatcher

__all__ = ["CategoryMatcher", "FallbackProvider", "FallbackResult", "Hydrator"]
