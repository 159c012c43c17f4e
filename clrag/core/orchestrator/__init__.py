"""Retrieval orchestration."""

from .retrieval import RetrievalOrchestrator, build_store

__all__ = ["RetrievalOrchestrator", "build_store"]
