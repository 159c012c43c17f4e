"""Retrieval-augmented cover letter generation.

The retrieval core embeds a job posting, searches three knowledge categories
(past cover letters, projects, skills) with cascading similarity thresholds,
reranks projects by domain and technology overlap, and falls back to recent
records when nothing matches.
"""

__version__ = "0.3.0"
