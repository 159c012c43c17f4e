"""Cover letter generation on top of retrieval."""

from .cover_letter import CoverLetterGenerator, GenerationRun
from .prompt_builder import build_user_prompt, system_prompt

__all__ = ["CoverLetterGenerator", "GenerationRun", "build_user_prompt", "system_prompt"]
