"""Prompt assembly from a RetrievalContext."""

from ..core.analysis.letter_style import (
    closing_pattern,
    opening_pattern,
    project_outcomes,
    question_examples,
    skill_integration_tip,
    writing_style,
)
from ..core.config.settings import GenerationSettings
from ..core.models.knowledge import CoverLetterExample, ProjectExample, SkillExample
from ..core.models.ranked_candidate import RankedCandidate
from ..core.models.retrieval import JobAnalysis, RetrievalContext

STRONG_MATCH_THRESHOLD = 0.2
SKILL_EXCERPT_CHARS = 150


def _percent(similarity: float) -> str:
    return f"{similarity * 100:.1f}%"


def _flag(value: bool) -> str:
    return "yes" if value else "no"


def best_match(context: RetrievalContext, threshold: float = STRONG_MATCH_THRESHOLD) -> RankedCandidate | None:
    """Top cover letter when its similarity is above `threshold`."""
    if context.r1 and context.r1[0].similarity > threshold:
        return context.r1[0]
    return None


def _style_section(match: RankedCandidate) -> str:
    record = match.record
    job_title = record.job_title if isinstance(record, CoverLetterExample) else ""
    letter = match.primary_text
    opening = opening_pattern(letter)
    closing = closing_pattern(letter)
    style = writing_style(letter)
    topics = ", ".join(closing.question_topics) or "None"
    return (
        f"STYLE REFERENCE (best match, {_percent(match.similarity)} similar to \"{job_title}\"):\n"
        "Match the greeting, opening, paragraph flow and closing of this letter.\n"
        "---\n"
        f"{letter}\n"
        "---\n"
        f"Opening: {opening.greeting} | {opening.style} | {opening.tone} | {opening.structure}\n"
        f"First sentence: {opening.text}\n"
        f"Closing: {closing.cta_style} | {closing.enthusiasm} | {closing.request_type}"
        f" | {len(closing.questions)} questions (topics: {topics})\n"
        f"Structure: {style.paragraphs} paragraphs, {style.flow}, {style.transitions}, {style.professionalism}\n"
        f"Voice: {style.sentence_length}; {style.vocabulary}; {style.personal_focus}; {style.technical_level}\n"
    )


def _length_section(context: RetrievalContext) -> str:
    targets = context.length_targets
    if targets is None:
        return ""
    low, high = targets.words_range
    return (
        "LENGTH AND STRUCTURE TARGETS (from matched letters):\n"
        f"- Paragraphs: {targets.target_paragraphs} (+/-1)\n"
        f"- Length: ~{targets.target_words} words (acceptable range: {low}-{high} words)\n"
    )


def _analysis_line(analysis: JobAnalysis | None) -> str:
    if analysis is None:
        return ""
    technologies = ", ".join(analysis.technologies) or "None detected"
    return f"JOB ANALYSIS: primary domain = {analysis.primary_domain}; technologies = {technologies}\n"


def _project_block(index: int, candidate: RankedCandidate, analysis: JobAnalysis | None) -> str:
    record = candidate.record
    if isinstance(record, ProjectExample):
        project_type = record.metadata.project_type or "General"
        technologies = record.metadata.technologies
        title = record.project_title
    else:
        project_type, technologies, title = "General", [], ""
    description = record.primary_text

    matched: list[str] = []
    if analysis is not None:
        lowered = description.lower()
        matched = [t for t in analysis.technologies if t in technologies or t.lower() in lowered]
    outcomes = project_outcomes(description)

    return (
        f"PROJECT {index} ({_percent(candidate.similarity)} similarity, "
        f"{candidate.relevance_score or 0.0:.1f} relevance):\n"
        f"Domain match: {_flag(candidate.domain_match)} | Tech match: {_flag(candidate.tech_match)} "
        f"| Type: {project_type}\n"
        f"Title: {title}\n"
        f"Technologies: {', '.join(technologies)}\n"
        f"Job technologies matched: {', '.join(matched) or 'None'}\n"
        f"Description: {description}\n"
        f"Story: {outcomes.narrative} | Results: {outcomes.metrics}, {outcomes.impact} "
        f"| Fits: {outcomes.job_relevance}\n"
    )


def _skill_line(candidate: RankedCandidate, job_description: str) -> str:
    record = candidate.record
    if isinstance(record, SkillExample):
        name, skill_category = record.skill_name, record.metadata.skill_category
    else:
        name, skill_category = "", ""
    tip = skill_integration_tip(name, skill_category, job_description)
    return f"- {name}: \"{record.primary_text[:SKILL_EXCERPT_CHARS]}...\" ({tip})"


def build_user_prompt(
    job_title: str,
    job_description: str,
    context: RetrievalContext,
    client_name: str | None = None,
    strong_match_threshold: float = STRONG_MATCH_THRESHOLD,
) -> str:
    """Build the user prompt sent alongside the system prompt."""
    match = best_match(context, strong_match_threshold)
    sections: list[str] = []

    if match is not None:
        sections.append(_style_section(match))
    length = _length_section(context)
    if length:
        sections.append(length)

    if context.r2:
        blocks = [_project_block(i, c, context.job_analysis) for i, c in enumerate(context.r2, start=1)]
        sections.append("RELEVANT PROJECTS:\n" + _analysis_line(context.job_analysis) + "\n" + "\n".join(blocks))
    elif context.job_analysis is not None:
        sections.append(_analysis_line(context.job_analysis))

    if context.r3:
        sections.append("SKILLS TO WEAVE IN:\n" + "\n".join(_skill_line(c, job_description) for c in context.r3) + "\n")

    if context.r1:
        primary_domain = context.job_analysis.primary_domain if context.job_analysis else "General"
        sections.append(question_examples([c.primary_text for c in context.r1], primary_domain))

    if match is not None:
        instructions = (
            "INSTRUCTIONS:\n"
            "1. Follow the style reference closely: same greeting, opening pattern and tone.\n"
            "2. Cite the most relevant project by name with its concrete results.\n"
            "3. Keep within the length targets.\n"
            "4. Close with three short questions about the role's requirements.\n"
        )
    else:
        instructions = (
            "INSTRUCTIONS:\n"
            "1. Write a concise, professional cover letter.\n"
            "2. Use the projects and skills above as concrete evidence.\n"
            "3. Close with three short questions about the role's requirements.\n"
        )
    sections.append(instructions)

    greeting = f"Address the letter to {client_name}.\n" if client_name else ""
    header = (
        f"Write a cover letter for this job.\n\n"
        f"JOB TITLE: {job_title}\n"
        f"JOB DESCRIPTION:\n{job_description}\n"
        f"{greeting}"
    )
    return "\n".join([header, *sections])


def system_prompt(context: RetrievalContext, settings: GenerationSettings | None = None) -> str:
    """Configured system prompt plus the knowledge-base availability note."""
    settings = settings or GenerationSettings()
    note = settings.knowledge_base_note if context.has_knowledge_base else settings.no_knowledge_base_note
    base = settings.system_prompt.rstrip()
    return f"{base}\n\n{note.strip()}" if note.strip() else base
