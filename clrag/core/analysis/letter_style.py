"""Deterministic style heuristics over past cover letters, projects and skills.

Everything here is keyword matching on plain text. The labels are hints for
the generation prompt, not classifications anyone should rely on.
"""

import re

from ..models.base import CLRAGBaseModel

OPENING_EXCERPT_CHARS = 300
CLOSING_EXCERPT_CHARS = 200
MAX_QUESTION_EXAMPLES = 6

_PARAGRAPH_BREAK = re.compile(r"\n{2,}")
_SENTENCE = re.compile(r"[^.!?]+[.!?]*")
_QUESTION_CUE = re.compile(r"\b(what|how|which|when|where|are there)\b", re.IGNORECASE)
_FIRST_PERSON = re.compile(r"\bI\b")
_POSSESSIVE = re.compile(r"\bmy\b", re.IGNORECASE)

ENTHUSIASTIC_WORDS = ("excited", "thrilled", "eager", "passionate")
ADVANCED_WORDS = ("optimization", "implementation", "sophisticated", "comprehensive", "methodology")
TECHNICAL_TERMS = ("api", "database", "framework", "algorithm", "architecture", "development", "implementation")

# (label, cue words), checked in order
QUESTION_TOPICS = (
    ("Scalability", ("scale", "volume", "demand")),
    ("Features", ("feature", "functionality", "requirement")),
    ("Design/UX", ("design", "interface", "experience")),
    ("Data/Analytics", ("data", "insight", "metric")),
    ("Integration", ("integration", "system", "platform")),
    ("Performance", ("performance", "optimization", "efficiency")),
)


class OpeningPattern(CLRAGBaseModel):
    text: str
    greeting: str
    style: str
    tone: str
    structure: str


class ClosingPattern(CLRAGBaseModel):
    text: str
    cta_style: str
    enthusiasm: str
    request_type: str
    questions: list[str]
    question_topics: list[str]


class WritingStyle(CLRAGBaseModel):
    paragraphs: int
    flow: str
    transitions: str
    professionalism: str
    sentence_length: str
    vocabulary: str
    personal_focus: str
    technical_level: str


class ProjectOutcomes(CLRAGBaseModel):
    narrative: str
    metrics: str
    impact: str
    job_relevance: str


def split_paragraphs(text: str) -> list[str]:
    return [p.strip() for p in _PARAGRAPH_BREAK.split(text) if p.strip()]


def _sentences(text: str, min_chars: int = 10) -> list[str]:
    return [s.strip() for s in _SENTENCE.findall(text) if len(s.strip()) > min_chars]


def opening_pattern(letter: str) -> OpeningPattern:
    paragraphs = split_paragraphs(letter)
    # A bare greeting line ("Dear Hiring Manager,") is not the opening itself
    if len(paragraphs) > 1 and len(paragraphs[0]) < 40 and paragraphs[0].endswith(","):
        greeting_line, opening = paragraphs[0], paragraphs[1]
    else:
        greeting_line = opening = paragraphs[0] if paragraphs else letter[:OPENING_EXCERPT_CHARS]

    sentences = _sentences(opening)
    lower = opening.lower()

    if greeting_line.startswith(("Hi,", "Hi ")):
        greeting = "Casual Hi"
    elif greeting_line.startswith("Dear"):
        greeting = "Formal Dear"
    else:
        greeting = "Direct start"

    if "excited" in lower:
        style = "Enthusiastic"
    elif "pleased" in lower:
        style = "Formal pleased"
    elif "writing to express" in lower:
        style = "Formal expression"
    else:
        style = "Direct professional"

    if "!" in opening:
        tone = "Energetic"
    elif "honored" in lower or "privilege" in lower:
        tone = "Respectful"
    else:
        tone = "Confident professional"

    if len(sentences) <= 1:
        structure = "Single impactful sentence"
    elif len(sentences) == 2:
        structure = "Two-sentence opener"
    else:
        structure = "Multi-sentence introduction"

    return OpeningPattern(
        text=sentences[0] if sentences else opening[:OPENING_EXCERPT_CHARS],
        greeting=greeting,
        style=style,
        tone=tone,
        structure=structure,
    )


def closing_pattern(letter: str) -> ClosingPattern:
    """Call-to-action analysis over the last two paragraphs."""
    closing = "\n\n".join(split_paragraphs(letter)[-2:])
    lower = closing.lower()

    if "look forward" in lower:
        cta_style = "Traditional follow-up"
    elif "excited to discuss" in lower:
        cta_style = "Enthusiastic discussion"
    elif "welcome the opportunity" in lower:
        cta_style = "Welcoming approach"
    else:
        cta_style = "Direct professional request"

    if "interview" in lower:
        request_type = "Interview request"
    elif "discuss" in lower:
        request_type = "Discussion request"
    elif "call" in lower:
        request_type = "Call request"
    else:
        request_type = "General follow-up"

    questions = extract_questions(closing)
    return ClosingPattern(
        text=closing[:CLOSING_EXCERPT_CHARS],
        cta_style=cta_style,
        enthusiasm="High enthusiasm" if any(w in lower for w in ENTHUSIASTIC_WORDS) else "Professional interest",
        request_type=request_type,
        questions=questions,
        question_topics=question_topics(questions),
    )


def writing_style(letter: str) -> WritingStyle:
    paragraphs = max(1, len(split_paragraphs(letter)))
    lower = letter.lower()
    sentences = _sentences(letter)
    avg_sentence_chars = sum(len(s) for s in sentences) / len(sentences) if sentences else 0
    pronouns = len(_FIRST_PERSON.findall(letter)) + len(_POSSESSIVE.findall(letter))
    technical_terms = sum(1 for term in TECHNICAL_TERMS if term in lower)

    return WritingStyle(
        paragraphs=paragraphs,
        flow="Detailed paragraphs" if len(letter) / paragraphs > 200 else "Concise paragraphs",
        transitions="Formal transitions" if "Additionally" in letter or "Furthermore" in letter else "Natural flow",
        professionalism="Very formal" if "sincerely" in lower else "Professional casual",
        sentence_length="Long, complex sentences" if avg_sentence_chars > 80 else "Moderate, clear sentences",
        vocabulary=(
            "Technical/Advanced vocabulary"
            if any(w in lower for w in ADVANCED_WORDS)
            else "Clear, professional vocabulary"
        ),
        personal_focus="High personal focus" if pronouns > 15 else "Balanced personal/professional focus",
        technical_level=(
            "High technical detail" if technical_terms > 3 else "Business-focused with technical mentions"
        ),
    )


def extract_questions(text: str) -> list[str]:
    """Sentences that ask something, each ending in "?".

    A sentence counts when it ends in "?" or contains a question cue word
    ("what", "how", "are there", ...). Very short or very long ones are dropped.
    """
    questions: list[str] = []
    for sentence in _sentences(text):
        if sentence.endswith("?") or _QUESTION_CUE.search(sentence):
            question = sentence.rstrip(".!?") + "?"
            if 20 < len(question) < 200:
                questions.append(question)
    return questions


def question_topics(questions: list[str]) -> list[str]:
    topics: list[str] = []
    for label, cues in QUESTION_TOPICS:
        if any(cue in q.lower() for q in questions for cue in cues):
            topics.append(label)
    return topics


def question_examples(letters: list[str], primary_domain: str, limit: int = MAX_QUESTION_EXAMPLES) -> str:
    """Prompt section listing questions asked in past letters."""
    questions = [q for letter in letters for q in extract_questions(letter)]
    if not questions:
        return "QUESTION EXAMPLES FROM SIMILAR LETTERS: none found, ask about the job's concrete requirements.\n"
    lines = "\n".join(f"{i}. {q}" for i, q in enumerate(questions[:limit], start=1))
    return (
        "QUESTION EXAMPLES FROM SIMILAR LETTERS:\n"
        f"{lines}\n"
        f"Use these as inspiration but write 3 new questions specific to this {primary_domain} role.\n"
    )


def project_outcomes(description: str) -> ProjectOutcomes:
    lower = description.lower()

    if "increased" in lower:
        narrative = "Performance improvement story"
    elif "developed" in lower:
        narrative = "Development achievement story"
    elif "managed" in lower:
        narrative = "Leadership and management story"
    else:
        narrative = "Technical accomplishment story"

    if "%" in description:
        metrics = "Percentage improvements mentioned"
    elif "reduced" in lower or "increased" in lower:
        metrics = "Quantitative improvements"
    else:
        metrics = "Qualitative achievements"

    if "revenue" in lower or "cost" in lower:
        impact = "Financial impact"
    elif "user" in lower or "customer" in lower:
        impact = "User experience impact"
    else:
        impact = "Operational efficiency impact"

    if "backend" in lower:
        job_relevance = "Backend development roles"
    elif "frontend" in lower:
        job_relevance = "Frontend development roles"
    elif "full" in lower:
        job_relevance = "Full-stack development roles"
    else:
        job_relevance = "General development roles"

    return ProjectOutcomes(narrative=narrative, metrics=metrics, impact=impact, job_relevance=job_relevance)


def skill_integration_tip(skill_name: str, skill_category: str, job_description: str) -> str:
    name = skill_name.strip().lower()
    if name and name in job_description.lower():
        return "Directly mentioned in job description, emphasize strongly"
    if skill_category == "Technical":
        return "Weave into project examples naturally"
    return "Mention as supporting capability"
