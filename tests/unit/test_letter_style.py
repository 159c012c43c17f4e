"""Style heuristics over letters, projects and skills."""

from clrag.core.analysis.letter_style import (
    closing_pattern,
    extract_questions,
    opening_pattern,
    project_outcomes,
    question_examples,
    question_topics,
    skill_integration_tip,
    writing_style,
)

LETTER = (
    "Hi,\n\n"
    "I am excited to apply for the backend role! I have shipped payment APIs for six years.\n\n"
    "Additionally, I rebuilt a reporting database that cut query time in half.\n\n"
    "How do you plan to scale the platform next year? Which data pipelines feed the dashboards?\n\n"
    "I look forward to an interview.\n\nBest regards,\nSam"
)


def test_opening_pattern_skips_bare_greeting():
    opening = opening_pattern(LETTER)

    assert opening.greeting == "Casual Hi"
    assert opening.style == "Enthusiastic"
    assert opening.tone == "Energetic"
    assert opening.structure == "Two-sentence opener"
    assert opening.text == "I am excited to apply for the backend role!"


def test_opening_pattern_without_greeting_line():
    opening = opening_pattern("Hiring teams rarely see this. I am honored to write to you today.")

    assert opening.greeting == "Direct start"
    assert opening.tone == "Respectful"
    assert opening.style == "Direct professional"


def test_closing_pattern_reads_last_two_paragraphs():
    closing = closing_pattern(LETTER)

    assert closing.cta_style == "Traditional follow-up"
    assert closing.request_type == "Interview request"
    assert closing.enthusiasm == "Professional interest"
    assert closing.questions == []


def test_writing_style_labels():
    style = writing_style(LETTER)

    assert style.paragraphs == 6
    assert style.transitions == "Formal transitions"
    assert style.professionalism == "Professional casual"
    assert style.flow == "Concise paragraphs"


def test_extract_questions_normalizes_endings():
    questions = extract_questions(LETTER)

    assert questions == [
        "How do you plan to scale the platform next year?",
        "Which data pipelines feed the dashboards?",
    ]
    assert question_topics(questions) == ["Scalability", "Data/Analytics", "Integration"]


def test_question_examples_section():
    section = question_examples([LETTER, "No questions here at all."], "Web Development", limit=1)

    assert "1. How do you plan to scale the platform next year?" in section
    assert "2." not in section
    assert "Web Development role" in section

    assert "none found" in question_examples(["Short."], "General")


def test_project_outcomes():
    outcomes = project_outcomes("Increased checkout conversion 12% for customers on the backend")

    assert outcomes.narrative == "Performance improvement story"
    assert outcomes.metrics == "Percentage improvements mentioned"
    assert outcomes.impact == "User experience impact"
    assert outcomes.job_relevance == "Backend development roles"

    plain = project_outcomes("Internal tooling")
    assert plain.narrative == "Technical accomplishment story"
    assert plain.metrics == "Qualitative achievements"
    assert plain.impact == "Operational efficiency impact"


def test_skill_integration_tip():
    assert skill_integration_tip("Kafka", "Technical", "We stream events through kafka.").startswith("Directly mentioned")
    assert skill_integration_tip("Kafka", "Technical", "Web role") == "Weave into project examples naturally"
    assert skill_integration_tip("Mentoring", "Soft", "Web role") == "Mention as supporting capability"
    assert skill_integration_tip("", "Soft", "anything") == "Mention as supporting capability"
