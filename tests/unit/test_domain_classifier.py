"""Keyword-based domain and technology detection."""

from clrag.core.analysis.domain_classifier import TECH_KEYWORDS, DomainClassifier


def test_ml_job_is_ai_ml():
    analysis = DomainClassifier().classify(
        "ML Engineer",
        "Build training pipelines with pytorch and tensorflow.",
    )
    assert analysis.primary_domain == "AI/ML"
    assert "pytorch" in analysis.technologies
    assert "tensorflow" in analysis.technologies


def test_ai_checked_before_web():
    analysis = DomainClassifier().classify(
        "Full-stack developer",
        "React frontend for our machine learning platform",
    )
    assert analysis.domains.index("AI/ML") < analysis.domains.index("Web Development")
    assert analysis.primary_domain == "AI/ML"
    assert analysis.is_multi_domain


def test_no_match_is_general():
    analysis = DomainClassifier().classify("Barista", "Brew coffee.")
    assert analysis.domains == ["General"]
    assert analysis.primary_domain == "General"
    assert analysis.technologies == []
    assert not analysis.is_multi_domain


def test_technologies_in_vocabulary_order_and_capped():
    description = " ".join(reversed(TECH_KEYWORDS))
    technologies = DomainClassifier().classify("Engineer", description).technologies

    assert len(technologies) == 10
    positions = [TECH_KEYWORDS.index(t) for t in technologies]
    assert positions == sorted(positions)
    assert technologies[0] == "react"


def test_empty_vocabularies_are_respected():
    classifier = DomainClassifier(domain_definitions=[], tech_keywords=())

    analysis = classifier.classify("ML Engineer", "PyTorch and Python models")

    assert analysis.domains == ["General"]
    assert analysis.technologies == []
