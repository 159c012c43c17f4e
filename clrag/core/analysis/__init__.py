"""Text analysis around retrieval: job domains, project reranking, length targets, letter style."""

from .domain_classifier import DOMAIN_DEFINITIONS, TECH_KEYWORDS, DomainClassifier
from .domain_reranker import DomainReranker
from .length_targets import LengthTargetDeriver

__all__ = [
    "DOMAIN_DEFINITIONS",
    "TECH_KEYWORDS",
    "DomainClassifier",
    "DomainReranker",
    "LengthTargetDeriver",
]
