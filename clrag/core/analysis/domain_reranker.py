"""Domain- and technology-aware reranking of project candidates."""

from ...observability.logger import get_logger
from ..models.knowledge import ProjectExample
from ..models.ranked_candidate import RankedCandidate
from ..models.retrieval import JobAnalysis

logger = get_logger(__name__)

MIN_PROJECTS = 3
TECH_WEIGHT = 0.5


class DomainReranker:
    """Re-score projects by domain and technology overlap with the job.

    relevance = (#job domains found in the project type or description)
              + 0.5 * (#job technologies found in the technology list or description)

    Candidates sort by relevance, then similarity, both descending. When at
    least `min_results` candidates are relevant only those are returned;
    otherwise the top `min_results` of the full sorted list are returned so
    generation still gets a handful of examples.
    """

    def __init__(self, min_results: int = MIN_PROJECTS, tech_weight: float = TECH_WEIGHT):
        self.min_results = min_results
        self.tech_weight = tech_weight

    def rerank(
        self,
        candidates: list[RankedCandidate],
        job_analysis: JobAnalysis,
    ) -> list[RankedCandidate]:
        if not candidates:
            return []

        scored = [self._score(candidate, job_analysis) for candidate in candidates]
        ranked = sorted(
            scored,
            key=lambda c: (c.relevance_score or 0.0, c.similarity),
            reverse=True,
        )

        relevant = [c for c in ranked if (c.relevance_score or 0.0) > 0]
        if len(relevant) >= self.min_results:
            logger.info("projects_reranked", mode="relevant_only", count=len(relevant), pool=len(ranked))
            return relevant

        selected = ranked[: max(self.min_results, len(relevant))]
        logger.info(
            "projects_reranked",
            mode="backfilled",
            relevant=len(relevant),
            count=len(selected),
            pool=len(ranked),
        )
        return selected

    def _score(self, candidate: RankedCandidate, job_analysis: JobAnalysis) -> RankedCandidate:
        record = candidate.record
        if isinstance(record, ProjectExample):
            project_type = record.metadata.project_type
            technologies = [t.lower() for t in record.metadata.technologies]
        else:
            project_type = ""
            technologies = []
        description = record.primary_text
        description_lower = description.lower()

        domain_score = sum(
            1
            for domain in job_analysis.domains
            if domain in project_type or domain in description
        )
        tech_hits = sum(
            1
            for tech in job_analysis.technologies
            if tech.lower() in technologies or tech.lower() in description_lower
        )
        tech_score = self.tech_weight * tech_hits

        return candidate.model_copy(
            update={
                "relevance_score": domain_score + tech_score,
                "domain_match": domain_score > 0,
                "tech_match": tech_hits > 0,
            }
        )
