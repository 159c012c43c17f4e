"""Keyword-based job domain and technology detection."""

from ..models.retrieval import JobAnalysis

GENERAL_DOMAIN = "General"
MAX_TECHNOLOGIES = 10

# Checked in order; the first match becomes the primary domain, so AI/ML
# outranks Web Development for an AI-flavoured web role.
DOMAIN_DEFINITIONS: list[tuple[str, tuple[str, ...]]] = [
    (
        "AI/ML",
        (
            "ai",
            "artificial intelligence",
            "machine learning",
            "ml",
            "deep learning",
            "neural network",
            "data science",
            "nlp",
            "computer vision",
            "tensorflow",
            "pytorch",
            "scikit-learn",
        ),
    ),
    (
        "Web Development",
        (
            "web",
            "frontend",
            "backend",
            "full stack",
            "react",
            "vue",
            "angular",
            "javascript",
            "html",
            "css",
            "node.js",
            "express",
        ),
    ),
    (
        "Mobile Development",
        (
            "mobile",
            "ios",
            "android",
            "flutter",
            "react native",
            "swift",
            "kotlin",
            "app development",
        ),
    ),
    (
        "Data Science",
        (
            "data",
            "analytics",
            "statistics",
            "sql",
            "python",
            "r ",
            "tableau",
            "power bi",
            "data warehouse",
            "etl",
        ),
    ),
    (
        "DevOps",
        (
            "devops",
            "cloud",
            "aws",
            "azure",
            "gcp",
            "docker",
            "kubernetes",
            "ci/cd",
            "terraform",
            "jenkins",
        ),
    ),
    (
        "Design",
        (
            "design",
            "ui",
            "ux",
            "figma",
            "photoshop",
            "sketch",
            "user experience",
            "user interface",
        ),
    ),
    (
        "Management",
        (
            "management",
            "project manager",
            "product manager",
            "team lead",
            "scrum",
            "agile",
            "leadership",
            "strategy",
        ),
    ),
]

TECH_KEYWORDS: tuple[str, ...] = (
    "react", "vue", "angular", "javascript", "typescript", "node.js", "python",
    "java", "php", "ruby", "go", "rust", "swift", "kotlin", "flutter",
    "react native", "mongodb", "postgresql", "mysql", "redis", "aws", "azure",
    "gcp", "docker", "kubernetes", "git", "jenkins", "terraform", "figma",
    "photoshop", "sketch", "tensorflow", "pytorch", "scikit-learn", "pandas",
    "numpy", "jupyter", "tableau", "power bi", "sql server", "oracle",
    "elasticsearch", "kafka", "spring", "django", "flask", "express", "laravel",
    "rails", "gin", "graphql", "rest api", "microservices", "serverless",
    "lambda", "html", "css", "sass", "less", "webpack", "vite", "babel", "jest",
    "cypress", "selenium", "postman", "jira", "confluence",
)


class DomainClassifier:
    """Derive domain tags and technology keywords from job text.

    Matching is plain substring containment on the lower-cased text, so short
    triggers such as "ai" or "go" also fire inside longer words.
    """

    def __init__(
        self,
        domain_definitions: list[tuple[str, tuple[str, ...]]] | None = None,
        tech_keywords: tuple[str, ...] | None = None,
        max_technologies: int = MAX_TECHNOLOGIES,
    ):
        self.domain_definitions = DOMAIN_DEFINITIONS if domain_definitions is None else domain_definitions
        self.tech_keywords = TECH_KEYWORDS if tech_keywords is None else tech_keywords
        self.max_technologies = max_technologies

    def classify(self, job_title: str, job_description: str) -> JobAnalysis:
        text = f"{job_title} {job_description}".lower()

        domains = [
            name
            for name, triggers in self.domain_definitions
            if any(trigger in text for trigger in triggers)
        ]
        if not domains:
            domains = [GENERAL_DOMAIN]

        return JobAnalysis(
            domains=domains,
            technologies=self.extract_technologies(text),
            primary_domain=domains[0],
            is_multi_domain=len(domains) > 1,
        )

    def extract_technologies(self, text: str) -> list[str]:
        """Vocabulary keywords found in `text`, in vocabulary order, capped."""
        text = text.lower()
        found = [tech for tech in self.tech_keywords if tech in text]
        return found[: self.max_technologies]
