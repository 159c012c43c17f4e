"""Config hierarchy and typed settings."""

import pytest
from pydantic import ValidationError

from clrag.core.config.loader import ConfigLoader, load_config, parse_env_value
from clrag.core.config.settings import (
    GenerationSettings,
    OpenAISettings,
    RetrievalSettings,
    TimeoutSettings,
)
from clrag.core.exceptions import InvalidDomainCategory
from clrag.core.models.enums import KnowledgeCategory


def test_default_config_values():
    config = load_config()
    settings = RetrievalSettings.from_config(config)

    assert settings.thresholds["cover_letters"] == [0.3, 0.2, 0.1, 0.05]
    assert settings.thresholds["projects"] == [0.3, 0.2, 0.1, 0.05]
    assert settings.thresholds["skills"] == [0.2, 0.15, 0.1, 0.05]
    assert settings.limits == {"cover_letters": 4, "projects": 3, "skills": 8}
    assert settings.manual_scan_limits == {"cover_letters": 20, "projects": 20, "skills": 50}
    assert settings.fallback.limits == {"cover_letters": 2, "projects": 2, "skills": 4}
    assert settings.fallback.sentinel == 0.05
    assert settings.rerank_projects is True

    openai_settings = OpenAISettings.from_config(config)
    assert openai_settings.embedding_model == "text-embedding-3-small"

    generation = GenerationSettings.from_config(config)
    assert generation.max_tokens == 1500
    assert generation.temperature == 0.6
    assert generation.strong_match_threshold == 0.2

    assert TimeoutSettings.from_config(config).search_seconds == 15


def test_environment_file_and_overrides(tmp_path, monkeypatch):
    (tmp_path / "environments").mkdir()
    (tmp_path / "default.yaml").write_text("retrieval:\n  limits:\n    cover_letters: 4\n    projects: 3\n    skills: 8\n")
    (tmp_path / "environments" / "staging.yaml").write_text("retrieval:\n  limits:\n    skills: 12\n")
    monkeypatch.setenv("CLRAG_ENV", "staging")

    config = ConfigLoader(tmp_path).load(overrides={"retrieval": {"limits": {"projects": 5}}})

    assert config["retrieval"]["limits"] == {"cover_letters": 4, "projects": 5, "skills": 12}


def test_env_var_overrides_nested_keys(monkeypatch):
    monkeypatch.setenv("CLRAG_RETRIEVAL_FALLBACK_SENTINEL", "0.1")
    monkeypatch.setenv("CLRAG_OPENAI_EMBEDDING_MODEL", "text-embedding-3-large")
    monkeypatch.setenv("CLRAG_RETRIEVAL_THRESHOLDS_SKILLS", "0.5,0.25")
    monkeypatch.setenv("CLRAG_RETRIEVAL_RERANK_PROJECTS", "false")

    config = load_config()

    assert config["retrieval"]["fallback"]["sentinel"] == 0.1
    assert config["openai"]["embedding_model"] == "text-embedding-3-large"
    assert config["retrieval"]["thresholds"]["skills"] == [0.5, 0.25]
    assert config["retrieval"]["rerank_projects"] is False


def test_reserved_env_vars_are_not_config(monkeypatch):
    monkeypatch.setenv("CLRAG_TEST_MODE", "1")
    config = load_config()
    assert "test" not in config


def test_table_names():
    settings = RetrievalSettings()
    assert settings.table_for(KnowledgeCategory.COVER_LETTERS) == "r1_job_examples"
    assert settings.table_for("projects") == "r2_past_projects"
    assert settings.table_for(KnowledgeCategory.SKILLS, "Web") == "web_r3_skills"
    assert settings.table_for(KnowledgeCategory.PROJECTS, "ai") == "ai_r2_projects"


def test_unknown_domain_category_rejected():
    settings = RetrievalSettings()
    with pytest.raises(InvalidDomainCategory):
        settings.normalize_domain("desktop")
    assert settings.normalize_domain(None) is None
    assert settings.normalize_domain("  ") is None


def test_missing_category_rejected():
    with pytest.raises(ValidationError):
        RetrievalSettings(limits={"cover_letters": 4, "projects": 3})


def test_empty_threshold_list_rejected():
    with pytest.raises(ValidationError):
        RetrievalSettings(
            thresholds={"cover_letters": [], "projects": [0.3], "skills": [0.2]},
        )


def test_env_value_parsing():
    assert parse_env_value("yes") is True
    assert parse_env_value("False") is False
    assert parse_env_value("3") == 3
    assert parse_env_value("0.25") == 0.25
    assert parse_env_value("0.3,0.2") == [0.3, 0.2]
    assert parse_env_value("gpt-4o-mini") == "gpt-4o-mini"


def test_config_dir_from_env(tmp_path, monkeypatch):
    (tmp_path / "default.yaml").write_text("openai:\n  completion_model: custom-model\n")
    monkeypatch.setenv("CLRAG_CONFIG_DIR", str(tmp_path))
    assert load_config()["openai"]["completion_model"] == "custom-model"
