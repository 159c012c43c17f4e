"""Layered configuration: YAML defaults, per-environment YAML, overrides, CLRAG_* variables."""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

# OPENAI_API_KEY and CLRAG_* values may live in a local .env
load_dotenv()

ENV_PREFIX = "CLRAG_"
DEFAULT_ENV = "development"
REPO_CONFIG_DIR = Path(__file__).resolve().parents[3] / "config"

# Switches read directly by the code, never copied into the config dict
_RESERVED_ENV_KEYS = {"CLRAG_ENV", "CLRAG_TEST_MODE", "CLRAG_MOCK_OPENAI", "CLRAG_CONFIG_DIR"}


class ConfigLoader:
    """Merge configuration sources, later ones winning.

    1. `default.yaml` in the config directory
    2. `environments/{CLRAG_ENV}.yaml` (CLRAG_ENV defaults to "development")
    3. an overrides dict passed to `load`
    4. CLRAG_* environment variables, e.g. CLRAG_RETRIEVAL_FALLBACK_SENTINEL=0.1
       sets retrieval.fallback.sentinel

    The config directory is, in order: the `config_dir` argument,
    $CLRAG_CONFIG_DIR, or the repository's `config/`.
    """

    def __init__(self, config_dir: Path | str | None = None):
        config_dir = config_dir or os.getenv("CLRAG_CONFIG_DIR") or REPO_CONFIG_DIR
        self.config_dir = Path(config_dir)

    @property
    def environment(self) -> str:
        return os.getenv("CLRAG_ENV", DEFAULT_ENV)

    def load(self, overrides: dict[str, Any] | None = None) -> dict[str, Any]:
        layers = [
            self.read_yaml(self.config_dir / "default.yaml"),
            self.read_yaml(self.config_dir / "environments" / f"{self.environment}.yaml"),
            overrides or {},
        ]
        config: dict[str, Any] = {}
        for layer in layers:
            config = merge(config, layer)
        return self.apply_env(config, os.environ)

    @staticmethod
    def read_yaml(path: Path) -> dict[str, Any]:
        """Parsed mapping from `path`; a missing or empty file is `{}`."""
        if not path.exists():
            return {}
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"{path}: top level must be a mapping")
        return data

    def apply_env(self, config: dict[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
        for key, raw in environ.items():
            if not key.startswith(ENV_PREFIX) or key in _RESERVED_ENV_KEYS:
                continue
            words = key[len(ENV_PREFIX):].lower().split("_")
            assign(config, key_path(config, words), parse_env_value(raw))
        return config


def merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursive dict merge returning a new dict; non-dict values replace."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = merge(current, value)
        else:
            merged[key] = value
    return merged


def key_path(config: dict[str, Any], words: list[str]) -> list[str]:
    """Turn CLRAG_* words into a key path using the keys that already exist.

    Underscores are ambiguous (`embedding_model` vs `embedding.model`), so at
    each level the longest run of words naming an existing key is taken.
    Words that match nothing become one key each.
    """
    path: list[str] = []
    node: Any = config
    start = 0
    while start < len(words):
        end = start + 1
        if isinstance(node, dict):
            for stop in range(len(words), start, -1):
                if "_".join(words[start:stop]) in node:
                    end = stop
                    break
        key = "_".join(words[start:end])
        path.append(key)
        node = node.get(key) if isinstance(node, dict) else None
        start = end
    return path


def assign(config: dict[str, Any], path: list[str], value: Any) -> None:
    node = config
    for key in path[:-1]:
        child = node.setdefault(key, {})
        if not isinstance(child, dict):
            return
        node = child
    node[path[-1]] = value


def parse_env_value(raw: str) -> Any:
    """bool for true/yes/false/no, list[float] for "0.3,0.2", then int, float, str."""
    lowered = raw.strip().lower()
    if lowered in ("true", "yes"):
        return True
    if lowered in ("false", "no"):
        return False
    if "," in raw:
        try:
            return [float(part) for part in raw.split(",") if part.strip()]
        except ValueError:
            return raw
    for cast in (int, float):
        try:
            return cast(raw)
        except ValueError:
            continue
    return raw


def load_config(
    overrides: dict[str, Any] | None = None,
    config_dir: Path | str | None = None,
) -> dict[str, Any]:
    """Load configuration with the full hierarchy."""
    return ConfigLoader(config_dir).load(overrides=overrides)
