"""Configuration helpers for the dendrogram overlap service."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parents[1]
ENV_PATH = PROJECT_ROOT / ".env"

# Load environment variables early so downstream modules can rely on them.
load_dotenv(ENV_PATH, override=False)

DATA_DIR_ENV = "DENDRO_DATA_DIR"
TREE_SOURCE_ENV = "DENDRO_TREE_SOURCE"
SCORES_SOURCE_ENV = "DENDRO_SCORES_SOURCE"
EXPLANATIONS_SOURCE_ENV = "DENDRO_EXPLANATIONS_SOURCE"
FETCH_TIMEOUT_ENV = "DENDRO_FETCH_TIMEOUT"
PRIORITY_KEYWORDS_ENV = "DENDRO_PRIORITY_KEYWORDS"

DEFAULT_DATA_DIR = PROJECT_ROOT / "data"
DEFAULT_TREE_FILE = "dendrogram_data.json"
DEFAULT_SCORES_FILE = "scores.csv"
DEFAULT_EXPLANATIONS_FILE = "explicaciones.csv"
DEFAULT_FETCH_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class SourceSettings:
    """Where the three input artifacts come from (paths or http(s) URLs)."""

    tree: str
    scores: str
    explanations: str
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT_SECONDS
    priority_keywords: List[str] = field(default_factory=list)


def _get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def get_data_dir() -> Path:
    """Resolve the directory holding the default artifacts."""

    raw_path = _get_env(DATA_DIR_ENV, str(DEFAULT_DATA_DIR))
    return Path(raw_path).expanduser().resolve()


def _parse_keywords(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


def get_source_settings() -> SourceSettings:
    """Resolve artifact locations from environment with sensible defaults."""

    data_dir = get_data_dir()
    raw_timeout = _get_env(FETCH_TIMEOUT_ENV)
    try:
        timeout = float(raw_timeout) if raw_timeout is not None else DEFAULT_FETCH_TIMEOUT_SECONDS
    except ValueError as exc:
        raise RuntimeError(
            f"{FETCH_TIMEOUT_ENV} must be a number of seconds; received '{raw_timeout}'."
        ) from exc
    if timeout <= 0:
        raise RuntimeError(f"{FETCH_TIMEOUT_ENV} must be positive; received '{raw_timeout}'.")

    return SourceSettings(
        tree=_get_env(TREE_SOURCE_ENV, str(data_dir / DEFAULT_TREE_FILE)),
        scores=_get_env(SCORES_SOURCE_ENV, str(data_dir / DEFAULT_SCORES_FILE)),
        explanations=_get_env(EXPLANATIONS_SOURCE_ENV, str(data_dir / DEFAULT_EXPLANATIONS_FILE)),
        fetch_timeout=timeout,
        priority_keywords=_parse_keywords(_get_env(PRIORITY_KEYWORDS_ENV)),
    )
