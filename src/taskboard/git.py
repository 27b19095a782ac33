"""Git repository helpers and taskboard configuration."""

from pathlib import Path
from typing import Any

from git import InvalidGitRepositoryError, NoSuchPathError, Repo

SECTION = "taskboard"

DEFAULTS = {
    "branch": "taskboard",
    "poll-interval": 2.0,
}


def _python_key(git_key: str) -> str:
    """Convert git-style key (hyphenated) to Python-style (underscored)."""
    return git_key.replace("-", "_")


def _git_key(python_key: str) -> str:
    """Convert Python-style key (underscored) to git-style (hyphenated)."""
    return python_key.replace("_", "-")


def _coerce_value(git_key: str, raw: str):
    """Type-coerce taskboard section values using defaults."""
    default = DEFAULTS.get(git_key)
    if default is None:
        return raw
    if isinstance(default, bool):
        return raw.lower() in ("true", "yes", "1")
    if isinstance(default, float):
        return float(raw)
    if isinstance(default, int):
        return int(raw)
    return raw


def read_config(repo_path: str | Path) -> dict[str, Any]:
    """Read the [taskboard] git config section with defaults filled in.

    Keys are Python-style (underscored).
    """
    reader = Repo(repo_path).config_reader()
    config: dict[str, Any] = {}
    if reader.has_section(SECTION):
        for git_k, raw in reader.items(SECTION):
            config[_python_key(git_k)] = _coerce_value(git_k, raw)
    for git_k, default in DEFAULTS.items():
        config.setdefault(_python_key(git_k), default)
    return config


def write_config_key(repo_path: str | Path, key: str, value) -> None:
    """Write one key to the [taskboard] section. key is python-style."""
    writer = Repo(repo_path).config_writer("repository")
    if isinstance(value, bool):
        writer.set_value(SECTION, _git_key(key), str(value).lower())
    else:
        writer.set_value(SECTION, _git_key(key), str(value))
    writer.release()


def is_git_repo(path: str | Path) -> bool:
    """Check if path is inside a git repository."""
    try:
        Repo(path)
        return True
    except (InvalidGitRepositoryError, NoSuchPathError):
        return False


def init_repo(path: str | Path) -> Repo:
    """Initialize a new git repository at path."""
    return Repo.init(path)


def has_branch(repo_path: str | Path, branch: str) -> bool:
    """Check if a local branch exists in the repository."""
    return branch in [h.name for h in Repo(repo_path).heads]
