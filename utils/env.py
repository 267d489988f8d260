"""Environment helpers for the till configuration.

Loads a `.env` file from the project root (the directory holding
`pyproject.toml`) via `python-dotenv`, and reads typed `POS_*` overrides.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

from dotenv import load_dotenv

__all__ = ["load_project_dotenv", "read_env"]

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _find_project_root(start: Path | None = None) -> Path:
    """Walk upwards until a directory containing `pyproject.toml` is found."""
    current = start or Path(__file__).resolve().parent
    for _ in range(10):
        if (current / "pyproject.toml").exists():
            return current
        if current.parent == current:
            break
        current = current.parent
    return Path(__file__).resolve().parent


def load_project_dotenv() -> bool:
    """Load the project-level `.env` if present. Existing variables win."""
    dotenv_path = _find_project_root() / ".env"
    if not dotenv_path.exists():
        return False
    load_dotenv(dotenv_path=dotenv_path, override=False)
    return True


def read_env(name: str, cast: Callable[[str], T], default: T) -> T:
    """Return `cast(os.environ[name])`, or `default` when unset or blank."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw.strip())
    except ValueError as e:
        raise ValueError(f"Invalid value for {name}: {raw!r}") from e
