"""Locating and reading ``contentctl.toml``.

The file marks a content root the way ``.git`` marks a repository: it is
looked for in the start directory and then in each parent. The
``CONTENTCTL_CONFIG`` environment variable names a file directly and
turns the walk off.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path

from contentctl.config.models import ContentctlConfig

CONFIG_FILENAME = "contentctl.toml"
CONFIG_ENV_VAR = "CONTENTCTL_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Return the nearest ``contentctl.toml`` at or above *start* (default: cwd).

    When ``CONTENTCTL_CONFIG`` is set, only that file is considered and
    None is returned if it does not exist.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        path = Path(override)
        return path if path.is_file() else None

    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def load_config(path: Path | None = None, cwd: Path | None = None) -> ContentctlConfig:
    """Parse the config file into a validated model; defaults if there is none."""
    path = path or find_config(cwd)
    if path is None:
        return ContentctlConfig()
    with path.open("rb") as fh:
        return ContentctlConfig.model_validate(tomllib.load(fh))
