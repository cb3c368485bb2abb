from __future__ import annotations

import importlib.metadata
import subprocess
from pathlib import Path
from typing import Optional

FALLBACK_VERSION = "0.1.0"


def _git_commit(path: Path) -> Optional[str]:
    try:
        out = subprocess.check_output(
            ["git", "rev-parse", "--short=7", "HEAD"],
            cwd=str(path),
            stderr=subprocess.DEVNULL,
        )
        return out.decode().strip() or None
    except (subprocess.CalledProcessError, FileNotFoundError, OSError):
        return None


def get_version() -> str:
    try:
        return importlib.metadata.version("hecto")
    except importlib.metadata.PackageNotFoundError:
        return FALLBACK_VERSION


def get_version_string() -> str:
    """Package version, with the git commit when running from a checkout."""
    version = get_version()
    commit = _git_commit(Path(__file__).resolve().parent)
    return f"{version} ({commit})" if commit else version
