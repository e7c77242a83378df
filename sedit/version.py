from __future__ import annotations

import importlib.metadata
import os
import subprocess
from pathlib import Path
from typing import Optional


def _run_git(args: list[str], cwd: Optional[str] = None) -> Optional[str]:
    try:
        out = subprocess.check_output(
            ["git", *args], cwd=cwd or os.getcwd(), stderr=subprocess.DEVNULL
        )
        return out.decode().strip() or None
    except (OSError, subprocess.CalledProcessError):
        return None


def _from_metadata() -> Optional[str]:
    try:
        return importlib.metadata.version("sedit")
    except importlib.metadata.PackageNotFoundError:
        return None


def _from_git_repo() -> Optional[str]:
    here = Path(__file__).resolve().parent
    return _run_git(["describe", "--tags", "--always", "--dirty"], cwd=str(here))


def get_version_string() -> str:
    # Priority: installed metadata -> live git checkout -> unknown
    for getter in (_from_metadata, _from_git_repo):
        version = getter()
        if version:
            return version
    return "unknown"
