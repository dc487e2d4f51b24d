"""Build metadata, created once at startup and passed to the CLI."""

import subprocess
from importlib import metadata
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

DEV_VERSION = "0.1.0-dev"


def get_git_hash() -> Optional[str]:
    """Return the short commit hash of the checkout this package runs from.

    Returns None for installed (non-git) copies or when git is unavailable.
    """
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            capture_output=True,
            text=True,
            check=True,
            timeout=5.0,
            cwd=Path(__file__).resolve().parent,
        )
        return result.stdout.strip()
    except (subprocess.CalledProcessError, FileNotFoundError, subprocess.TimeoutExpired):
        return None


class BuildInfo(BaseModel, frozen=True):
    version: str = DEV_VERSION
    commit: str = ""
    date: str = ""

    @classmethod
    def detect(cls) -> "BuildInfo":
        try:
            version = metadata.version("wdgraph")
        except metadata.PackageNotFoundError:
            version = DEV_VERSION
        return cls(version=version, commit=get_git_hash() or "")

    def as_text(self) -> str:
        """"<version>" or "<version> (<commit> <date>)"; a blank version reads "dev"."""
        text = self.version.strip() or "dev"
        commit, date = self.commit.strip(), self.date.strip()
        if commit or date:
            text = f"{text} ({commit} {date})"
        return text

    def as_dict(self) -> dict[str, str]:
        return {
            "version": self.version.strip(),
            "commit": self.commit.strip(),
            "date": self.date.strip(),
        }
