"""Version string formatting."""
from __future__ import annotations


def format_version(version: str, date: str, commit: str) -> str:
    """Format the string printed by `pdk version` and `pdk --version`."""
    return f"pdk {version} {commit} {date}\n"
