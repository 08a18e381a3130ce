"""Directory listing helpers for the UI-facing endpoints."""

from collections.abc import Iterable
from pathlib import Path

from reelsmith.models.errors import ValidationError


def list_files(directory: Path, extensions: Iterable[str] | None = None) -> list[str]:
    """Sorted file names in ``directory``, optionally filtered by extension."""
    directory = Path(directory)
    if not directory.is_dir():
        return []
    allowed = [e.lower() for e in extensions] if extensions is not None else None
    return sorted(
        p.name
        for p in directory.iterdir()
        if p.is_file() and (allowed is None or p.suffix.lower() in allowed)
    )


def list_subdirectories(directory: Path, ignore: Iterable[str] = ()) -> list[str]:
    """Sorted sub-directory names in ``directory``, minus hidden and ignored ones."""
    directory = Path(directory)
    if not directory.is_dir():
        return []
    ignored = set(ignore)
    return sorted(
        p.name
        for p in directory.iterdir()
        if p.is_dir() and p.name not in ignored and not p.name.startswith(".")
    )


def safe_child(directory: Path, name: str) -> Path:
    """Resolve a user-supplied file name inside ``directory``."""
    if not name or name in (".", "..") or Path(name).name != name or "\\" in name:
        raise ValidationError(f"Invalid file name: {name!r}", details={"name": name})
    return Path(directory) / name
