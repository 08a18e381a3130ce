"""Random media selection from source directories."""

import logging
import random
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import TypeVar

from reelsmith.models.errors import EmptyPoolError, InsufficientPoolError, NotFoundError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def matches_extension(path: Path, extensions: Iterable[str]) -> bool:
    """Case-insensitive suffix check against a list of ``.ext`` strings."""
    suffix = path.suffix.lower()
    return any(suffix == ext.lower() for ext in extensions)


class MediaSelector:
    """Uniform random picks over the files of a directory.

    The random source is injectable so that tests (and reproducible runs)
    can pass a seeded ``random.Random``.
    """

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def list_media(
        self,
        directory: Path,
        extensions: Iterable[str],
        exclude_suffixes: Iterable[str] = (),
    ) -> list[Path]:
        """Return the files of ``directory`` matching ``extensions``, sorted by name."""
        directory = Path(directory)
        if not directory.is_dir():
            raise NotFoundError(
                f"Directory not found: {directory}", details={"directory": str(directory)}
            )
        extensions = list(extensions)
        excluded = [s.lower() for s in exclude_suffixes]
        return sorted(
            p
            for p in directory.iterdir()
            if p.is_file()
            and matches_extension(p, extensions)
            and not any(p.name.lower().endswith(s) for s in excluded)
        )

    def select(
        self,
        directory: Path,
        extensions: Iterable[str],
        exclude_suffixes: Iterable[str] = (),
    ) -> Path:
        """Pick one matching file uniformly at random."""
        extensions = list(extensions)
        files = self.list_media(directory, extensions, exclude_suffixes)
        if not files:
            raise EmptyPoolError(
                f"No files found in {directory} with extensions: {', '.join(extensions)}",
                details={"directory": str(directory), "extensions": extensions},
            )
        selected = self.rng.choice(files)
        logger.debug("Selected %s from %s", selected.name, directory)
        return selected

    def select_two_distinct(self, pool: Sequence[T]) -> tuple[T, T]:
        """Draw two different elements without replacement.

        The second index is re-drawn until it differs from the first, which
        gives every unordered pair the same probability.
        """
        if len(pool) < 2:
            raise InsufficientPoolError(
                f"Need at least 2 different items, found {len(pool)}",
                details={"pool_size": len(pool)},
            )
        first = self.rng.randrange(len(pool))
        second = self.rng.randrange(len(pool))
        while second == first:
            second = self.rng.randrange(len(pool))
        return pool[first], pool[second]
