"""Create directories and copy toolkit files into place."""

import logging
import shutil
from collections.abc import Callable
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)

ConfirmFn = Callable[[Path], bool]


class ConflictPolicy(str, Enum):
    """What to do when a copy destination already exists."""

    OVERWRITE = "overwrite"
    SKIP = "skip"
    PROMPT = "prompt"


class CopyResult(str, Enum):
    COPIED = "copied"
    OVERWRITTEN = "overwritten"
    SKIPPED = "skipped"


def ensure_directory(path: Path) -> bool:
    """Create ``path`` and any missing parents. Returns True if it was created."""
    if path.is_dir():
        return False
    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Created directory %s", path)
    return True


def _should_overwrite(
    destination: Path, on_conflict: ConflictPolicy, confirm: ConfirmFn | None
) -> bool:
    if on_conflict == ConflictPolicy.OVERWRITE:
        return True
    if on_conflict == ConflictPolicy.SKIP:
        return False
    if confirm is None:
        raise ValueError("ConflictPolicy.PROMPT requires a confirm callable")
    return confirm(destination)


def copy_file(
    source: Path,
    destination: Path,
    on_conflict: ConflictPolicy,
    confirm: ConfirmFn | None = None,
) -> CopyResult:
    """Copy a single file, consulting ``on_conflict`` if the destination exists."""
    if not source.is_file():
        raise FileNotFoundError(f"Source file not found: {source}")

    existed = destination.exists()
    if existed and not _should_overwrite(destination, on_conflict, confirm):
        logger.debug("Skipped %s", destination)
        return CopyResult.SKIPPED

    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(source, destination)
    logger.debug("Copied %s -> %s", source, destination)
    return CopyResult.OVERWRITTEN if existed else CopyResult.COPIED


def copy_tree(
    source: Path,
    destination_parent: Path,
    on_conflict: ConflictPolicy,
    confirm: ConfirmFn | None = None,
) -> CopyResult:
    """Copy a directory to ``destination_parent / source.name``.

    Overwriting replaces the whole destination subtree.
    """
    if not source.is_dir():
        raise FileNotFoundError(f"Source directory not found: {source}")

    destination = destination_parent / source.name
    existed = destination.exists()
    if existed:
        if not _should_overwrite(destination, on_conflict, confirm):
            logger.debug("Skipped %s", destination)
            return CopyResult.SKIPPED
        if destination.is_dir() and not destination.is_symlink():
            shutil.rmtree(destination)
        else:
            destination.unlink()

    destination_parent.mkdir(parents=True, exist_ok=True)
    shutil.copytree(source, destination)
    logger.debug("Copied %s/ -> %s/", source, destination)
    return CopyResult.OVERWRITTEN if existed else CopyResult.COPIED
