# projfinder/core/discovery/lister.py
import os
from pathlib import Path
from typing import List
import structlog

from projfinder.core.discovery.pattern_matching import PathFilter
from projfinder.core.paths import is_readable_dir

log = structlog.get_logger(__name__)

def list_child_directories(directory: Path, path_filter: PathFilter) -> List[Path]:
    """
    Lists the immediate subdirectories of `directory` that discovery may descend into.

    Hidden entries, non-directories, unreadable directories and ignored names
    are left out. Order follows the filesystem's enumeration order. A directory
    that cannot be listed at all yields an empty list instead of an error.
    """
    try:
        with os.scandir(directory) as it:
            entries = list(it)
    except OSError as e:
        log.warning("directory_unreadable", directory=str(directory), error=str(e))
        return []

    children: List[Path] = []
    for entry in entries:
        if entry.name.startswith("."):
            continue
        try:
            # symlinked directories are followed; loops are bounded only by depth.
            if not entry.is_dir():
                continue
        except OSError:
            continue
        if path_filter.is_ignored(entry.name):
            log.debug("child_directory_ignored", directory=entry.path)
            continue
        child = Path(entry.path)
        if not is_readable_dir(child):
            log.debug("child_directory_unreadable_skipped", directory=entry.path)
            continue
        children.append(child)
    return children
