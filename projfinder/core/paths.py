# projfinder/core/paths.py
import os
from pathlib import Path
from typing import Union

PathInput = Union[str, "os.PathLike[str]"]

def canonicalize(path: PathInput) -> Path:
    # expands "~", makes the path absolute and normalizes separators (including any trailing one).
    # symlinks are kept as written so the walk follows the names the user sees.
    return Path(os.path.abspath(os.path.expanduser(os.fspath(path))))

def path_key(path: PathInput) -> str:
    # the comparison key for path equality: real path with host case folding applied.
    return os.path.normcase(os.path.realpath(canonicalize(path)))

def paths_equal(first: PathInput, second: PathInput) -> bool:
    return path_key(first) == path_key(second)

def is_readable_dir(path: Path) -> bool:
    # a directory can be walked only if it can be both listed and entered.
    try:
        return path.is_dir() and os.access(path, os.R_OK | os.X_OK)
    except OSError:
        return False
