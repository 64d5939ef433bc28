# projfinder/core/discovery/pattern_matching.py
import os
from pathlib import Path
from typing import Iterable, List, Optional, Union
import pathspec
import structlog

from projfinder.config.settings import DEFAULT_IGNORED_NAMES
from projfinder.exceptions import DiscoveryError

log = structlog.get_logger(__name__)

def compile_glob_patterns_to_spec(glob_patterns: List[str]) -> Optional[pathspec.PathSpec]:
    # compiles a list of glob patterns into a pathspec object for matching.
    if not glob_patterns:
        return None
    try:
        return pathspec.PathSpec.from_lines(pathspec.patterns.GitWildMatchPattern, glob_patterns)
    except Exception as e:
        raise DiscoveryError(f"error compiling ignore patterns {glob_patterns}: {e}")

def basename_of(path: Union[str, "os.PathLike[str]"]) -> str:
    # final path component, ignoring any trailing separator.
    text = os.fspath(path)
    stripped = text.rstrip(os.sep + (os.altsep or ""))
    return os.path.basename(stripped or text)

class PathFilter:
    """Decides whether a directory is excluded from discovery.

    Matching looks only at the directory's own name, never at its parents:
    ``names`` are compared exactly (case-sensitive) and ``patterns`` are
    git-style wildcards applied to that name.
    """

    def __init__(self, names: Optional[Iterable[str]] = None, patterns: Optional[List[str]] = None):
        self.names = frozenset(DEFAULT_IGNORED_NAMES if names is None else names)
        self.patterns = list(patterns or [])
        self._spec = compile_glob_patterns_to_spec(self.patterns)

    def is_ignored(self, path: Union[str, Path]) -> bool:
        name = basename_of(path)
        if name in self.names:
            return True
        # everything checked here is a directory, so "cache/" style patterns must match too.
        if self._spec is not None and name and (self._spec.match_file(name) or self._spec.match_file(name + "/")):
            log.debug("directory_ignored_by_pattern", name=name)
            return True
        return False

    def __repr__(self) -> str:
        return f"PathFilter(names={sorted(self.names)!r}, patterns={self.patterns!r})"
