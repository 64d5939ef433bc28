# projfinder/config/settings.py
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional, Union
import structlog

log = structlog.get_logger(__name__)

DEFAULT_IGNORED_NAMES = frozenset({
    ".git", ".hg", ".svn", "node_modules", ".cache", "build", "dist",
    "$RECYCLE.BIN", "System Volume Information", "Config.Msi",
})

# plain string entries in a search path are scanned one level deep.
DEFAULT_SEARCH_DEPTH = 1

DEFAULT_PROJECTS_FILE = Path.home() / ".local" / "share" / "projfinder" / "projects.txt"

class DetectorKind(Enum):
    # defines the available root detection backends.
    MARKERS = "markers"
    MANIFESTS = "manifests"
    GIT = "git"

    @classmethod
    def from_string(cls, s: Optional[str]) -> Optional["DetectorKind"]:
        if not s:
            return None
        try:
            return cls(s.lower())
        except ValueError:
            log.warning("invalid_detector_kind_string", input_string=s)
            return None

DEFAULT_DETECTORS = [DetectorKind.MARKERS]

@dataclass(frozen=True)
class DirectorySpec:
    """A directory to scan and how many levels below it to descend.

    Not validated on construction: configuration may carry malformed entries,
    and the discovery run skips those via ``is_valid``.
    """
    path: Union[str, "os.PathLike[str]"]
    depth: Any = DEFAULT_SEARCH_DEPTH

    def is_valid(self) -> bool:
        path = self.path
        if isinstance(path, os.PathLike):
            path = os.fspath(path)
        if not isinstance(path, str) or not path.strip():
            return False
        # bool is an int subclass, but True is not a depth.
        if isinstance(self.depth, bool) or not isinstance(self.depth, int):
            return False
        return self.depth >= 0

@dataclass
class DiscoveryConfig:
    # holds all configuration parameters for a single discovery run.
    search_path: List[DirectorySpec] = field(default_factory=list)
    ignored_names: List[str] = field(default_factory=lambda: sorted(DEFAULT_IGNORED_NAMES))
    ignore_patterns: List[str] = field(default_factory=list)
    detectors: List[DetectorKind] = field(default_factory=lambda: list(DEFAULT_DETECTORS))
    markers: List[str] = field(default_factory=list)
    projects_file: Path = DEFAULT_PROJECTS_FILE
    dry_run: bool = False
