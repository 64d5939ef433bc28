# projfinder/core/detection.py
"""
Project root detection backends.

A detector answers one question for a directory: is this directory itself the
top of a project? Every backend reports through a ``DetectionResult`` so callers
can tell "not a root" apart from "could not tell".
"""
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, Protocol, Sequence
import structlog

from projfinder.config.settings import DetectorKind
from projfinder.core.paths import canonicalize, is_readable_dir, paths_equal
from projfinder.exceptions import ConfigError, DetectionError

log = structlog.get_logger(__name__)

DEFAULT_VCS_MARKERS = [".git", ".hg", ".svn", ".bzr", "_darcs", ".fslckout", ".jj", ".projfinder"]

DEFAULT_MANIFESTS = [
    "pyproject.toml", "setup.py", "package.json", "Cargo.toml", "go.mod",
    "pom.xml", "build.gradle", "build.gradle.kts", "Gemfile", "composer.json",
    "mix.exs", "stack.yaml", "deno.json", "CMakeLists.txt", "Makefile",
]

GIT_TIMEOUT_SECONDS = 10

class DetectionStatus(Enum):
    ROOT = "root"
    NOT_ROOT = "not_root"
    FAILED = "failed"

@dataclass(frozen=True)
class DetectionResult:
    status: DetectionStatus
    root: Optional[Path] = None
    error: Optional[str] = None

    @classmethod
    def found(cls, root: Path) -> "DetectionResult":
        return cls(DetectionStatus.ROOT, root=root)

    @classmethod
    def not_root(cls) -> "DetectionResult":
        return cls(DetectionStatus.NOT_ROOT)

    @classmethod
    def failed(cls, error: str) -> "DetectionResult":
        return cls(DetectionStatus.FAILED, error=error)

    @property
    def is_root(self) -> bool:
        return self.status is DetectionStatus.ROOT

class RootDetector(Protocol):
    def detect(self, directory: Path) -> DetectionResult: ...

class ProjectRootDetector:
    """
    Base for detectors that can name the project root enclosing a directory.

    Subclasses implement ``find_root``; ``detect`` turns that into a verdict
    about the directory itself. A directory nested inside some other project
    is not a root, even though the backend recognizes it as part of one.
    """
    name = "base"

    def find_root(self, directory: Path) -> Optional[Path]:
        raise NotImplementedError

    def detect(self, directory: Path) -> DetectionResult:
        directory = canonicalize(directory)
        if not is_readable_dir(directory):
            return DetectionResult.failed(f"directory is not readable: {directory}")
        try:
            root = self.find_root(directory)
        except Exception as e:
            log.debug("detector_raised", detector=self.name, directory=str(directory), error=str(e))
            return DetectionResult.failed(f"{self.name}: {e}")
        if root is None or not paths_equal(root, directory):
            return DetectionResult.not_root()
        return DetectionResult.found(directory)

class MarkerRootDetector(ProjectRootDetector):
    """
    Finds roots by marker files or directories.

    ``bottom_up``: the nearest directory (starting at the candidate and moving
    up) that contains any marker. ``top_down_recurring``: the topmost directory
    of the unbroken run of ancestors that contain a marker, which suits markers
    repeated throughout a tree such as a Makefile in every subdirectory.
    """
    name = "markers"
    STRATEGIES = ("bottom_up", "top_down_recurring")

    def __init__(self, markers: Optional[Sequence[str]] = None, strategy: str = "bottom_up"):
        if strategy not in self.STRATEGIES:
            raise ConfigError(f"unknown marker strategy '{strategy}', expected one of {self.STRATEGIES}")
        self.markers = list(markers) if markers else list(DEFAULT_VCS_MARKERS)
        self.strategy = strategy

    def _has_marker(self, directory: Path) -> bool:
        return any((directory / marker).exists() for marker in self.markers)

    def find_root(self, directory: Path) -> Optional[Path]:
        chain = [directory, *directory.parents]
        if self.strategy == "bottom_up":
            return next((d for d in chain if self._has_marker(d)), None)

        found: Optional[Path] = None
        for candidate in chain:
            if self._has_marker(candidate):
                found = candidate
            elif found is not None:
                break
        return found

class ManifestRootDetector(MarkerRootDetector):
    # treats any directory holding a build manifest as a project root.
    name = "manifests"

    def __init__(self, manifests: Optional[Sequence[str]] = None):
        super().__init__(list(manifests) if manifests else list(DEFAULT_MANIFESTS), strategy="bottom_up")

class GitRootDetector(ProjectRootDetector):
    # asks git itself for the work tree's top level directory.
    name = "git"

    def __init__(self, timeout: int = GIT_TIMEOUT_SECONDS):
        self.timeout = timeout

    def find_root(self, directory: Path) -> Optional[Path]:
        try:
            result = subprocess.run(
                ["git", "rev-parse", "--show-toplevel"],
                cwd=directory,
                capture_output=True,
                text=True,
                check=False,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise DetectionError(f"git executable not found: {e}")
        except subprocess.TimeoutExpired:
            raise DetectionError(f"git timed out after {self.timeout}s in {directory}")

        if result.returncode != 0:
            return None
        toplevel = result.stdout.strip()
        return Path(toplevel) if toplevel else None

class ChainRootDetector:
    # asks each detector in turn; the first one that finds a root wins.
    name = "chain"

    def __init__(self, detectors: Iterable[RootDetector]):
        self.detectors: List[RootDetector] = list(detectors)

    def detect(self, directory: Path) -> DetectionResult:
        errors: List[str] = []
        for detector in self.detectors:
            result = detector.detect(directory)
            if result.is_root:
                return result
            if result.status is DetectionStatus.FAILED and result.error:
                errors.append(result.error)
        if errors:
            return DetectionResult.failed("; ".join(errors))
        return DetectionResult.not_root()

def build_detector(kinds: Sequence[DetectorKind], markers: Optional[Sequence[str]] = None) -> RootDetector:
    # builds the detector (or chain of detectors) named by the configuration.
    if not kinds:
        raise ConfigError("at least one root detector must be configured")
    detectors: List[RootDetector] = []
    for kind in kinds:
        if kind is DetectorKind.MARKERS:
            detectors.append(MarkerRootDetector(markers))
        elif kind is DetectorKind.MANIFESTS:
            detectors.append(ManifestRootDetector())
        elif kind is DetectorKind.GIT:
            detectors.append(GitRootDetector())
    log.debug("root_detector_built", detectors=[k.value for k in kinds])
    return detectors[0] if len(detectors) == 1 else ChainRootDetector(detectors)
