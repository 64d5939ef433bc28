# projfinder/core/discovery/walker.py
from pathlib import Path
from typing import Optional
import structlog

from projfinder.core.counters import RunCounters
from projfinder.core.detection import DetectionStatus, RootDetector
from projfinder.core.discovery.lister import list_child_directories
from projfinder.core.discovery.pattern_matching import PathFilter
from projfinder.core.paths import PathInput, canonicalize, is_readable_dir
from projfinder.core.registry import ProjectRegistry

log = structlog.get_logger(__name__)

class Walker:
    """
    Depth-bounded, depth-first walk that registers every project root it meets.

    Each directory reached is checked for root status, including directories
    inside an already found project, so nested repositories are discovered
    too. The depth bound is the only guard against symlink loops.
    """

    def __init__(self, detector: RootDetector, registry: ProjectRegistry, path_filter: Optional[PathFilter] = None):
        self.detector = detector
        self.registry = registry
        self.path_filter = path_filter or PathFilter()

    def walk(self, directory: PathInput, depth: int, counters: Optional[RunCounters] = None) -> RunCounters:
        counters = counters if counters is not None else RunCounters()
        self._walk(canonicalize(directory), depth, counters)
        return counters

    def _walk(self, directory: Path, depth: int, counters: RunCounters):
        log.debug("walk_entered", directory=str(directory), depth=depth)

        if not is_readable_dir(directory):
            log.debug("walk_skipped_not_a_readable_directory", directory=str(directory))
            return
        if self.path_filter.is_ignored(directory):
            log.debug("walk_skipped_ignored_directory", directory=str(directory))
            return

        log.info("scanning_directory", directory=str(directory))
        result = self.detector.detect(directory)
        if result.is_root:
            counters.found += 1
            log.info("root_detected", directory=str(directory))
            self.registry.register(result.root, counters)
        elif result.status is DetectionStatus.FAILED:
            log.warning("root_detection_failed", directory=str(directory), error=result.error)

        if depth <= 0:
            return
        for child in list_child_directories(directory, self.path_filter):
            self._walk(child, depth - 1, counters)
