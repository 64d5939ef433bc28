# projfinder/core/pipeline.py
import sys
from typing import Iterable, Optional, Tuple, Union

from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.console import Console as RichConsole
import structlog
import logging as stdlib_logging

from projfinder.config.settings import DirectorySpec, DiscoveryConfig
from projfinder.core.counters import RunCounters
from projfinder.core.detection import build_detector
from projfinder.core.discovery.pattern_matching import PathFilter
from projfinder.core.discovery.walker import Walker
from projfinder.core.persistence import ProjectListStore
from projfinder.core.registry import ProjectRegistry

log = structlog.get_logger(__name__)

SpecInput = Union[DirectorySpec, Tuple[object, object]]

def coerce_spec(item: object) -> Optional[DirectorySpec]:
    # accepts DirectorySpec or a raw (path, depth) pair; returns None for anything invalid.
    if isinstance(item, DirectorySpec):
        spec = item
    elif isinstance(item, (tuple, list)) and len(item) == 2:
        spec = DirectorySpec(item[0], item[1])
    else:
        return None
    return spec if spec.is_valid() else None

class DiscoveryRun:
    # drives one discovery pass over a sequence of (directory, depth) specs.
    def __init__(self, walker: Walker, show_progress: bool = False):
        self.walker = walker
        self.show_progress = show_progress
        self.log = structlog.get_logger(f"{__name__}.{self.__class__.__name__}")

    @classmethod
    def from_config(cls, config: DiscoveryConfig, show_progress: bool = False) -> "DiscoveryRun":
        registry = ProjectRegistry.from_store(ProjectListStore(config.projects_file))
        if config.dry_run:
            # known projects still dedupe, but nothing is written back.
            registry.store = None
        walker = Walker(
            detector=build_detector(config.detectors, config.markers),
            registry=registry,
            path_filter=PathFilter(config.ignored_names, config.ignore_patterns),
        )
        return cls(walker, show_progress=show_progress)

    @property
    def registry(self) -> ProjectRegistry:
        return self.walker.registry

    def _progress(self) -> Progress:
        app_log_level = stdlib_logging.getLogger("projfinder").getEffectiveLevel()
        disabled = not self.show_progress or app_log_level <= stdlib_logging.INFO or not sys.stderr.isatty()
        return Progress(
            SpinnerColumn(), TextColumn("[bold blue]{task.description}"),
            transient=True, disable=disabled, console=RichConsole(file=sys.stderr),
        )

    def run(self, specs: Iterable[SpecInput]) -> RunCounters:
        counters = RunCounters()
        specs = list(specs)
        self.log.info("discovery_run_started", spec_count=len(specs))

        with self._progress() as progress:
            task = progress.add_task("discovering projects...", total=None)
            for item in specs:
                spec = coerce_spec(item)
                if spec is None:
                    self.log.debug("invalid_directory_spec_skipped", spec=repr(item))
                    continue
                self.log.info("root_scan_started", directory=str(spec.path), depth=spec.depth)
                progress.update(task, description=f"scanning {spec.path}")
                self.walker.walk(spec.path, spec.depth, counters)

        self.log.info("discovery_run_finished", found=counters.found, added=counters.added)
        return counters
