# projfinder/core/registry.py
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional
import structlog

from projfinder.core.counters import RunCounters
from projfinder.core.paths import PathInput, canonicalize, path_key
from projfinder.core.persistence import ProjectListStore
from projfinder.exceptions import PersistenceError

log = structlog.get_logger(__name__)

class Registration(Enum):
    REGISTERED = "registered"
    ALREADY_KNOWN = "already_known"

class ProjectRegistry:
    """
    Ordered set of known project roots, newest first, unique by path equality.

    Entries are only ever added. Each new entry is committed to the attached
    store right away; a failed commit is logged and the in-memory entry stays,
    since the registry is authoritative for the rest of the run.

    Not safe for concurrent use: register() is a read-check-insert-commit
    sequence and would need to become atomic per canonical path before subtree
    walks could run in parallel.
    """

    def __init__(self, projects: Iterable[PathInput] = (), store: Optional[ProjectListStore] = None):
        self.store = store
        self._projects: List[Path] = []
        self._keys: Dict[str, Path] = {}
        for project in projects:
            root = canonicalize(project)
            key = path_key(root)
            if key in self._keys:
                log.debug("duplicate_project_dropped_on_load", project=str(root))
                continue
            self._keys[key] = root
            self._projects.append(root)

    @classmethod
    def from_store(cls, store: ProjectListStore) -> "ProjectRegistry":
        return cls(store.load(), store=store)

    def __contains__(self, path: object) -> bool:
        try:
            return path_key(path) in self._keys  # type: ignore[arg-type]
        except TypeError:
            return False

    def __iter__(self) -> Iterator[Path]:
        return iter(list(self._projects))

    def __len__(self) -> int:
        return len(self._projects)

    @property
    def projects(self) -> List[Path]:
        return list(self._projects)

    def register(self, root: PathInput, counters: Optional[RunCounters] = None) -> Registration:
        root = canonicalize(root)
        key = path_key(root)
        if key in self._keys:
            log.info("project_already_known", project=str(root), known_as=str(self._keys[key]))
            return Registration.ALREADY_KNOWN

        self._keys[key] = root
        self._projects.insert(0, root)
        if counters is not None:
            counters.added += 1
        log.info("project_added", project=str(root), total_projects=len(self._projects))
        self.commit()
        return Registration.REGISTERED

    def commit(self):
        # best-effort durability: a failed write never undoes the in-memory insertion.
        if self.store is None:
            return
        try:
            self.store.commit(self._projects)
        except PersistenceError as e:
            log.warning("project_list_commit_failed", path=str(self.store.path), error=str(e))
