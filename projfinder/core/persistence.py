# projfinder/core/persistence.py
import os
import tempfile
from pathlib import Path
from typing import List, Sequence
import structlog

from projfinder.exceptions import PersistenceError

log = structlog.get_logger(__name__)

class ProjectListStore:
    """
    Flat-file store of known project roots: one absolute path per line,
    newest first. Blank lines and lines starting with '#' are ignored.
    """

    def __init__(self, path: Path):
        self.path = Path(path).expanduser()

    def load(self) -> List[Path]:
        if not self.path.exists():
            log.debug("project_list_file_absent", path=str(self.path))
            return []
        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceError(f"failed to read project list '{self.path}': {e}")

        entries = []
        for line in text.splitlines():
            line = line.strip()
            if line and not line.startswith("#"):
                entries.append(Path(line))
        log.info("project_list_loaded", path=str(self.path), count=len(entries))
        return entries

    def commit(self, projects: Sequence[Path]):
        # writes via a temp file in the same directory so a crash never leaves a half-written list.
        lines = []
        for project in projects:
            text = str(project)
            if "\n" in text or "\r" in text:
                # a line break would split the entry in two on the next load.
                log.warning("project_path_not_storable", project=repr(text))
                continue
            lines.append(f"{text}\n")
        content = "".join(lines)
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=".projects-", suffix=".tmp", dir=self.path.parent)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistenceError(f"failed to write project list '{self.path}': {e}")
        log.debug("project_list_committed", path=str(self.path), count=len(lines))

    def __repr__(self) -> str:
        return f"ProjectListStore({str(self.path)!r})"
