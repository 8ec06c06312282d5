from __future__ import annotations

import logging
import lzma
import shutil
import tarfile
import tempfile
import zlib
from pathlib import Path
from typing import Iterable, Sequence

from ckptinspect.common.errors import MaterializationError
from ckptinspect.common.schema import CONFIG_DUMP_FILE, SPEC_DUMP_FILE, Task
from ckptinspect.tasks.base import TaskProvider

log = logging.getLogger("ckptinspect.tasks")

# raised by damaged or truncated archives, compressed ones included
EXTRACT_ERRORS = (tarfile.TarError, OSError, EOFError, zlib.error, lzma.LZMAError)


def member_name(ti: tarfile.TarInfo) -> str:
    name = ti.name
    while name.startswith("./"):
        name = name[2:]
    return name


def is_required(name: str, required: Sequence[str]) -> bool:
    # entries are exact names or prefixes; startswith covers both
    return any(name.startswith(r) for r in required)


class ArchiveTaskProvider(TaskProvider):
    """Extracts the required members of each checkpoint tar archive into its own temp dir."""

    def __init__(self, work_dir: Path | None = None) -> None:
        self.work_dir = work_dir

    def create_tasks(self, targets: Sequence[str], required: Iterable[str]) -> list[Task]:
        required = tuple(required)
        tasks: list[Task] = []
        try:
            for target in targets:
                tasks.append(self._materialize(target, required))
        except Exception:
            self.cleanup_tasks(tasks)
            raise
        return tasks

    def cleanup_tasks(self, tasks: Iterable[Task]) -> None:
        for task in tasks:
            log.debug("removing task dir %s", task.dir)
            shutil.rmtree(task.dir, ignore_errors=True)

    def _materialize(self, target: str, required: tuple[str, ...]) -> Task:
        path = Path(target)
        if not path.is_file():
            raise MaterializationError(f"checkpoint archive not found: {target}", path=path)

        try:
            if self.work_dir is not None:
                self.work_dir.mkdir(parents=True, exist_ok=True)
            out_dir = Path(tempfile.mkdtemp(prefix="ckptinspect-", dir=self.work_dir))
        except OSError as e:
            raise MaterializationError(f"cannot create work dir for {target}: {e}", path=path) from e
        task = Task(target=target, dir=out_dir)

        try:
            with tarfile.open(path, "r:*") as tf:
                members = []
                for ti in tf.getmembers():
                    name = member_name(ti)
                    if (ti.isfile() or ti.isdir()) and is_required(name, required):
                        ti.name = name
                        members.append(ti)
                tf.extractall(out_dir, members=members, filter="data")
        except EXTRACT_ERRORS as e:
            self.cleanup_tasks([task])
            raise MaterializationError(f"failed to extract {target}: {e}", path=path) from e

        missing = [m for m in (SPEC_DUMP_FILE, CONFIG_DUMP_FILE) if not (out_dir / m).is_file()]
        if missing:
            self.cleanup_tasks([task])
            raise MaterializationError(
                f"{target} is not a container checkpoint archive (missing {', '.join(missing)})",
                path=path,
            )

        log.info("extracted %d members from %s into %s", len(members), target, out_dir)
        return task
