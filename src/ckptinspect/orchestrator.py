from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import Iterator, Mapping, Sequence, TextIO

from ckptinspect.common.errors import DecodeError, UnsupportedFormat
from ckptinspect.common.schema import Task, ViewSelection
from ckptinspect.network import format_network_info, read_network_status
from ckptinspect.render.views import RENDERERS, Renderer
from ckptinspect.resolver import RequirementResolver
from ckptinspect.tasks.base import TaskProvider

log = logging.getLogger("ckptinspect.orchestrator")


@contextmanager
def materialized(provider: TaskProvider, targets: Sequence[str], required: Sequence[str]) -> Iterator[list[Task]]:
    """Create tasks for the targets and remove them again however the block exits."""
    tasks = provider.create_tasks(targets, required)
    try:
        yield tasks
    finally:
        provider.cleanup_tasks(tasks)


def show_network(tasks: Sequence[Task], stream: TextIO) -> int:
    """Print network info per task; returns how many tasks failed to decode."""
    failed = 0
    for task in tasks:
        try:
            status, _ = read_network_status(task.dir)
        except DecodeError as e:
            failed += 1
            log.warning("failed to read network information for %s from %s: %s", task.target, e.path, e.message)
            continue
        stream.write(f"\nNetwork Information for {task.dir}:\n{format_network_info(status)}")
        stream.flush()
    return failed


def run_inspect(
    targets: Sequence[str],
    selection: ViewSelection,
    output_format: str,
    *,
    provider: TaskProvider,
    resolver: RequirementResolver | None = None,
    renderers: Mapping[str, Renderer] = RENDERERS,
    stream: TextIO | None = None,
) -> None:
    """
    Inspect checkpoint archives.

    Resolves which archive members the selected views need, has the provider
    extract them, prints network info when asked and hands the tasks to the
    renderer for output_format. Task directories are always cleaned up.
    """
    stream = stream or sys.stdout

    render = renderers.get(output_format)
    if render is None:
        raise UnsupportedFormat(output_format)

    resolution = (resolver or RequirementResolver()).resolve(selection)
    selection = resolution.selection
    log.info("inspect: targets=%s format=%s members=%d", list(targets), output_format, len(resolution.members))

    with materialized(provider, targets, resolution.members) as tasks:
        if selection.show_network:
            failed = show_network(tasks, stream)
            if failed:
                log.info("network information unavailable for %d of %d tasks", failed, len(tasks))
        render(tasks, selection, stream)
