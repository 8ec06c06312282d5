from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Sequence

from ckptinspect.common.schema import Task


class TaskProvider(ABC):
    @abstractmethod
    def create_tasks(self, targets: Sequence[str], required: Iterable[str]) -> list[Task]: ...

    @abstractmethod
    def cleanup_tasks(self, tasks: Iterable[Task]) -> None: ...
