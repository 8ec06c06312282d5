from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Sequence, TextIO

from pydantic import BaseModel, ValidationError

from ckptinspect.common.errors import RenderError
from ckptinspect.common.schema import (
    CHECKPOINT_DIRECTORY,
    CONFIG_DUMP_FILE,
    SPEC_DUMP_FILE,
    STATS_DUMP_FILE,
    ContainerConfig,
    ContainerSpec,
    Task,
    ViewSelection,
)

log = logging.getLogger("ckptinspect.render")

Renderer = Callable[[Sequence[Task], ViewSelection, TextIO], None]


def _load(task: Task, filename: str, model: type[BaseModel]) -> Any:
    path = task.dir / filename
    try:
        return model.model_validate_json(path.read_bytes())
    except (OSError, ValidationError) as e:
        raise RenderError(f"cannot read {filename} of {task.target}: {e}", path=path) from e


def task_summary(task: Task, selection: ViewSelection) -> dict[str, Any]:
    """Collect what the selected views show for one task as plain data."""
    cfg: ContainerConfig = _load(task, CONFIG_DUMP_FILE, ContainerConfig)
    spec: ContainerSpec = _load(task, SPEC_DUMP_FILE, ContainerSpec)

    out: dict[str, Any] = {
        "target": task.target,
        "container": {
            "name": cfg.name,
            "id": cfg.id,
            "image": cfg.rootfs_image_name or cfg.rootfs_image,
            "engine": spec.engine,
            "runtime": cfg.runtime,
            "created": cfg.created_time,
        },
    }

    if selection.show_metadata:
        out["metadata"] = {
            "image_ref": cfg.rootfs_image_ref,
            "checkpointed": cfg.checkpointed_time,
            "annotations": dict(sorted(spec.annotations.items())),
        }

    if selection.mounts:
        out["mounts"] = [
            {"destination": m.destination, "type": m.type, "source": m.source}
            for m in spec.mounts
        ]

    if selection.stats:
        stats_path = task.dir / STATS_DUMP_FILE
        out["stats_dump_bytes"] = stats_path.stat().st_size if stats_path.is_file() else None

    if selection.wants_process_images:
        img_dir = task.dir / CHECKPOINT_DIRECTORY
        out["images"] = sorted(p.name for p in img_dir.iterdir() if p.is_file()) if img_dir.is_dir() else []

    return out


@dataclass
class _Node:
    label: str
    children: list["_Node"] = field(default_factory=list)


def _summary_tree(summary: dict[str, Any]) -> _Node:
    c = summary["container"]
    root = _Node(summary["target"])
    root.children.append(_Node(f"Container: {c['name']}"))
    root.children.append(_Node(f"Image: {c['image']}"))
    root.children.append(_Node(f"ID: {c['id']}"))
    if c["engine"]:
        root.children.append(_Node(f"Engine: {c['engine']}"))
    root.children.append(_Node(f"Runtime: {c['runtime']}"))
    root.children.append(_Node(f"Created: {c['created']}"))

    if "metadata" in summary:
        md = summary["metadata"]
        node = _Node("Metadata")
        node.children.append(_Node(f"Image ref: {md['image_ref']}"))
        node.children.append(_Node(f"Checkpointed: {md['checkpointed']}"))
        for k, v in md["annotations"].items():
            node.children.append(_Node(f"{k}: {v}"))
        root.children.append(node)

    if "mounts" in summary:
        node = _Node("Overview of mounts")
        for m in summary["mounts"]:
            node.children.append(
                _Node(f"Destination: {m['destination']}", [_Node(f"Type: {m['type']}"), _Node(f"Source: {m['source']}")])
            )
        root.children.append(node)

    if "stats_dump_bytes" in summary:
        size = summary["stats_dump_bytes"]
        root.children.append(_Node(f"Stats dump: {size} bytes" if size is not None else "Stats dump: not present"))

    if "images" in summary:
        root.children.append(_Node("Process images", [_Node(n) for n in summary["images"]]))

    return root


def _write_tree(node: _Node, stream: TextIO, prefix: str = "") -> None:
    for i, child in enumerate(node.children):
        last = i == len(node.children) - 1
        stream.write(f"{prefix}{'└── ' if last else '├── '}{child.label}\n")
        _write_tree(child, stream, prefix + ("    " if last else "│   "))


def render_tree(tasks: Sequence[Task], selection: ViewSelection, stream: TextIO) -> None:
    for task in tasks:
        root = _summary_tree(task_summary(task, selection))
        stream.write(f"\nDisplaying container checkpoint tree view from {root.label}\n\n")
        stream.write(f"{root.label}\n")
        _write_tree(root, stream)


def render_json(tasks: Sequence[Task], selection: ViewSelection, stream: TextIO) -> None:
    data = [task_summary(task, selection) for task in tasks]
    stream.write(json.dumps(data, indent=2, sort_keys=True) + "\n")


RENDERERS: dict[str, Renderer] = {
    "tree": render_tree,
    "json": render_json,
}
