from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from ckptinspect.common.errors import RenderError
from ckptinspect.common.schema import Task, ViewSelection
from ckptinspect.render.views import render_json, render_tree

from conftest import CONFIG_DUMP, SPEC_DUMP


def make_task(tmp_path: Path, name: str = "ckpt.tar") -> Task:
    d = tmp_path / name.replace(".", "_")
    (d / "checkpoint").mkdir(parents=True)
    (d / "config.dump").write_text(json.dumps(CONFIG_DUMP), encoding="utf-8")
    (d / "spec.dump").write_text(json.dumps(SPEC_DUMP), encoding="utf-8")
    (d / "checkpoint" / "pstree.img").write_bytes(b"x")
    (d / "checkpoint" / "core-1.img").write_bytes(b"x")
    return Task(target=name, dir=d)


def test_tree_basic(tmp_path: Path) -> None:
    out = io.StringIO()
    render_tree([make_task(tmp_path)], ViewSelection(), out)
    text = out.getvalue()

    assert "ckpt.tar\n├── Container: web\n" in text
    assert "├── Image: docker.io/library/nginx:latest\n" in text
    assert "├── Engine: libpod\n" in text
    assert "└── Created: 2026-01-12T00:00:00Z\n" in text
    assert "Overview of mounts" not in text
    assert "Process images" not in text


def test_tree_with_mounts_and_images(tmp_path: Path) -> None:
    out = io.StringIO()
    render_tree([make_task(tmp_path)], ViewSelection(mounts=True, ps_tree=True), out)
    text = out.getvalue()

    assert "├── Overview of mounts\n│   ├── Destination: /proc\n│   │   ├── Type: proc\n" in text
    assert "│   └── Destination: /etc/hosts\n│       ├── Type: bind\n│       └── Source: /run/hosts\n" in text
    assert "└── Process images\n    ├── core-1.img\n    └── pstree.img\n" in text


def test_json_view(tmp_path: Path) -> None:
    out = io.StringIO()
    render_json([make_task(tmp_path)], ViewSelection(show_metadata=True, stats=True), out)
    data = json.loads(out.getvalue())

    assert len(data) == 1
    assert data[0]["target"] == "ckpt.tar"
    assert data[0]["container"]["name"] == "web"
    assert data[0]["container"]["runtime"] == "runc"
    assert data[0]["metadata"]["checkpointed"] == "2026-01-12T01:00:00Z"
    assert data[0]["metadata"]["annotations"] == {"io.container.manager": "libpod"}
    assert data[0]["stats_dump_bytes"] is None
    assert "mounts" not in data[0]
    assert "images" not in data[0]


def test_bad_config_dump_is_render_error(tmp_path: Path) -> None:
    task = make_task(tmp_path)
    (task.dir / "config.dump").write_text("{broken", encoding="utf-8")
    with pytest.raises(RenderError, match="config.dump"):
        render_json([task], ViewSelection(), io.StringIO())


def test_undecodable_spec_dump_is_render_error(tmp_path: Path) -> None:
    task = make_task(tmp_path)
    (task.dir / "spec.dump").write_bytes(b'{"annotations": {"\xff": "x"}}')
    with pytest.raises(RenderError, match="spec.dump"):
        render_tree([task], ViewSelection(), io.StringIO())
