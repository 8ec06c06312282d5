from __future__ import annotations

import io
import json
import tarfile
from pathlib import Path
from typing import Callable

import pytest

NETWORK_STATUS = {
    "podman": {
        "interfaces": {
            "eth0": {
                "subnets": [{"ipnet": "10.88.0.9/16", "gateway": "10.88.0.1"}],
                "mac_address": "f2:99:8d:fb:5a:57",
            }
        }
    }
}

CONFIG_DUMP = {
    "id": "8a3c5d4e2f1b",
    "name": "web",
    "rootfsImageName": "docker.io/library/nginx:latest",
    "rootfsImageRef": "sha256:abc123",
    "runtime": "runc",
    "createdTime": "2026-01-12T00:00:00Z",
    "checkpointedTime": "2026-01-12T01:00:00Z",
}

SPEC_DUMP = {
    "annotations": {"io.container.manager": "libpod"},
    "mounts": [
        {"destination": "/proc", "type": "proc", "source": "proc"},
        {"destination": "/etc/hosts", "type": "bind", "source": "/run/hosts", "options": ["rbind"]},
    ],
}


def default_members() -> dict[str, bytes]:
    return {
        "spec.dump": json.dumps(SPEC_DUMP).encode(),
        "config.dump": json.dumps(CONFIG_DUMP).encode(),
        "network.status": json.dumps(NETWORK_STATUS).encode(),
        "stats-dump": b"\x00\x01\x02\x03",
        "checkpoint/pstree.img": b"pstree",
        "checkpoint/core-1.img": b"core",
        "checkpoint/pages-1.img": b"pages",
        "checkpoint/files.img": b"files",
        "checkpoint/fdinfo-2.img": b"fdinfo",
    }


def write_tar(path: Path, members: dict[str, bytes], prefix: str = "") -> Path:
    with tarfile.open(path, "w") as tf:
        for name, data in members.items():
            ti = tarfile.TarInfo(prefix + name)
            ti.size = len(data)
            tf.addfile(ti, io.BytesIO(data))
    return path


@pytest.fixture
def make_archive(tmp_path: Path) -> Callable[..., Path]:
    def _make(name: str = "checkpoint.tar", members: dict[str, bytes] | None = None, prefix: str = "") -> Path:
        return write_tar(tmp_path / name, default_members() if members is None else members, prefix)

    return _make
