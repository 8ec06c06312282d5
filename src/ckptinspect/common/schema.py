from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

# archive member names
SPEC_DUMP_FILE = "spec.dump"
CONFIG_DUMP_FILE = "config.dump"
NETWORK_STATUS_FILE = "network.status"
STATS_DUMP_FILE = "stats-dump"
CHECKPOINT_DIRECTORY = "checkpoint"


class ViewSelection(BaseModel):
    """
    Which parts of a checkpoint the user asked to see.

    Built once from parsed CLI input and never mutated; the resolver derives
    new values with model_copy() instead.
    """
    model_config = ConfigDict(frozen=True)

    stats: bool = False
    mounts: bool = False
    ps_tree: bool = False
    ps_tree_cmd: bool = False
    ps_tree_env: bool = False
    files: bool = False
    sockets: bool = False
    show_all: bool = False
    show_metadata: bool = False
    show_network: bool = False
    pid_filter: int = Field(default=0, ge=0, le=2**32 - 1)

    def expand_all(self) -> "ViewSelection":
        """Return the selection with every view turned on if show_all is set."""
        if not self.show_all:
            return self
        flags = {
            name: True
            for name, field in type(self).model_fields.items()
            if field.annotation is bool
        }
        return self.model_copy(update=flags)

    @property
    def wants_process_images(self) -> bool:
        return self.ps_tree or self.ps_tree_cmd or self.ps_tree_env or self.files or self.sockets


class _NullAsEmpty(BaseModel):
    """JSON null decodes to the field default, at any level, like Podman's Go reader."""

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if data is None:
            return {}
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class NetworkSubnet(_NullAsEmpty):
    ipnet: str = ""
    gateway: str = ""


class NetworkInterface(_NullAsEmpty):
    subnets: list[NetworkSubnet] = Field(default_factory=list)
    mac_address: str = ""


class PodmanNetwork(_NullAsEmpty):
    interfaces: dict[str, NetworkInterface] = Field(default_factory=dict)


class PodmanNetworkStatus(_NullAsEmpty):
    """Contents of network.status as written by Podman at checkpoint time."""
    model_config = ConfigDict(frozen=True)

    podman: PodmanNetwork = Field(default_factory=PodmanNetwork)


class ContainerConfig(BaseModel):
    """Subset of config.dump used by the renderers."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = ""
    name: str = ""
    rootfs_image: str = Field(default="", alias="rootfsImage")
    rootfs_image_ref: str = Field(default="", alias="rootfsImageRef")
    rootfs_image_name: str = Field(default="", alias="rootfsImageName")
    runtime: str = ""
    created_time: str = Field(default="", alias="createdTime")
    checkpointed_time: str = Field(default="", alias="checkpointedTime")


class SpecMount(BaseModel):
    destination: str
    type: str = ""
    source: str = ""
    options: list[str] = Field(default_factory=list)


class ContainerSpec(BaseModel):
    """Subset of the OCI runtime spec stored in spec.dump."""

    annotations: dict[str, str] = Field(default_factory=dict)
    mounts: list[SpecMount] = Field(default_factory=list)

    @property
    def engine(self) -> str:
        return self.annotations.get("io.container.manager", "")


@dataclass(frozen=True)
class Task:
    target: str  # archive path as given by the user
    dir: Path  # working directory holding the extracted members
