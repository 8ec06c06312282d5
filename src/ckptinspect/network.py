from __future__ import annotations

import logging
from pathlib import Path

from pydantic import ValidationError

from ckptinspect.common.errors import DecodeError
from ckptinspect.common.schema import NETWORK_STATUS_FILE, PodmanNetworkStatus

log = logging.getLogger("ckptinspect.network")

NO_INTERFACES = "No network interfaces found"


def read_network_status(checkpoint_dir: Path | str) -> tuple[PodmanNetworkStatus, Path]:
    """
    Load network.status from an extracted checkpoint directory.

    Returns the decoded record and the path it was read from. Raises
    DecodeError (with .path set) if the file is missing or malformed.
    """
    path = Path(checkpoint_dir) / NETWORK_STATUS_FILE
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise DecodeError(f"failed to read network status: {e}", path=path) from e

    try:
        status = PodmanNetworkStatus.model_validate_json(raw)
    except ValidationError as e:
        raise DecodeError(f"failed to read network status: {e}", path=path) from e

    log.debug("network status: %s interfaces=%d", path, len(status.podman.interfaces))
    return status, path


def format_network_info(status: PodmanNetworkStatus | None) -> str:
    if status is None or not status.podman.interfaces:
        return NO_INTERFACES

    lines: list[str] = []
    for name in sorted(status.podman.interfaces):
        iface = status.podman.interfaces[name]
        lines.append(f"Interface: {name}\n")
        lines.append(f"  MAC Address: {iface.mac_address}\n")
        for subnet in iface.subnets:
            lines.append(f"  IP/Subnet: {subnet.ipnet}\n")
            lines.append(f"  Gateway: {subnet.gateway}\n")
        lines.append("\n")
    return "".join(lines)
