from __future__ import annotations

import logging
from pathlib import Path

import typer

from ckptinspect.common.config import load_config
from ckptinspect.common.errors import InspectError
from ckptinspect.common.log import setup_logging
from ckptinspect.common.schema import ViewSelection
from ckptinspect.orchestrator import run_inspect
from ckptinspect.resolver import resolve as resolve_members
from ckptinspect.tasks.archive import ArchiveTaskProvider

app = typer.Typer(help="ckptinspect: display low-level information about container checkpoints")

# shared by `inspect` and `resolve`
CONFIG_OPT = typer.Option(Path("configs/inspect.example.yaml"), "--config", "-c")
STATS_OPT = typer.Option(False, "--stats", help="Display checkpoint statistics")
MOUNTS_OPT = typer.Option(False, "--mounts", help="Display an overview of mounts used in the container checkpoint")
PID_OPT = typer.Option(0, "--pid", "-p", min=0, max=2**32 - 1, help="Display the process tree of a specific PID")
PS_TREE_OPT = typer.Option(False, "--ps-tree", help="Display an overview of processes in the container checkpoint")
PS_TREE_CMD_OPT = typer.Option(
    False, "--ps-tree-cmd", help="Display processes with their full command line arguments"
)
PS_TREE_ENV_OPT = typer.Option(False, "--ps-tree-env", help="Display processes with their environment variables")
FILES_OPT = typer.Option(False, "--files", help="Display the open file descriptors of processes")
SOCKETS_OPT = typer.Option(False, "--sockets", help="Display the open sockets of processes")
ALL_OPT = typer.Option(False, "--all", help="Show all information about container checkpoints")
METADATA_OPT = typer.Option(False, "--metadata", help="Show metadata about the container")
NETWORK_OPT = typer.Option(False, "--network", help="Display network information from the checkpoint")


@app.command()
def inspect(
    targets: list[str] = typer.Argument(..., help="Checkpoint archives to inspect."),
    config: Path = CONFIG_OPT,
    stats: bool = STATS_OPT,
    mounts: bool = MOUNTS_OPT,
    pid: int = PID_OPT,
    ps_tree: bool = PS_TREE_OPT,
    ps_tree_cmd: bool = PS_TREE_CMD_OPT,
    ps_tree_env: bool = PS_TREE_ENV_OPT,
    files: bool = FILES_OPT,
    sockets: bool = SOCKETS_OPT,
    show_all: bool = ALL_OPT,
    metadata: bool = METADATA_OPT,
    network: bool = NETWORK_OPT,
    fmt: str | None = typer.Option(None, "--format", help="Output format: tree or json (default from config)."),
) -> None:
    cfg = load_config(config)
    setup_logging(cfg.logging, name="ckptinspect")
    log = logging.getLogger("ckptinspect.cli")

    selection = ViewSelection(
        stats=stats,
        mounts=mounts,
        ps_tree=ps_tree,
        ps_tree_cmd=ps_tree_cmd,
        ps_tree_env=ps_tree_env,
        files=files,
        sockets=sockets,
        show_all=show_all,
        show_metadata=metadata,
        show_network=network,
        pid_filter=pid,
    )

    try:
        run_inspect(
            targets,
            selection,
            fmt or cfg.inspect.default_format,
            provider=ArchiveTaskProvider(cfg.inspect.work_dir),
        )
    except InspectError as e:
        log.debug("inspect failed: %s", e.to_dict())
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(code=1)


@app.command()
def resolve(
    stats: bool = STATS_OPT,
    mounts: bool = MOUNTS_OPT,
    pid: int = PID_OPT,
    ps_tree: bool = PS_TREE_OPT,
    ps_tree_cmd: bool = PS_TREE_CMD_OPT,
    ps_tree_env: bool = PS_TREE_ENV_OPT,
    files: bool = FILES_OPT,
    sockets: bool = SOCKETS_OPT,
    show_all: bool = ALL_OPT,
    metadata: bool = METADATA_OPT,
    network: bool = NETWORK_OPT,
) -> None:
    """Print the archive members the given views would extract."""
    resolution = resolve_members(
        ViewSelection(
            stats=stats,
            mounts=mounts,
            ps_tree=ps_tree,
            ps_tree_cmd=ps_tree_cmd,
            ps_tree_env=ps_tree_env,
            files=files,
            sockets=sockets,
            show_all=show_all,
            show_metadata=metadata,
            show_network=network,
            pid_filter=pid,
        )
    )
    for m in resolution.members:
        print(m)


if __name__ == "__main__":
    app()
