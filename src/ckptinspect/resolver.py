from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass
from typing import Callable

from ckptinspect.common.schema import (
    CHECKPOINT_DIRECTORY,
    CONFIG_DUMP_FILE,
    NETWORK_STATUS_FILE,
    SPEC_DUMP_FILE,
    STATS_DUMP_FILE,
    ViewSelection,
)

log = logging.getLogger("ckptinspect.resolver")

BASE_MEMBERS: tuple[str, ...] = (SPEC_DUMP_FILE, CONFIG_DUMP_FILE)


def checkpoint_member(name: str) -> str:
    return posixpath.join(CHECKPOINT_DIRECTORY, name)


@dataclass(frozen=True)
class ImplicationRule:
    """
    One row of the view implication table.

    When `when` holds for the current selection, every flag in `implies` is
    forced on and every entry in `members` (exact name or prefix) becomes
    required.
    """
    rule_id: str
    when: Callable[[ViewSelection], bool]
    implies: tuple[str, ...] = ()
    members: tuple[str, ...] = ()


DEFAULT_RULES: tuple[ImplicationRule, ...] = (
    ImplicationRule(
        rule_id="network",
        when=lambda s: s.show_network,
        members=(NETWORK_STATUS_FILE,),
    ),
    ImplicationRule(
        rule_id="stats",
        when=lambda s: s.stats,
        members=(STATS_DUMP_FILE,),
    ),
    ImplicationRule(
        rule_id="pid-filter",
        when=lambda s: s.pid_filter != 0,
        implies=("ps_tree",),
    ),
    # files and sockets are attached to the processes holding them
    ImplicationRule(
        rule_id="files",
        when=lambda s: s.files,
        implies=("ps_tree",),
        members=(
            checkpoint_member("files.img"),
            checkpoint_member("fs-"),
            checkpoint_member("ids-"),
            checkpoint_member("fdinfo-"),
        ),
    ),
    ImplicationRule(
        rule_id="sockets",
        when=lambda s: s.sockets,
        implies=("ps_tree",),
        members=(
            checkpoint_member("files.img"),
            checkpoint_member("ids-"),
            checkpoint_member("fdinfo-"),
        ),
    ),
    # cmdline and environment are read out of process memory
    ImplicationRule(
        rule_id="ps-tree-memory",
        when=lambda s: s.ps_tree_cmd or s.ps_tree_env,
        implies=("ps_tree",),
        members=(
            checkpoint_member("pagemap-"),
            checkpoint_member("pages-"),
            checkpoint_member("mm-"),
        ),
    ),
    ImplicationRule(
        rule_id="ps-tree",
        when=lambda s: s.ps_tree,
        members=(
            checkpoint_member("pstree.img"),
            checkpoint_member("core-"),
        ),
    ),
)


@dataclass(frozen=True)
class Resolution:
    selection: ViewSelection  # input selection with show_all and implications applied
    members: tuple[str, ...]


class RequirementResolver:
    def __init__(self, rules: tuple[ImplicationRule, ...] = DEFAULT_RULES) -> None:
        self.rules = rules

    def close(self, selection: ViewSelection) -> ViewSelection:
        """Apply show_all, then the implication rules until no flag changes."""
        current = selection.expand_all()
        # each pass turns on at least one flag or stops, so this is bounded by the flag count
        while True:
            updates = {
                flag: True
                for rule in self.rules
                if rule.when(current)
                for flag in rule.implies
                if not getattr(current, flag)
            }
            if not updates:
                return current
            current = current.model_copy(update=updates)

    def resolve(self, selection: ViewSelection) -> Resolution:
        closed = self.close(selection)

        # members are collected in rule order over the closed selection, so the
        # result does not depend on whether a flag was given or implied
        members: list[str] = list(BASE_MEMBERS)
        for rule in self.rules:
            if not rule.when(closed):
                continue
            for m in rule.members:
                if m not in members:
                    members.append(m)

        log.debug("resolved %d required members: %s", len(members), members)
        return Resolution(selection=closed, members=tuple(members))


def resolve(selection: ViewSelection) -> Resolution:
    return RequirementResolver().resolve(selection)
