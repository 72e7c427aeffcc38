# proc_tree/config.py

"""
Filtering options for a process tree session.

A Config is an immutable value. It is built by applying option functions,
in order, to the defaults:

    cfg = new_config(with_root_pid(1234), with_root_ancestors())
    cfg = cfg.refine(with_kernel_threads())

Each option is a pure function from one Config to the next. Scalar options
replace the previous value; with_root_pid appends to the root list.
"""

from dataclasses import dataclass, replace
from typing import Callable, Tuple

DEFAULT_INCLUDE_KERNEL_THREADS = False
DEFAULT_INCLUDE_ROOT_ANCESTORS = False


@dataclass(frozen=True)
class Config:
    """
    include_kernel_threads: keep kernel threads (pid 2 and its children).
    include_root_ancestors: also include every ancestor of the root pids.
        Has no effect unless root_pids is set.
    root_pids: pids to use as roots of the tree. Empty means all orphaned
        processes are roots.
    """

    include_kernel_threads: bool = DEFAULT_INCLUDE_KERNEL_THREADS
    include_root_ancestors: bool = DEFAULT_INCLUDE_ROOT_ANCESTORS
    root_pids: Tuple[int, ...] = ()

    @property
    def has_fixed_roots(self) -> bool:
        return len(self.root_pids) > 0

    def refine(self, *opts: "ConfigOption") -> "Config":
        """
        Returns a new Config seeded with this one's values, then applies opts.
        """
        return new_config(with_config(self), *opts)


ConfigOption = Callable[[Config], Config]


def new_config(*opts: ConfigOption) -> Config:
    """
    Builds a Config by applying options, in call order, to the defaults.
    """
    cfg = Config()
    for opt in opts:
        cfg = opt(cfg)
    return cfg


def with_config(other: Config) -> ConfigOption:
    """
    Replaces every value with those of another Config. Should appear first
    in an option list, since it overrides everything before it.
    """
    return lambda cfg: replace(other, root_pids=tuple(other.root_pids))


def with_kernel_threads() -> ConfigOption:
    return lambda cfg: replace(cfg, include_kernel_threads=True)


def without_kernel_threads() -> ConfigOption:
    """This is the default."""
    return lambda cfg: replace(cfg, include_kernel_threads=False)


def with_root_ancestors() -> ConfigOption:
    """
    Includes the ancestors of every root pid, so the configured roots are
    nested beneath their real OS ancestors instead of appearing at the top.
    """
    return lambda cfg: replace(cfg, include_root_ancestors=True)


def without_root_ancestors() -> ConfigOption:
    """This is the default."""
    return lambda cfg: replace(cfg, include_root_ancestors=False)


def with_root_pid(pid: int) -> ConfigOption:
    return lambda cfg: replace(cfg, root_pids=cfg.root_pids + (int(pid),))


def without_root_pids() -> ConfigOption:
    """
    Drops all pids added with with_root_pid, restoring the default of using
    every orphaned process as a root.
    """
    return lambda cfg: replace(cfg, root_pids=())
