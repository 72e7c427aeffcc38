# proc_tree/tree.py

"""
A ProcessTree is a session that holds a snapshot of the system process tree.

The session keeps two views of the same nodes:
 - the absolute tree, exactly as reported by the operating system
 - the included tree, the subset selected by the session's Config
   (configured roots, their ancestors, kernel thread exclusion)

Snapshots are pull-based: nothing changes until update() is called.
"""

import logging
import threading
from typing import Callable, Iterable, List, Optional, Union

from .config import Config, ConfigOption, new_config, with_config
from .enumerator import list_processes
from .errors import RootNotFoundError, StopWalk
from .models import ProcessNode

logger = logging.getLogger(__name__)

KTHREAD_PID = 2


def _by_pid(node):
    return node._record.pid


class ProcessTree:
    """
    A thread-safe process tree session.

    One non-reentrant lock guards all session and node state. Public
    methods take it for their duration; _locked_* helpers expect it held.

    Usage:
        with ProcessTree(with_root_pid(1234)) as pt:
            pt.walk(lambda proc: print(proc.pid, proc.executable))
    """

    def __init__(
        self,
        *opts: Union[Config, ConfigOption],
        enumerator: Optional[Callable[[], Iterable]] = None,
    ):
        """
        Builds the session and populates it with an initial snapshot.

        opts are applied in order, as with new_config. A Config passed among
        them stands for with_config(config).

        Raises EnumerationError or RootNotFoundError; no session is
        produced in that case.
        """
        self._config = new_config(
            *(with_config(opt) if isinstance(opt, Config) else opt for opt in opts)
        )
        self._enumerate = enumerator or list_processes
        self._lock = threading.Lock()

        # The core data structure, including excluded nodes and unpruned tombstones
        # - Key: pid (int)
        # - Value: ProcessNode instance
        self._nodes = {}

        # Derived views, sorted by pid and fully replaced on every update
        self._abs_procs = []
        self._abs_root_procs = []
        self._included_procs = []
        self._included_root_procs = []

        # Nodes of the configured root pids, resolved once; None until then
        self._cfg_root_procs = None

        self.update(prune_tombstones=False)

    @property
    def config(self) -> Config:
        return self._config

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        """
        Ends the session. There are no external resources to release.
        """
        return None

    def sort_processes_by_pid(self, procs: List[ProcessNode]) -> None:
        """Sorts a list of processes in place, in ascending pid order."""
        with self._lock:
            procs.sort(key=_by_pid)

    def update(self, prune_tombstones: bool = False) -> None:
        """
        Refreshes the session with a new snapshot. Nodes from the previous
        snapshot keep their identity; those that were not rediscovered become
        tombstones, and are dropped if prune_tombstones is set.

        On EnumerationError or RootNotFoundError the previous snapshot is
        left untouched.
        """
        with self._lock:
            self._locked_update(prune_tombstones)

    def _locked_update(self, prune_tombstones):
        fixed_roots = self._config.has_fixed_roots

        records = [r for r in self._enumerate() if not self._is_skipped(r)]

        resolve_roots = fixed_roots and self._cfg_root_procs is None
        if resolve_roots:
            # Checked before anything is touched; retried on the next update
            self._check_configured_roots(records, prune_tombstones)

        # Everything is tombstoned unless found again; child lists are rederived
        for node in self._nodes.values():
            node._is_tombstone = True
            node._abs_children = []
            node._included_children = []

        self._reconcile(records, fixed_roots)

        pruned = 0
        if prune_tombstones:
            pruned = self._prune_tombstones()

        if resolve_roots:
            self._cfg_root_procs = [self._nodes[pid] for pid in self._config.root_pids]

        self._rebuild_absolute_structure()
        self._compute_inclusion(fixed_roots)
        self._rebuild_included_structure()

        logger.debug(
            f"Updated process tree: {len(self._nodes)} known, "
            f"{len(self._included_procs)} included, "
            f"{len(self._included_root_procs)} roots, {pruned} pruned"
        )

    def _is_skipped(self, record):
        return not self._config.include_kernel_threads and (
            record.pid == KTHREAD_PID or record.ppid == KTHREAD_PID
        )

    def _check_configured_roots(self, records, prune_tombstones):
        """
        (Helper method)
        Raises RootNotFoundError if a configured root pid will not be in the
        pid map once these records are reconciled.
        """
        present = {record.pid for record in records}
        if not prune_tombstones:
            present.update(self._nodes)
        for pid in self._config.root_pids:
            if pid not in present:
                logger.warning(f"Configured root pid {pid} does not exist")
                raise RootNotFoundError(pid)

    def _reconcile(self, records, fixed_roots):
        """
        (Helper method)
        Refreshes nodes that still exist and creates nodes for new pids.
        """
        for record in records:
            node = self._nodes.get(record.pid)
            if node is not None:
                # A recycled pid lands here too and silently reuses the node
                node._record = record
                node._is_tombstone = False
            else:
                self._nodes[record.pid] = ProcessNode(
                    self, record, is_included=not fixed_roots
                )

    def _prune_tombstones(self):
        """
        (Helper method)
        Forgets every node that was not rediscovered by this update.
        """
        dead = [pid for pid, node in self._nodes.items() if node._is_tombstone]
        for pid in dead:
            del self._nodes[pid]
        return len(dead)

    def _rebuild_absolute_structure(self):
        """
        (Helper method)
        Links every node to its parent, and collects the absolute roots.
        """
        abs_procs = list(self._nodes.values())
        abs_roots = []
        for node in abs_procs:
            ppid = node._record.ppid
            parent = self._nodes.get(ppid) if ppid != 0 else None
            node._parent = parent
            if parent is not None:
                if node._orig_parent is None:
                    node._orig_parent = parent
                # A self-parented node is not linked as its own child
                if parent is not node:
                    parent._abs_children.append(node)
            else:
                abs_roots.append(node)

        abs_procs.sort(key=_by_pid)
        abs_roots.sort(key=_by_pid)
        for node in abs_procs:
            node._abs_children.sort(key=_by_pid)

        self._abs_procs = abs_procs
        self._abs_root_procs = abs_roots

    def _compute_inclusion(self, fixed_roots):
        """
        (Helper method)
        Marks each node included or excluded according to the config.
        """

        def include(node):
            node._is_included = True

        def exclude(node):
            node._is_included = False

        if fixed_roots:
            for node in self._abs_procs:
                node._is_included = False
            self._locked_full_walk_from_roots(self._cfg_root_procs, include)
            if self._config.include_root_ancestors:
                for root in self._cfg_root_procs:
                    root._locked_walk_full_ancestry(include)
        else:
            for node in self._abs_procs:
                node._is_included = True

        # Applied last, so kernel threads stay out even under a configured root
        if not self._config.include_kernel_threads:
            kthread = self._nodes.get(KTHREAD_PID)
            if kthread is not None:
                kthread._locked_walk_full_subtree(exclude)

    def _rebuild_included_structure(self):
        """
        (Helper method)
        Builds the included view from the inclusion flags.
        """
        included = []
        included_roots = []
        for node in self._abs_procs:
            if not node._is_included:
                continue
            included.append(node)
            parent = node._parent
            if parent is not None and parent is not node:
                parent._included_children.append(node)
            if parent is None or parent is node or not parent._is_included:
                included_roots.append(node)

        included.sort(key=_by_pid)
        included_roots.sort(key=_by_pid)
        for node in self._abs_procs:
            node._included_children.sort(key=_by_pid)

        self._included_procs = included
        self._included_root_procs = included_roots

    def _locked_full_walk_from_roots(self, roots, handler):
        for node in roots:
            node._locked_walk_full_subtree(handler)

    def processes(self) -> List[ProcessNode]:
        """
        Returns a snapshot list of the included processes, sorted by pid.
        If root pids were configured, only processes in their subtrees (and
        their ancestors, if configured) are returned.
        """
        with self._lock:
            return list(self._included_procs)

    def roots(self) -> List[ProcessNode]:
        """
        Returns a snapshot list of the included processes that are toplevel
        roots of the included tree, sorted by pid.
        """
        with self._lock:
            return list(self._included_root_procs)

    def get(self, pid: int) -> Optional[ProcessNode]:
        """
        Looks up a process by pid, or returns None. Tombstoned processes are
        found until they are pruned.
        """
        with self._lock:
            return self._nodes.get(pid)

    def walk_from_roots(
        self, roots: Iterable[ProcessNode], handler: Callable[[ProcessNode], None]
    ) -> bool:
        """
        Walks the included subtree of each given root, in the order given;
        within a root, depth first with children in pid order.

        The caller must make sure no root is a descendant of another, or the
        handler is called more than once for the same process.

        Returns False if the handler raised StopWalk, True otherwise.
        """
        try:
            for node in roots:
                node._walk_subtree(handler)
        except StopWalk:
            return False
        return True

    def walk(self, handler: Callable[[ProcessNode], None]) -> bool:
        """
        Walks the whole included tree, starting at roots() in pid order.

        Not atomic: the lock is taken per node visited, so an update that runs
        concurrently may be partly visible to the walk.
        """
        return self.walk_from_roots(self.roots(), handler)
