# proc_tree/models.py

from typing import Callable, List, Optional

from .errors import StopWalk


class ProcessNode:
    """
    Represents a single process within a ProcessTree session. A node keeps
    its identity for the life of the session: repeated updates refresh the
    same object as long as its pid is rediscovered.

    All public methods take the tree's lock. The _locked_* helpers assume
    the caller already holds it and must never take it again.
    """

    def __init__(self, tree, record, is_included=True):
        self._tree = tree
        self._record = record
        self._is_tombstone = False

        # Absolute (unfiltered) structure, rebuilt on every update
        self._parent = None
        self._abs_children = []
        self._included_children = []
        self._is_included = is_included

        # Set once, the first time a parent is resolved, never overwritten
        self._orig_parent = None

    def __repr__(self):
        return f"ProcessNode(pid={self._record.pid}, executable={self._record.executable!r})"

    @property
    def pid(self) -> int:
        with self._tree._lock:
            return self._record.pid

    @property
    def ppid(self) -> int:
        """
        The parent pid reported by the most recent enumeration that saw this
        process. The parent node may not exist or may be excluded.
        """
        with self._tree._lock:
            return self._record.ppid

    @property
    def executable(self) -> str:
        """Executable name, without the directory path."""
        with self._tree._lock:
            return self._record.executable

    @property
    def is_tombstone(self) -> bool:
        """True if the process was not rediscovered by the most recent update."""
        with self._tree._lock:
            return self._is_tombstone

    @property
    def is_included(self) -> bool:
        with self._tree._lock:
            return self._is_included

    def _locked_parent(self):
        parent = self._parent
        if parent is None or parent is self or not parent._is_included:
            return None
        return parent

    def parent(self) -> Optional["ProcessNode"]:
        """
        Returns the parent process, or None if there is no parent, the parent
        is this process itself, or the parent is excluded by configuration.
        """
        with self._tree._lock:
            return self._locked_parent()

    def original_parent(self) -> Optional["ProcessNode"]:
        """
        Returns the parent this process had when it was first seen by the
        session, regardless of filtering. Differs from the current parent when
        the process has since been reattached (e.g. orphaned to pid 1). The
        node is returned even after it has been pruned from the session.
        """
        with self._tree._lock:
            return self._orig_parent

    def is_reparented(self) -> bool:
        with self._tree._lock:
            return self._orig_parent is not None and self._orig_parent is not self._parent

    def children(self) -> List["ProcessNode"]:
        """
        Returns a snapshot list of included children, sorted by pid. The list
        is a copy; changing it does not affect the tree. Tombstoned children
        remain until they are pruned.
        """
        with self._tree._lock:
            return list(self._included_children)

    def _locked_is_descendant_of(self, ancestor):
        if ancestor is None:
            return False
        node = self
        while True:
            parent = node._parent
            if parent is None or parent is node:
                return False
            if parent is ancestor:
                return True
            node = parent

    def is_descendant_of(self, ancestor: Optional["ProcessNode"]) -> bool:
        """
        True if ancestor is reachable by climbing absolute parents. Filtering
        is ignored.
        """
        with self._tree._lock:
            return self._locked_is_descendant_of(ancestor)

    def is_ancestor_of(self, descendant: Optional["ProcessNode"]) -> bool:
        with self._tree._lock:
            return descendant is not None and descendant._locked_is_descendant_of(self)

    def _locked_depth(self):
        depth = 0
        node = self
        while True:
            parent = node._parent
            if parent is None or parent is node or not parent._is_included:
                return depth
            node = parent
            depth += 1

    def depth(self) -> int:
        """
        Depth within the included tree: 0 for roots, 1 for their children...
        """
        with self._tree._lock:
            return self._locked_depth()

    def _locked_walk_full_subtree(self, handler):
        """
        (Helper method)
        Visits this node and every absolute descendant, ignoring inclusion.
        """
        handler(self)
        for child in self._abs_children:
            child._locked_walk_full_subtree(handler)

    def _walk_subtree(self, handler):
        """
        (Helper method)
        Walks the included subtree, taking the lock once per node
        so that the handler runs without it.
        """
        if self.is_included:
            handler(self)
            for child in self.children():
                child._walk_subtree(handler)

    def walk_subtree(self, handler: Callable[["ProcessNode"], None]) -> bool:
        """
        Walks the included subtree rooted at this process, depth first, with
        children in pid order. Nothing is visited if this process itself is
        excluded.

        The lock is taken per node, not for the whole walk, so a walk that
        overlaps an update may see a mix of old and new structure.

        Returns False if the handler raised StopWalk, True otherwise. Other
        exceptions raised by the handler propagate.
        """
        try:
            self._walk_subtree(handler)
        except StopWalk:
            return False
        return True

    def _locked_walk_full_ancestry(self, handler):
        node = self
        while node is not None:
            handler(node)
            parent = node._parent
            if parent is node:
                break
            node = parent

    def walk_ancestry(self, handler: Callable[["ProcessNode"], None]) -> bool:
        """
        Walks from this process up to its root through absolute parents,
        calling the handler only for included processes. Excluded ancestors
        are skipped but the climb continues past them.

        Same locking and return value as walk_subtree.
        """
        node = self
        try:
            while node is not None:
                with self._tree._lock:
                    is_included = node._is_included
                    parent = node._parent
                if is_included:
                    handler(node)
                if parent is node:
                    break
                node = parent
        except StopWalk:
            return False
        return True
