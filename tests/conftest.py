# tests/conftest.py

import pytest

from proc_tree.enumerator import ProcessRecord


class FakeEnumerator:
    """
    A scriptable process table. Tests replace `table` between updates, or
    set `error` to make the next scan fail.
    """

    def __init__(self, table=()):
        self.table = list(table)
        self.error = None
        self.calls = 0

    def set(self, *entries):
        self.table = [ProcessRecord(pid, ppid, name) for pid, ppid, name in entries]

    def __call__(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.table)


@pytest.fixture
def enumerator():
    enum = FakeEnumerator()
    enum.set(
        (1, 0, "init"),
        (100, 1, "a"),
        (200, 100, "b"),
    )
    return enum


@pytest.fixture
def linux_like():
    """
    init with a kernel thread subtree, a login shell chain and a daemon:

        1 init
        ├── 2 kthreadd
        │   └── 3 kworker
        │       └── 4 kworker-child
        ├── 10 sshd
        │   └── 20 bash
        │       ├── 30 python
        │       └── 31 vim
        └── 50 cron
    """
    enum = FakeEnumerator()
    enum.set(
        (50, 1, "cron"),
        (31, 20, "vim"),
        (1, 0, "init"),
        (4, 3, "kworker-child"),
        (2, 1, "kthreadd"),
        (3, 2, "kworker"),
        (10, 1, "sshd"),
        (20, 10, "bash"),
        (30, 20, "python"),
    )
    return enum

