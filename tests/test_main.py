# tests/test_main.py

import pytest

import main
from proc_tree import tree as tree_module
from proc_tree.errors import EnumerationError


@pytest.fixture
def fake_processes(monkeypatch, linux_like):
    monkeypatch.setattr(tree_module, "list_processes", linux_like)
    return linux_like


def test_build_config():
    args = main.parse_args(["-r", "20", "--root", "30", "-a", "-k"])
    cfg = main.build_config(args)

    assert cfg.root_pids == (20, 30)
    assert cfg.include_root_ancestors
    assert cfg.include_kernel_threads


def test_invalid_root_pid(capsys):
    assert main.main(["-r", "abc"]) == 1
    assert 'Invalid pid "abc"' in capsys.readouterr().err


def test_extra_arguments_are_rejected():
    with pytest.raises(SystemExit) as excinfo:
        main.main(["unexpected"])
    assert excinfo.value.code == 2


def test_prints_tree(fake_processes, capsys):
    assert main.main(["-r", "20"]) == 0
    out = capsys.readouterr().out
    assert "└── [20]  bash" in out
    assert "[30]  python" in out
    assert "[1]  init" not in out


def test_missing_root(fake_processes, capsys):
    assert main.main(["-r", "9999"]) == 1
    err = capsys.readouterr().err
    assert "Could not build process tree" in err
    assert "9999" in err


def test_enumeration_failure(fake_processes, capsys):
    fake_processes.error = EnumerationError("no /proc")
    assert main.main([]) == 1
    assert "no /proc" in capsys.readouterr().err


def test_watch_stops_on_interrupt(fake_processes, monkeypatch, capsys):
    def interrupt(seconds):
        raise KeyboardInterrupt

    monkeypatch.setattr(main.time, "sleep", interrupt)

    assert main.main(["--watch", "0.5"]) == 0
    out = capsys.readouterr().out
    assert "[50]  cron" in out
    assert "Exiting..." in out
    assert fake_processes.calls == 1


def test_watch_keeps_exited_processes(fake_processes, monkeypatch, capsys):
    sleeps = []

    def sleep(seconds):
        sleeps.append(seconds)
        if len(sleeps) == 1:
            fake_processes.table = [r for r in fake_processes.table if r.pid != 31]
        else:
            raise KeyboardInterrupt

    monkeypatch.setattr(main.time, "sleep", sleep)

    assert main.main(["--watch", "1", "--keep-exited"]) == 0
    assert "[31]  vim [EXITED]" in capsys.readouterr().out


def test_watch_drops_exited_processes(fake_processes, monkeypatch, capsys):
    sleeps = []

    def sleep(seconds):
        sleeps.append(seconds)
        if len(sleeps) == 1:
            fake_processes.table = [r for r in fake_processes.table if r.pid != 31]
        else:
            raise KeyboardInterrupt

    monkeypatch.setattr(main.time, "sleep", sleep)

    assert main.main(["--watch", "1"]) == 0
    out = capsys.readouterr().out
    assert "[EXITED]" not in out
    # Second render no longer lists vim
    assert out.count("[31]  vim") == 1
