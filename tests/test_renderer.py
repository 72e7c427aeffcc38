# tests/test_renderer.py

import io

from proc_tree.config import with_root_pid
from proc_tree.renderer import ConsoleRenderer
from proc_tree.tree import ProcessTree


def render(tree, **kwargs):
    out = io.StringIO()
    ConsoleRenderer(tree, out=out).render(**kwargs)
    return out.getvalue()


def test_render_tree(linux_like):
    pt = ProcessTree(enumerator=linux_like)

    assert render(pt) == (
        ".\n"
        "├── [1]  init\n"
        "│   ├── [10]  sshd\n"
        "│   │   └── [20]  bash\n"
        "│   │       ├── [30]  python\n"
        "│   │       └── [31]  vim\n"
        "│   └── [50]  cron\n"
        "└── [4]  kworker-child\n"
        "\n"
        "Showing 7 processes.\n"
    )


def test_render_marks_reparented_and_exited(enumerator):
    pt = ProcessTree(enumerator=enumerator)
    enumerator.set((1, 0, "init"), (200, 1, "b"))
    pt.update()

    assert render(pt) == (
        ".\n"
        "└── [1]  init\n"
        "    ├── [100]  a [EXITED]\n"
        "    └── [200]  b *\n"
        "\n"
        "Showing 3 processes.\n"
    )


def test_render_configured_root(linux_like):
    pt = ProcessTree(with_root_pid(20), enumerator=linux_like)
    output = render(pt, clear=True)

    assert output.startswith("\033[H\033[J.\n└── [20]  bash\n")
    assert "[10]" not in output
