# proc_tree/renderer.py

import sys


class ConsoleRenderer:
    """
    Handles all rendering of the process tree to the console.
    """

    def __init__(self, tree, out=None):
        self.tree = tree
        self.out = out if out is not None else sys.stdout

    def _home_and_clear(self):
        # ANSI: cursor to top-left, then erase to end of screen
        print("\033[H\033[J", end="", file=self.out)

    def _format_node(self, node):
        line = f"[{node.pid}]  {node.executable}"
        if node.is_reparented():
            line += " *"
        if node.is_tombstone:
            line += " [EXITED]"
        return line

    def _print_subtree(self, node, prefix, is_last):
        """Recursively prints a subtree starting from the given node."""
        connector = "└── " if is_last else "├── "
        print(f"{prefix}{connector}{self._format_node(node)}", file=self.out)

        child_prefix = prefix + ("    " if is_last else "│   ")
        children = node.children()
        for i, child in enumerate(children):
            self._print_subtree(child, child_prefix, i == len(children) - 1)

    def render(self, clear=False):
        """
        Renders every included root and its subtree, children in pid order.
        """
        if clear:
            self._home_and_clear()
        print(".", file=self.out)

        roots = self.tree.roots()
        for i, node in enumerate(roots):
            self._print_subtree(node, "", i == len(roots) - 1)

        print(f"\nShowing {len(self.tree.processes())} processes.", file=self.out)
