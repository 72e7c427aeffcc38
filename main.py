# main.py
import argparse
import logging
import sys
import time

from proc_tree.config import (
    new_config,
    with_kernel_threads,
    with_root_ancestors,
    with_root_pid,
)
from proc_tree.errors import ProcTreeError
from proc_tree.renderer import ConsoleRenderer
from proc_tree.tree import ProcessTree

logger = logging.getLogger("proctree")


def parse_args(argv):
    parser = argparse.ArgumentParser(
        prog="proctree",
        description="Print process tree details.",
    )
    parser.add_argument(
        "-k",
        "--include-kernel-threads",
        action="store_true",
        help="Include kernel threads. Disabled by default.",
    )
    parser.add_argument(
        "-a",
        "--include-ancestors",
        action="store_true",
        help="Include ancestors of roots. No effect if roots not provided.",
    )
    parser.add_argument(
        "-r",
        "--root",
        action="append",
        default=[],
        metavar="PID",
        help="A pid to use as a root of the tree. May be repeated. "
        "By default, all orphaned processes are roots.",
    )
    parser.add_argument(
        "-w",
        "--watch",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Refresh the tree every SECONDS until interrupted.",
    )
    parser.add_argument(
        "-e",
        "--keep-exited",
        action="store_true",
        help="With --watch, keep exited processes in the tree instead of dropping them.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    return parser.parse_args(argv)


def build_config(args):
    cfg = new_config()
    for pid_str in args.root:
        try:
            pid = int(pid_str)
        except ValueError as e:
            raise ValueError(f'Invalid pid "{pid_str}" supplied to --root: {e}') from e
        cfg = cfg.refine(with_root_pid(pid))

    if args.include_ancestors:
        cfg = cfg.refine(with_root_ancestors())

    if args.include_kernel_threads:
        cfg = cfg.refine(with_kernel_threads())

    return cfg


def watch(tree, renderer, interval_sec, keep_exited=False):
    """
    Re-renders the tree every interval_sec until Ctrl+C.
    Exited processes are dropped on each refresh unless keep_exited is set,
    in which case they stay in the tree marked [EXITED].
    """
    while True:
        try:
            renderer.render(clear=True)
            time.sleep(interval_sec)
            tree.update(prune_tombstones=not keep_exited)

        except KeyboardInterrupt:
            print("\nExiting...")
            break


def main(argv=None):
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    try:
        cfg = build_config(args)
    except ValueError as e:
        print(f"proctree: {e}", file=sys.stderr)
        return 1

    try:
        tree = ProcessTree(cfg)
    except ProcTreeError as e:
        print(f"proctree: Could not build process tree: {e}", file=sys.stderr)
        return 1

    with tree:
        renderer = ConsoleRenderer(tree)
        if args.watch is None:
            renderer.render()
            return 0

        try:
            watch(tree, renderer, args.watch, keep_exited=args.keep_exited)
        except ProcTreeError as e:
            logger.error(f"Process tree refresh failed: {e}")
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
