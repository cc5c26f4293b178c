"""Command-line argument parsing for wt-core."""

import argparse
import sys
from typing import List, Optional

from wt_core.__version__ import __version__
from wt_core.exceptions import ExitCode

SHELLS = ("bash", "zsh")


class ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser whose argument errors exit with the usage code (1)."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(int(ExitCode.USAGE), f"{self.prog}: error: {message}\n")


def _common_parser() -> argparse.ArgumentParser:
    common = ArgumentParser(add_help=False)
    common.add_argument(
        "--repo",
        metavar="PATH",
        help="Operate on the repository containing PATH (default: current directory)",
    )
    return common


def _add_navigation_output(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--json", action="store_true", help="Print a JSON object")
    group.add_argument(
        "--print-cd-path",
        action="store_true",
        help="Print only the worktree path (for shell wrappers)",
    )


def _add_removal_output(parser: argparse.ArgumentParser, fields: str) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--json", action="store_true", help="Print a JSON object")
    group.add_argument(
        "--print-paths",
        action="store_true",
        help=f"Print {fields}, one per line (for shell wrappers)",
    )


def _add_status_output(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--json", action="store_true", help="Print a JSON object")


def build_parser() -> ArgumentParser:
    """Build the ``wt-core`` argument parser."""
    parser = ArgumentParser(
        prog="wt-core",
        description="Create, navigate, merge and clean up git worktrees under .worktrees/",
        epilog="Shell integration: eval \"$(wt-core init bash)\" (or zsh) to get the `wt` function",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information for troubleshooting"
    )
    parser.add_argument("--version", action="version", version=f"wt-core {__version__}")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True
    common = _common_parser()

    list_parser = subparsers.add_parser("list", parents=[common], help="List worktrees")
    _add_status_output(list_parser)

    add_parser = subparsers.add_parser(
        "add", parents=[common], help="Create a branch and a worktree for it"
    )
    add_parser.add_argument("branch", help="Name of the new branch")
    add_parser.add_argument(
        "--base", metavar="REV", help="Start the branch at REV (default: HEAD, or <remote>/<branch> if it exists)"
    )
    _add_navigation_output(add_parser)

    go_parser = subparsers.add_parser("go", parents=[common], help="Locate a worktree")
    go_parser.add_argument("branch", nargs="?", help="Branch whose worktree to go to")
    go_parser.add_argument(
        "-i", "--interactive", action="store_true", help="Always show the picker"
    )
    _add_navigation_output(go_parser)

    remove_parser = subparsers.add_parser(
        "remove", parents=[common], help="Remove a worktree and delete its branch"
    )
    remove_parser.add_argument("branch", nargs="?", help="Branch to remove (default: current worktree)")
    remove_parser.add_argument(
        "--force", action="store_true", help="Remove even with uncommitted changes; delete branch with -D"
    )
    _add_removal_output(remove_parser, "removed_path, repo_root, branch and branch_deleted")

    merge_parser = subparsers.add_parser(
        "merge", parents=[common], help="Merge a worktree's branch into mainline"
    )
    merge_parser.add_argument("branch", nargs="?", help="Branch to merge (default: current worktree)")
    merge_parser.add_argument("--push", action="store_true", help="Push mainline after merging")
    merge_parser.add_argument(
        "--no-cleanup", action="store_true", help="Keep the worktree and branch after merging"
    )
    _add_removal_output(
        merge_parser, "repo_root, branch, mainline, cleaned_up, pushed and removed_path"
    )

    prune_parser = subparsers.add_parser(
        "prune", parents=[common], help="Remove worktrees whose branches are already in mainline"
    )
    prune_parser.add_argument(
        "--execute", action="store_true", help="Actually remove (default is a dry run)"
    )
    prune_parser.add_argument(
        "--force", action="store_true", help="Also remove dirty worktrees (requires --execute)"
    )
    prune_parser.add_argument("--mainline", metavar="BRANCH", help="Mainline branch to check against")
    _add_status_output(prune_parser)

    doctor_parser = subparsers.add_parser(
        "doctor", parents=[common], help="Check worktree registry and .worktrees/ health"
    )
    _add_status_output(doctor_parser)

    init_parser = subparsers.add_parser("init", help="Print the shell binding for the `wt` function")
    init_parser.add_argument("shell", choices=SHELLS, help="Shell to generate the binding for")

    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "prune" and args.force and not args.execute:
        parser.error("prune: --force requires --execute")
    if args.command == "go" and args.interactive:
        if args.branch is not None:
            parser.error("go: -i/--interactive cannot be combined with a branch name")
        if args.json:
            parser.error("go: -i/--interactive cannot be combined with --json")
    return args
