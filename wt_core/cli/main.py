"""Command-line interface for wt-core"""

import argparse
import sys
from importlib.resources import files
from typing import Callable, Dict, List, Optional

from wt_core.cli.args import parse_args
from wt_core.config import Config
from wt_core.core import WorktreeKeeper
from wt_core.exceptions import AppError, ExitCode, UsageError
from wt_core.models.branch import BranchName
from wt_core.output import navigation_format, removal_format, status_format
from wt_core.services.display_service import DisplayService
from wt_core.ui import pick
from wt_core.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

Handler = Callable[[WorktreeKeeper, argparse.Namespace, DisplayService], int]


def _branch_arg(value: Optional[str]) -> Optional[BranchName]:
    return BranchName.parse(value) if value is not None else None


def cmd_list(keeper: WorktreeKeeper, args: argparse.Namespace, display: DisplayService) -> int:
    display.show_list(keeper.list(), status_format(args.json))
    return ExitCode.SUCCESS


def cmd_add(keeper: WorktreeKeeper, args: argparse.Namespace, display: DisplayService) -> int:
    result = keeper.add(BranchName.parse(args.branch), base=args.base)
    display.show_add(result, navigation_format(args.json, args.print_cd_path))
    return ExitCode.SUCCESS


def cmd_go(keeper: WorktreeKeeper, args: argparse.Namespace, display: DisplayService) -> int:
    if args.branch is None and args.json:
        raise UsageError("a branch name is required with --json")
    result = keeper.go(_branch_arg(args.branch), force_pick=args.interactive)
    display.show_go(result, navigation_format(args.json, args.print_cd_path))
    return ExitCode.SUCCESS


def cmd_remove(keeper: WorktreeKeeper, args: argparse.Namespace, display: DisplayService) -> int:
    result = keeper.remove(_branch_arg(args.branch), force=args.force)
    display.show_remove(result, removal_format(args.json, args.print_paths))
    return ExitCode.SUCCESS


def cmd_merge(keeper: WorktreeKeeper, args: argparse.Namespace, display: DisplayService) -> int:
    result = keeper.merge(_branch_arg(args.branch), push=args.push, cleanup=not args.no_cleanup)
    display.show_merge(result, removal_format(args.json, args.print_paths))
    return ExitCode.SUCCESS


def cmd_prune(keeper: WorktreeKeeper, args: argparse.Namespace, display: DisplayService) -> int:
    report = keeper.prune(execute=args.execute, force=args.force, mainline=args.mainline)
    display.show_prune(report, status_format(args.json))
    if report.failures:
        return report.failures[0].exit_code
    return ExitCode.SUCCESS


def cmd_doctor(keeper: WorktreeKeeper, args: argparse.Namespace, display: DisplayService) -> int:
    display.show_doctor(keeper.doctor(), status_format(args.json))
    return ExitCode.SUCCESS


COMMANDS: Dict[str, Handler] = {
    "list": cmd_list,
    "add": cmd_add,
    "go": cmd_go,
    "remove": cmd_remove,
    "merge": cmd_merge,
    "prune": cmd_prune,
    "doctor": cmd_doctor,
}


def read_binding(shell: str) -> str:
    """Return the shell binding script shipped with the package."""
    return files("wt_core.bindings").joinpath(f"wt.{shell}").read_text(encoding="utf-8")


def is_interactive(json_output: bool) -> bool:
    """Picker allowed: a human at both ends of the terminal, not a JSON consumer."""
    return not json_output and sys.stdin.isatty() and sys.stderr.isatty()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    args = parse_args(argv)
    setup_logging(verbose=args.verbose, debug=args.debug)
    display = DisplayService(verbose=args.verbose)
    json_output = getattr(args, "json", False)

    try:
        if args.command == "init":
            sys.stdout.write(read_binding(args.shell))
            return ExitCode.SUCCESS

        config = Config(
            repo_path=args.repo,
            interactive=is_interactive(json_output),
            verbose=args.verbose,
            debug=args.debug,
        )
        if args.debug:
            logger.debug("Configuration:")
            for key, value in config.to_dict().items():
                logger.debug(f"  {key}: {value}")

        keeper = WorktreeKeeper.from_path(config.repo_path, config, picker=pick)
        return int(COMMANDS[args.command](keeper, args, display))
    except AppError as e:
        logger.debug(f"{type(e).__name__}: {e}")
        display.show_error(e, json_output)
        return int(e.exit_code)
    except KeyboardInterrupt:
        display.err_console.print("\nOperation cancelled by user", style="yellow")
        return int(ExitCode.USAGE)
    except Exception as e:
        logger.debug("Unexpected error", exc_info=True)
        if json_output:
            display.show_error(AppError(f"unexpected error: {e}"), json_output=True)
        else:
            display.err_console.print(f"error: unexpected error: {e}", style="red", markup=False)
            if args.debug:
                display.err_console.print_exception()
        return int(ExitCode.GIT)


if __name__ == "__main__":
    sys.exit(main())
