"""Display service: renders engine results in the requested output format.

Stdout carries only command output (human text, JSON or bare paths);
errors and warnings go to stderr, except in JSON mode where errors are
reported as a JSON object on stdout.
"""
import json
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from wt_core.constants import CLI_COLORS, DIAGNOSTIC_COLORS, LEGEND_TEXT, LIST_COLUMNS, PRUNE_COLUMNS
from wt_core.exceptions import AppError
from wt_core.formatters import (
    format_branch_label,
    format_diagnostic,
    format_dirty,
    format_integration,
    format_skip_reason,
    format_worktree_name,
    get_prune_style_type,
    get_worktree_style_type,
    pluralize,
)
from wt_core.models.results import (
    AddResult,
    DoctorReport,
    GoResult,
    ListResult,
    MergeResult,
    PruneReport,
    RemoveResult,
)
from wt_core.output import NavigationFormat, RemovalFormat, StatusFormat
from wt_core.utils.logging import get_logger

logger = get_logger(__name__)


def _path(value: Optional[Path]) -> Optional[str]:
    return str(value) if value is not None else None


def _branch(value) -> Optional[str]:
    return value.value if value is not None else None


def _flag(value: bool) -> str:
    return "true" if value else "false"


class DisplayService:
    def __init__(self, console: Optional[Console] = None, err_console: Optional[Console] = None,
                 verbose: bool = False):
        self.console = console or Console(highlight=False)
        self.err_console = err_console or Console(stderr=True, highlight=False)
        self.verbose = verbose

    # -- low-level writers -------------------------------------------------

    def _say(self, text: str, style: Optional[str] = None) -> None:
        self.console.print(escape(text), style=style, soft_wrap=True)

    def _print_json(self, payload: Dict[str, Any]) -> None:
        print(json.dumps(payload, indent=2))

    def _print_lines(self, *values: str) -> None:
        for value in values:
            print(value)

    def show_warnings(self, warnings: Iterable[str]) -> None:
        for warning in warnings:
            self.err_console.print(f"warning: {escape(warning)}", style="yellow", soft_wrap=True)

    def show_error(self, error: AppError, json_output: bool = False) -> None:
        """Report a failed command: JSON on stdout, or ``error: ...`` on stderr."""
        if json_output:
            self._print_json({"ok": False, "message": error.message, "error": error.kind})
        else:
            self.err_console.print(f"error: {escape(error.message)}", style="red", soft_wrap=True)

    # -- add / go ----------------------------------------------------------

    def show_add(self, result: AddResult, fmt: NavigationFormat) -> None:
        message = f"Created worktree for branch '{result.branch}' at {result.worktree_path}"
        if result.tracking:
            message += f" (tracking {result.base})"
        self._show_navigation(message, result, fmt, tracking=result.tracking)

    def show_go(self, result: GoResult, fmt: NavigationFormat) -> None:
        message = f"Worktree for branch '{result.branch}': {result.worktree_path}"
        self._show_navigation(message, result, fmt)

    def _show_navigation(self, message: str, result: Union[AddResult, GoResult],
                         fmt: NavigationFormat, tracking: Optional[bool] = None) -> None:
        if fmt == NavigationFormat.CD_PATH:
            self._print_lines(str(result.worktree_path))
        elif fmt == NavigationFormat.JSON:
            payload = {
                "ok": True,
                "message": message,
                "repo_root": _path(result.repo_root),
                "worktree_path": _path(result.worktree_path),
                "cd_path": _path(result.worktree_path),
                "branch": _branch(result.branch),
            }
            if tracking is not None:
                payload["tracking"] = tracking
            self._print_json(payload)
        else:
            self._say(message, style="green")

    # -- remove / merge ----------------------------------------------------

    def show_remove(self, result: RemoveResult, fmt: RemovalFormat) -> None:
        if result.branch_deleted:
            message = f"Removed worktree and branch '{result.branch}' ({result.removed_path})"
        else:
            message = f"Removed worktree for '{result.branch}' ({result.removed_path}); branch kept"

        if fmt == RemovalFormat.JSON:
            self._print_json({
                "ok": True,
                "message": message,
                "repo_root": _path(result.repo_root),
                "removed_path": _path(result.removed_path),
                "branch": _branch(result.branch),
                "branch_deleted": result.branch_deleted,
                "warnings": list(result.warnings),
            })
            return

        if fmt == RemovalFormat.PRINT_PATHS:
            self._print_lines(
                str(result.removed_path),
                str(result.repo_root),
                result.branch.value,
                _flag(result.branch_deleted),
            )
        else:
            self._say(message, style="green")
        self.show_warnings(result.warnings)

    def show_merge(self, result: MergeResult, fmt: RemovalFormat) -> None:
        message = f"Merged '{result.branch}' into {result.mainline}"
        if result.cleaned_up:
            message += "; removed worktree and branch"
        if result.pushed:
            message += "; pushed"

        if fmt == RemovalFormat.JSON:
            self._print_json({
                "ok": True,
                "message": message,
                "repo_root": _path(result.repo_root),
                "branch": _branch(result.branch),
                "mainline": result.mainline,
                "cleaned_up": result.cleaned_up,
                "removed_path": _path(result.removed_path),
                "pushed": result.pushed,
                "warnings": list(result.warnings),
            })
            return

        if fmt == RemovalFormat.PRINT_PATHS:
            self._print_lines(
                str(result.repo_root),
                result.branch.value,
                result.mainline,
                _flag(result.cleaned_up),
                _flag(result.pushed),
                _path(result.removed_path) or "",
            )
        else:
            self._say(message, style="green")
        self.show_warnings(result.warnings)

    # -- list / prune / doctor ----------------------------------------------

    def show_list(self, result: ListResult, fmt: StatusFormat) -> None:
        if fmt == StatusFormat.JSON:
            self._print_json({
                "ok": True,
                "message": pluralize(len(result.worktrees), "worktree"),
                "repo_root": _path(result.repo_root),
                "worktrees": [
                    {
                        "path": _path(wt.path),
                        "branch": _branch(wt.branch),
                        "commit": wt.short_sha,
                        "is_main": wt.is_main,
                        "is_current": wt.is_current,
                        "is_dirty": wt.is_dirty,
                        "is_orphaned": wt.is_orphaned,
                        "is_locked": wt.is_locked,
                    }
                    for wt in result.worktrees
                ],
            })
            return

        table = Table()
        for col in LIST_COLUMNS:
            table.add_column(col.label, min_width=col.width or None, overflow="fold")
        for wt in result.worktrees:
            table.add_row(
                escape(format_worktree_name(wt)),
                wt.short_sha,
                format_dirty(wt.is_dirty, wt.is_orphaned),
                escape(str(wt.path)),
                style=CLI_COLORS.get(get_worktree_style_type(wt)),
            )
        self.console.print(table)
        if self.verbose:
            self.console.print(LEGEND_TEXT)

    def show_prune(self, report: PruneReport, fmt: StatusFormat) -> None:
        if fmt == StatusFormat.JSON:
            self._print_json(self._prune_payload(report))
            return

        self._say(f"Mainline: {report.mainline}")
        if not report.entries:
            self._say("No worktrees to check.")
            return

        if not report.executed:
            table = Table()
            for col in PRUNE_COLUMNS:
                table.add_column(col.label, min_width=col.width or None, overflow="fold")
            for entry in report.entries:
                table.add_row(
                    escape(format_branch_label(entry.branch)),
                    format_integration(entry),
                    format_dirty(entry.is_dirty),
                    escape(str(entry.path)),
                    style=CLI_COLORS.get(get_prune_style_type(entry)),
                )
            self.console.print(table)
            count = len(report.candidates)
            if count:
                self._say(f"\n{pluralize(count, 'worktree')} can be pruned. Run with --execute to remove.")
            else:
                self._say("\nNothing to prune.")
            return

        for pruned in report.pruned:
            self._say(f"  Removed {pruned.branch}", style="green")
        for skipped in report.skipped:
            self._say(f"  Skipped {format_branch_label(skipped.branch)} ({format_skip_reason(skipped.reason)})")
        for failure in report.failures:
            self.err_console.print(
                f"error: {escape(format_branch_label(failure.branch))}: {escape(failure.message)}",
                style="red",
                soft_wrap=True,
            )
        self.show_warnings(report.warnings)
        if report.pruned:
            self._say(f"\nPruned {pluralize(len(report.pruned), 'worktree')}.")
        else:
            self._say("\nNo worktrees pruned.")

    def _prune_payload(self, report: PruneReport) -> Dict[str, Any]:
        if report.executed:
            message = f"pruned {pluralize(len(report.pruned), 'worktree')}"
        else:
            message = f"{pluralize(len(report.candidates), 'worktree')} can be pruned"
        return {
            "ok": report.ok,
            "message": message,
            "repo_root": _path(report.repo_root),
            "mainline": report.mainline,
            "executed": report.executed,
            "worktrees": [
                {
                    "branch": _branch(entry.branch),
                    "path": _path(entry.path),
                    "status": entry.status.value,
                    "method": entry.method.value if entry.method else None,
                    "dirty": entry.is_dirty,
                }
                for entry in report.entries
            ],
            "prunable": len(report.candidates),
            "pruned": [
                {"branch": _branch(p.branch), "path": _path(p.path), "branch_deleted": p.branch_deleted}
                for p in report.pruned
            ],
            "skipped": [
                {"branch": _branch(s.branch), "path": _path(s.path), "reason": s.reason.value}
                for s in report.skipped
            ],
            "failures": [
                {
                    "branch": _branch(f.branch),
                    "path": _path(f.path),
                    "message": f.message,
                    "exit_code": f.exit_code,
                }
                for f in report.failures
            ],
            "warnings": list(report.warnings),
        }

    def show_doctor(self, report: DoctorReport, fmt: StatusFormat) -> None:
        issues = [d for d in report.diagnostics if d.level.value != "ok"]
        if fmt == StatusFormat.JSON:
            self._print_json({
                "ok": report.ok,
                "message": f"{pluralize(len(issues), 'issue')} found" if issues else "all worktrees healthy",
                "repo_root": _path(report.repo_root),
                "diagnostics": [
                    {"level": d.level.value, "message": d.message, "path": _path(d.path)}
                    for d in report.diagnostics
                ],
            })
            return

        for diagnostic in report.diagnostics:
            self._say(format_diagnostic(diagnostic), style=DIAGNOSTIC_COLORS[diagnostic.level.value])
