"""Worktree lifecycle engine for wt-core."""

import os
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from wt_core.config import Config
from wt_core.exceptions import (
    AppError,
    ConflictError,
    GitFailureError,
    InvariantViolationError,
    SelectionCancelledError,
    UsageError,
)
from wt_core.models.branch import BranchName, IntegrationMethod, IntegrationStatus
from wt_core.models.results import (
    AddResult,
    DiagLevel,
    Diagnostic,
    DoctorReport,
    GoResult,
    ListResult,
    MergeResult,
    PrunedEntry,
    PruneEntry,
    PruneFailure,
    PruneReport,
    RemoveResult,
    SkippedEntry,
    SkipReason,
)
from wt_core.models.worktree import RepositoryRoot, WorktreeInfo
from wt_core.services.git import (
    BranchQueries,
    GitOperations,
    GitRunner,
    MergeDetector,
    WorktreeService,
    resolve_repo_root,
)
from wt_core.utils.logging import get_logger

logger = get_logger(__name__)

Picker = Callable[[Sequence[BranchName]], Optional[BranchName]]

NO_CANDIDATES_MESSAGE = "no worktrees to select (create one with `wt add`)"
NEEDS_TERMINAL_MESSAGE = "no branch specified; interactive mode requires a terminal"


def _contains(parent: Path, child: Path) -> bool:
    return child == parent or parent in child.parents


def most_specific_worktree(worktrees: Iterable[WorktreeInfo], cwd: Path) -> Optional[WorktreeInfo]:
    """Return the worktree with the longest canonical path containing ``cwd``.

    Linked worktrees live inside the main worktree, so several entries can
    contain cwd; the deepest one wins. Two distinct entries at the same depth
    (e.g. symlinked registrations) are ambiguous.

    Raises:
        UsageError: if the best match is not unique
    """
    cwd = cwd.resolve()
    matches = []
    for wt in worktrees:
        resolved = wt.path.resolve()
        if _contains(resolved, cwd):
            matches.append((len(resolved.parts), wt))
    if not matches:
        return None

    depth = max(d for d, _ in matches)
    best = [wt for d, wt in matches if d == depth]
    if len(best) > 1:
        raise UsageError(
            "current directory matches several worktrees: "
            + ", ".join(str(wt.path) for wt in best)
        )
    return best[0]


class WorktreeKeeper:
    """Main class for managing the worktrees of one repository."""

    def __init__(
        self,
        repo: RepositoryRoot,
        config: Optional[Config] = None,
        picker: Optional[Picker] = None,
        cwd: Optional[Union[str, Path]] = None,
        runner: Optional[GitRunner] = None,
    ):
        """Initialize WorktreeKeeper.

        Args:
            repo: Resolved repository root
            config: Configuration (defaults to ``Config()``)
            picker: Interactive selection callable; only used when
                ``config.interactive`` is set
            cwd: Directory used for worktree inference (defaults to the
                process cwd at call time)
            runner: Git process interface shared by all services
        """
        self.repo = repo
        self.config = config or Config()
        self.picker = picker
        self._cwd = Path(cwd) if cwd is not None else None

        self.runner = runner or GitRunner(repo.path)
        self.worktree_service = WorktreeService(repo, self.runner)
        self.branch_queries = BranchQueries(repo, self.runner, remote_name=self.config.remote_name)
        self.git_operations = GitOperations(repo, self.runner)
        self.merge_detector = MergeDetector(repo, self.runner)

    @classmethod
    def from_path(
        cls,
        start: Optional[Union[str, Path]] = None,
        config: Optional[Config] = None,
        picker: Optional[Picker] = None,
        cwd: Optional[Union[str, Path]] = None,
    ) -> "WorktreeKeeper":
        """Resolve the repository containing ``start`` and build a keeper for it.

        Raises:
            NotARepositoryError: if ``start`` is not inside a git repository
        """
        config = config or Config()
        if start is None:
            start = config.repo_path or cwd or os.getcwd()
        repo = resolve_repo_root(start, config.worktrees_dir_name)
        return cls(repo, config, picker=picker, cwd=cwd)

    @property
    def cwd(self) -> Path:
        if self._cwd is not None:
            return self._cwd.resolve()
        try:
            return Path(os.getcwd()).resolve()
        except FileNotFoundError as e:
            raise UsageError("current directory no longer exists") from e

    @property
    def interactive(self) -> bool:
        return self.config.interactive and self.picker is not None

    # -- add / go / list -------------------------------------------------

    def add(self, branch: BranchName, base: Optional[str] = None) -> AddResult:
        """Create ``branch`` and a worktree for it under ``.worktrees/``."""
        if self.branch_queries.branch_exists(branch):
            raise ConflictError(f"branch '{branch}' already exists")
        if base is not None and not self.branch_queries.rev_exists(base):
            raise GitFailureError(f"revision '{base}' not found")

        path = self.repo.worktree_path(branch)
        if path.exists():
            raise ConflictError(f"worktree directory already exists: {path}")

        tracking = base is None and self.branch_queries.remote_branch_exists(branch)
        if tracking:
            start_point = f"{self.config.remote_name}/{branch.value}"
        else:
            start_point = base or "HEAD"

        logger.debug(f"Adding worktree for {branch} at {path} from {start_point}")
        self.worktree_service.add_worktree(path, branch, start_point, track=tracking)
        return AddResult(
            worktree_path=path,
            branch=branch,
            repo_root=self.repo.path,
            tracking=tracking,
            base=start_point if base is not None or tracking else None,
        )

    def go(self, branch: Optional[BranchName] = None, force_pick: bool = False) -> GoResult:
        """Locate the worktree for ``branch``, selecting one when omitted."""
        worktrees = self.worktree_service.list_worktrees()
        if branch is None:
            target = self._select_for_navigation(worktrees, force_pick)
        else:
            target = self._require_worktree(worktrees, branch)
        return GoResult(worktree_path=target.path, branch=target.branch, repo_root=self.repo.path)

    def list(self) -> ListResult:
        """All registered worktrees with current and dirty markers."""
        worktrees = self.worktree_service.list_worktrees()
        try:
            current = most_specific_worktree(worktrees, self.cwd)
        except UsageError as e:
            logger.debug(f"Not marking a current worktree: {e}")
            current = None

        annotated = []
        for wt in worktrees:
            dirty = None if wt.is_orphaned else self.worktree_service.is_dirty(wt)
            annotated.append(wt.with_status(is_current=wt is current, is_dirty=dirty))
        return ListResult(repo_root=self.repo.path, worktrees=tuple(annotated))

    # -- remove / merge --------------------------------------------------

    def remove(self, branch: Optional[BranchName] = None, force: bool = False) -> RemoveResult:
        """Remove a worktree and delete its branch.

        Raises:
            InvariantViolationError: target is the main worktree
            ConflictError: worktree is dirty and ``force`` is not set
        """
        worktrees = self.worktree_service.list_worktrees()
        target = self._resolve_target(worktrees, branch, action="remove")

        branch_deleted, warnings = self._remove_worktree_and_branch(target, force=force)
        return RemoveResult(
            removed_path=target.path,
            branch=target.branch,
            repo_root=self.repo.path,
            branch_deleted=branch_deleted,
            warnings=tuple(warnings),
        )

    def merge(
        self, branch: Optional[BranchName] = None, push: bool = False, cleanup: bool = True
    ) -> MergeResult:
        """Merge a worktree's branch into mainline from the main worktree.

        Nothing is touched until the mainline, the target and the main
        worktree's state have all been checked. Once the merge commit exists,
        cleanup and push problems are reported as warnings.
        """
        worktrees = self.worktree_service.list_worktrees()
        try:
            mainline = self.branch_queries.resolve_mainline(worktrees)
        except AppError as e:
            raise InvariantViolationError(e.message) from e

        target = self._resolve_target(worktrees, branch, action="merge")
        main = next(wt for wt in worktrees if wt.is_main)
        if main.branch is None or main.branch.value != mainline:
            on = main.branch.value if main.branch is not None else "detached HEAD"
            raise InvariantViolationError(
                f"main worktree is on '{on}', expected '{mainline}'; checkout mainline first"
            )
        if self.worktree_service.is_dirty(main, include_untracked=False):
            raise ConflictError(
                "main worktree has uncommitted changes; commit or stash them before merging"
            )

        self.git_operations.merge_no_ff(target.branch, mainline)

        warnings: List[str] = []
        cleaned_up = False
        if cleanup:
            try:
                _, cleanup_warnings = self._remove_worktree_and_branch(
                    target, force=False, escalate_into=mainline
                )
                warnings.extend(cleanup_warnings)
                cleaned_up = True
            except AppError as e:
                logger.info(f"Cleanup after merge failed: {e}")
                warnings.append(f"merged, but cleanup failed: {e.message}")

        pushed = False
        if push:
            remote = self.branch_queries.remote_for(mainline)
            try:
                self.git_operations.push(remote, mainline)
                pushed = True
            except AppError as e:
                logger.info(f"Push after merge failed: {e}")
                warnings.append(f"merged, but push to {remote} failed: {e.message}")

        return MergeResult(
            branch=target.branch,
            mainline=mainline,
            repo_root=self.repo.path,
            cleaned_up=cleaned_up,
            pushed=pushed,
            removed_path=target.path if cleaned_up else None,
            warnings=tuple(warnings),
        )

    # -- prune / doctor --------------------------------------------------

    def prune(
        self, execute: bool = False, force: bool = False, mainline: Optional[str] = None
    ) -> PruneReport:
        """Report (and with ``execute`` remove) worktrees already in mainline."""
        worktrees = self.worktree_service.list_worktrees()
        if mainline is not None:
            if not self.branch_queries.rev_exists(mainline):
                raise UsageError(f"mainline branch '{mainline}' does not exist")
        else:
            mainline = self.branch_queries.resolve_mainline(worktrees)
        logger.debug(f"Pruning against mainline {mainline}")

        by_path: Dict[Path, WorktreeInfo] = {}
        entries = []
        for wt in worktrees:
            if wt.is_main:
                continue
            by_path[wt.path] = wt
            entries.append(self._classify(wt, mainline))
        logger.debug(self.merge_detector.get_merge_stats())

        if not execute:
            return PruneReport(mainline=mainline, repo_root=self.repo.path, entries=tuple(entries))

        pruned: List[PrunedEntry] = []
        skipped: List[SkippedEntry] = []
        failures: List[PruneFailure] = []
        warnings: List[str] = []
        for entry in entries:
            if entry.status == IntegrationStatus.NO_BRANCH:
                skipped.append(SkippedEntry(entry.path, entry.branch, SkipReason.NO_BRANCH))
                continue
            if entry.status == IntegrationStatus.NOT_INTEGRATED:
                skipped.append(SkippedEntry(entry.path, entry.branch, SkipReason.NOT_INTEGRATED))
                continue
            if entry.is_dirty and not force:
                skipped.append(SkippedEntry(entry.path, entry.branch, SkipReason.DIRTY))
                continue

            force_branch = force or entry.method == IntegrationMethod.REBASE
            try:
                deleted, entry_warnings = self._remove_worktree_and_branch(
                    by_path[entry.path], force=force, force_branch=force_branch
                )
            except AppError as e:
                logger.info(f"Failed to prune {entry.path}: {e}")
                failures.append(PruneFailure(entry.path, entry.branch, e.message, int(e.exit_code)))
                skipped.append(SkippedEntry(entry.path, entry.branch, SkipReason.REMOVAL_FAILED))
                continue
            pruned.append(PrunedEntry(entry.path, entry.branch, branch_deleted=deleted))
            warnings.extend(entry_warnings)

        return PruneReport(
            mainline=mainline,
            repo_root=self.repo.path,
            entries=tuple(entries),
            executed=True,
            pruned=tuple(pruned),
            skipped=tuple(skipped),
            failures=tuple(failures),
            warnings=tuple(warnings),
        )

    def _classify(self, wt: WorktreeInfo, mainline: str) -> PruneEntry:
        dirty = None if wt.is_orphaned else self.worktree_service.is_dirty(wt)
        if wt.branch is None:
            return PruneEntry(wt.path, None, IntegrationStatus.NO_BRANCH, is_dirty=dirty)
        method = self.merge_detector.detect(wt.branch, mainline)
        status = IntegrationStatus.INTEGRATED if method else IntegrationStatus.NOT_INTEGRATED
        return PruneEntry(wt.path, wt.branch, status, method=method, is_dirty=dirty)

    def doctor(self) -> DoctorReport:
        """Read-only health check of the registry and ``.worktrees/``."""
        worktrees = self.worktree_service.list_worktrees()
        diagnostics: List[Diagnostic] = []

        for wt in worktrees:
            if wt.is_main:
                if wt.branch is None:
                    diagnostics.append(
                        Diagnostic(DiagLevel.WARN, "main worktree is in detached HEAD state", wt.path)
                    )
                continue

            if wt.is_orphaned:
                diagnostics.append(Diagnostic(
                    DiagLevel.ERROR,
                    "registered worktree is missing on disk (run `git worktree prune`)",
                    wt.path,
                ))
            if wt.branch is None:
                diagnostics.append(Diagnostic(DiagLevel.WARN, "worktree has a detached HEAD", wt.path))
            if wt.is_locked:
                diagnostics.append(Diagnostic(DiagLevel.WARN, "worktree is locked", wt.path))
            if wt.branch is not None and self._is_managed(wt.path):
                expected = wt.branch.to_dir_name()
                if wt.path.name != expected:
                    diagnostics.append(Diagnostic(
                        DiagLevel.WARN,
                        f"directory name does not match branch '{wt.branch}' (expected {expected})",
                        wt.path,
                    ))

        if not self.repo.worktrees_dir.is_dir():
            diagnostics.append(Diagnostic(
                DiagLevel.OK,
                f"no {self.repo.worktrees_dir_name} directory (no worktrees created yet)",
            ))
        else:
            for directory in self.worktree_service.unregistered_directories(worktrees):
                diagnostics.append(
                    Diagnostic(DiagLevel.WARN, "directory is not a registered git worktree", directory)
                )
            if not diagnostics:
                diagnostics.append(Diagnostic(DiagLevel.OK, "all worktrees healthy"))
        return DoctorReport(repo_root=self.repo.path, diagnostics=tuple(diagnostics))

    def _is_managed(self, path: Path) -> bool:
        return path.resolve().parent == self.repo.worktrees_dir.resolve()

    # -- shared helpers --------------------------------------------------

    def _require_worktree(self, worktrees: List[WorktreeInfo], branch: BranchName) -> WorktreeInfo:
        wt = self.worktree_service.find_by_branch(worktrees, branch)
        if wt is None:
            raise UsageError(f"no worktree found for branch '{branch}'")
        return wt

    def _pick(self, candidates: List[WorktreeInfo]) -> WorktreeInfo:
        choice = self.picker([wt.branch for wt in candidates])
        if choice is None:
            raise SelectionCancelledError()
        for wt in candidates:
            if wt.branch == choice:
                return wt
        raise UsageError(f"no worktree found for branch '{choice}'")

    def _select_for_navigation(self, worktrees: List[WorktreeInfo], force_pick: bool) -> WorktreeInfo:
        candidates = [wt for wt in worktrees if not wt.is_main and wt.branch is not None]
        if not candidates:
            raise UsageError(NO_CANDIDATES_MESSAGE)
        if len(candidates) == 1 and not force_pick:
            logger.debug(f"Auto-selecting the only worktree: {candidates[0].branch}")
            return candidates[0]
        if self.interactive:
            return self._pick(candidates)
        if not force_pick:
            found = most_specific_worktree(candidates, self.cwd)
            if found is not None:
                return found
        raise UsageError(NEEDS_TERMINAL_MESSAGE)

    def _resolve_target(
        self, worktrees: List[WorktreeInfo], branch: Optional[BranchName], action: str
    ) -> WorktreeInfo:
        """Find the worktree a remove/merge acts on and check it may be touched."""
        if branch is not None:
            target = self._require_worktree(worktrees, branch)
        elif self.interactive:
            candidates = [wt for wt in worktrees if not wt.is_main and wt.branch is not None]
            if not candidates:
                raise UsageError(NO_CANDIDATES_MESSAGE)
            # Offer the worktree we're standing in first
            try:
                current = most_specific_worktree(candidates, self.cwd)
            except UsageError:
                current = None
            if current is not None:
                candidates.remove(current)
                candidates.insert(0, current)
            target = self._pick(candidates)
        else:
            target = most_specific_worktree(worktrees, self.cwd)
            if target is None:
                raise UsageError(NEEDS_TERMINAL_MESSAGE)

        if target.is_main:
            raise InvariantViolationError(f"refusing to {action} the main worktree")
        if target.branch is None:
            raise UsageError(f"worktree at {target.path} has a detached HEAD; nothing to {action}")
        return target

    def _remove_worktree_and_branch(
        self,
        wt: WorktreeInfo,
        force: bool,
        force_branch: Optional[bool] = None,
        escalate_into: Optional[str] = None,
    ) -> Tuple[bool, List[str]]:
        """Remove ``wt`` and then its branch.

        Args:
            wt: Worktree to remove (never the main worktree)
            force: Remove even with uncommitted changes
            force_branch: Delete the branch with ``-D`` (defaults to ``force``)
            escalate_into: Retry with ``-D`` when ``-d`` refuses but the branch
                is integrated into this mainline

        Returns:
            (branch_deleted, warnings)
        """
        if force_branch is None:
            force_branch = force

        # Re-read right before the destructive step
        if not force and self.worktree_service.is_dirty(wt):
            raise ConflictError(
                f"worktree for '{wt.branch}' has uncommitted changes; use --force to remove anyway"
            )

        self.worktree_service.remove_worktree(wt.path, force=force)

        try:
            self._delete_branch(wt.branch, force_branch, escalate_into)
        except AppError as e:
            logger.info(f"Could not delete branch {wt.branch}: {e}")
            return False, [f"worktree removed but branch '{wt.branch}' was not deleted: {e.message}"]
        return True, []

    def _delete_branch(self, branch: BranchName, force: bool, escalate_into: Optional[str]) -> None:
        try:
            self.branch_queries.delete_branch(branch, force=force)
        except ConflictError:
            # -d refuses branches that aren't merged into HEAD in the git sense
            if force or escalate_into is None or not self.merge_detector.is_integrated(branch, escalate_into):
                raise
            logger.debug(f"Branch {branch} is integrated into {escalate_into}; retrying with -D")
            self.branch_queries.delete_branch(branch, force=True)
