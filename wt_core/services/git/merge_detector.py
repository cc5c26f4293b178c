"""Integration detection service for wt-core."""

from typing import Optional

from wt_core.exceptions import GitFailureError
from wt_core.models.branch import BranchName, IntegrationMethod
from wt_core.models.worktree import RepositoryRoot
from wt_core.services.git.runner import GitRunner
from wt_core.utils.logging import get_logger

logger = get_logger(__name__)


class MergeDetector:
    """Service for detecting if a branch's work is already in mainline.

    Two independent checks, either one sufficient:

    1. Ancestry: the branch tip is reachable from mainline (fast-forward or
       ordinary merge).
    2. Patch equivalence: every commit unique to the branch since the merge
       base has a patch-id twin among the commits unique to mainline
       (rebase or cherry-pick merges, where hashes differ).
    """

    def __init__(self, repo: RepositoryRoot, runner: Optional[GitRunner] = None):
        """Initialize the merge detector.

        Args:
            repo: Resolved repository root
            runner: Git process interface
        """
        self.repo = repo
        self.runner = runner or GitRunner(repo.path)
        self.merge_detection_stats = {
            IntegrationMethod.MERGED: 0,
            IntegrationMethod.REBASE: 0,
        }

        logger.debug("Merge detector initialized")

    def get_merge_stats(self) -> str:
        """Get a summary of which methods detected integrations."""
        total = sum(self.merge_detection_stats.values())
        if total == 0:
            return "No integrations detected"

        method_names = {
            IntegrationMethod.MERGED: "Ancestry",
            IntegrationMethod.REBASE: "Patch-id",
        }
        stats = [
            f"{method_names[method]}: {count}"
            for method, count in self.merge_detection_stats.items()
            if count > 0
        ]
        return f"Integrations detected by: {', '.join(stats)}"

    def _require_commit(self, rev: str, role: str) -> None:
        if not self.runner.succeeds(["rev-parse", "--verify", "--quiet", f"{rev}^{{commit}}"]):
            raise GitFailureError(f"cannot resolve {role} '{rev}'")

    def detect(self, branch: BranchName, mainline: str) -> Optional[IntegrationMethod]:
        """Return how ``branch`` was integrated into ``mainline``, or None.

        Raises:
            GitFailureError: if mainline or the branch cannot be resolved
        """
        self._require_commit(mainline, "mainline")
        self._require_commit(branch.value, "branch")

        if self._check_ancestor(branch, mainline):
            self.merge_detection_stats[IntegrationMethod.MERGED] += 1
            return IntegrationMethod.MERGED

        if self._check_patch_equivalence(branch, mainline):
            self.merge_detection_stats[IntegrationMethod.REBASE] += 1
            return IntegrationMethod.REBASE

        logger.debug(f"Branch {branch} is not integrated into {mainline}")
        return None

    def is_integrated(self, branch: BranchName, mainline: str) -> bool:
        """Check if ``branch`` is fully captured by ``mainline``."""
        return self.detect(branch, mainline) is not None

    def _check_ancestor(self, branch: BranchName, mainline: str) -> bool:
        """Method 1: Check if branch tip is an ancestor of mainline."""
        logger.debug("[Method 1] Checking if branch tip is ancestor...")
        result = self.runner.run_status(["merge-base", "--is-ancestor", branch.value, mainline])
        if result.status == 0:
            logger.debug(f"[Method 1] Branch {branch} is merged (tip is ancestor)")
            return True
        if result.status == 1:
            return False
        raise GitFailureError(
            result.stderr or f"git merge-base failed with exit code {result.status}",
            command="git merge-base --is-ancestor",
            status=result.status,
        )

    def _check_patch_equivalence(self, branch: BranchName, mainline: str) -> bool:
        """Method 2: Compare patch-ids of commits unique to each side.

        ``git cherry <mainline> <branch>`` lists the branch's unique commits,
        prefixed ``-`` when mainline already holds an equivalent patch and
        ``+`` otherwise.
        """
        logger.debug("[Method 2] Comparing patch-ids against mainline...")
        output = self.runner.run(["cherry", mainline, branch.value])
        lines = [line for line in output.splitlines() if line.strip()]
        if not lines:
            return False
        if all(line.startswith("-") for line in lines):
            logger.debug(f"[Method 2] Branch {branch} is merged ({len(lines)} equivalent patches)")
            return True
        return False
