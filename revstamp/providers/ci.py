"""
Branch name detection on CI servers.

CI runners often check out a detached HEAD, so ``git rev-parse --abbrev-ref
HEAD`` reports "HEAD" instead of the branch being built. A resolver looks at
the CI environment and returns the real branch name.
"""

from typing import Mapping, Optional, Protocol

from ..logging_config import RevisionLogger


class BranchResolver(Protocol):
    """Strategy to correct the branch name reported by git."""

    def resolve(self, branch: str, environ: Mapping[str, str]) -> Optional[str]:
        """Return the corrected branch name, or None if this resolver does not apply."""
        ...


class GitLabCiBranchResolver:
    """
    Reads the branch name from GitLab CI variables.

    Applies when git reports "HEAD" (default checkout of the runner) or
    "heads/..." (after an explicit ``git checkout -B``) and CI_SERVER is "yes".
    Tag pipelines have no branch, which results in an empty name.
    """

    def __init__(self, log: Optional[RevisionLogger] = None):
        self.log = log

    def resolve(self, branch: str, environ: Mapping[str, str]) -> Optional[str]:
        if not (branch == 'HEAD' or branch.startswith('heads/')):
            return None
        if environ.get('CI_SERVER') != 'yes':
            return None

        # GitLab 9 and later
        if environ.get('CI_COMMIT_REF_NAME') and not environ.get('CI_COMMIT_TAG'):
            self._trace("Reading branch name from CI environment variable: CI_COMMIT_REF_NAME")
            return environ['CI_COMMIT_REF_NAME']
        # GitLab 8
        if environ.get('CI_BUILD_REF_NAME') and not environ.get('CI_BUILD_TAG'):
            self._trace("Reading branch name from CI environment variable: CI_BUILD_REF_NAME")
            return environ['CI_BUILD_REF_NAME']

        self._trace("No branch name available in CI environment")
        return ''

    def _trace(self, message: str) -> None:
        if self.log:
            self.log.trace(message)


def get_default_branch_resolvers(log: Optional[RevisionLogger] = None):
    """Return the registered CI branch resolvers in the order they are tried."""
    return [GitLabCiBranchResolver(log)]
