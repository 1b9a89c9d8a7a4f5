"""
Subversion provider.

Uses svnversion for the revision number and the working copy state, and
svn info for repository URL, branch, last author and date.
"""

import re
from dataclasses import replace
from datetime import datetime

from ..revision_data import RevisionData
from ..utils import find_executable, get_exact_path
from .base import VcsProvider

SVN_TIME_FORMAT = '%Y-%m-%d %H:%M:%S %z'

# Possible output:
#   1234          revision 1234
#   1100:1234     mixed revisions 1100 to 1234
#   1234M         revision 1234, modified
#   1100:1234MP   mixed revisions, modified and partial
_SVNVERSION_RE = re.compile(r'^([0-9]+:)?([0-9]+)(.*)')

_ROOT_PATH_RE = re.compile(r'^Working Copy Root Path: (.+)')
_RELATIVE_URL_RE = re.compile(r'^Relative URL: \^(.+)')
_REPOSITORY_ROOT_RE = re.compile(r'^Repository Root: (.+)')
_LAST_AUTHOR_RE = re.compile(r'^Last Changed Author: (.+)')
_LAST_DATE_RE = re.compile(
    r'^Last Changed Date: ([0-9]{4}-[0-9]{2}-[0-9]{2} [0-9]{2}:[0-9]{2}:[0-9]{2} [+-][0-9]{4})'
)


class SubversionProvider(VcsProvider):
    """Reads revision data from a Subversion working copy."""

    name = 'svn'
    directory_marker = '.svn'

    svn_exec = None
    svnversion_exec = None

    def check_environment(self) -> bool:
        self.log.trace("Subversion environment check...")
        self.svn_exec = find_executable('svn')
        if self.svn_exec is None:
            self.log.warning("  svn executable not found.")
            return False

        self.svnversion_exec = find_executable('svnversion')
        if self.svnversion_exec is None:
            self.log.warning("  svnversion executable not found.")
            return False
        return True

    def process_directory(self, path: str, tag_match: str = '') -> RevisionData:
        svn = self.svn_exec or 'svn'
        svnversion = self.svnversion_exec or 'svnversion'
        data = RevisionData(vcs_provider=self.name)

        # svn expects the exact casing of the path on case-insensitive filesystems
        exact_path = get_exact_path(path)
        if exact_path != path:
            self.log.warning(f"Corrected path to: {exact_path}")
        path = exact_path

        # Output of failed or killed commands is never parsed
        result = self._run([svnversion], path)
        for line in result.lines if result.ok else []:
            match = _SVNVERSION_RE.match(line)
            if match:
                data = replace(
                    data,
                    is_mixed=match.group(1) is not None,
                    revision_number=int(match.group(2)),
                    is_modified=bool(match.group(3).strip()),
                )
                break

        if data.revision_number == 0:
            return data

        result = self._run([svn, 'status'], path)
        if result.ok and any(line.strip() for line in result.lines):
            data = replace(data, is_modified=True)

        result = self._run([svn, 'info', '--revision', str(data.revision_number)], path)
        if not result.ok:
            return data
        return self._parse_info(data, result.lines, path)

    def _parse_info(self, data: RevisionData, lines, path: str) -> RevisionData:
        # This describes the last update of the given subdirectory, which can
        # differ from the svnversion revision if the working copy was only
        # partially updated.
        changes = {}
        root_path = None
        for line in lines:
            match = _ROOT_PATH_RE.match(line)
            if match:
                root_path = match.group(1).strip()

            match = _RELATIVE_URL_RE.match(line)
            if match:
                changes['branch'] = self._branch_from_relative_url(match.group(1), root_path, path)

            # The repository root, "URL" may point into a subdirectory
            match = _REPOSITORY_ROOT_RE.match(line)
            if match:
                changes['repository_url'] = match.group(1).strip()

            match = _LAST_AUTHOR_RE.match(line)
            if match:
                changes['committer_name'] = match.group(1).strip()

            match = _LAST_DATE_RE.match(line)
            if match:
                try:
                    changes['commit_time'] = datetime.strptime(match.group(1), SVN_TIME_FORMAT)
                except ValueError:
                    self.log.warning(f"Commit time could not be parsed: {match.group(1)}")
        return replace(data, **changes)

    @staticmethod
    def _branch_from_relative_url(relative_url: str, root_path, path: str) -> str:
        """
        Derive the branch from the relative URL of a standard repository layout.

        "^/branches/feature/src" checked out at "<root>/src" gives "feature".
        """
        branch = relative_url.strip().lstrip('/')
        if branch.startswith('branches/'):
            branch = branch[len('branches/'):]

        # Cut off the subdirectory below the working copy root
        if root_path is not None and path.lower().startswith(root_path.lower()):
            subdir_length = len(path) - len(root_path)
            branch = branch[:max(len(branch) - subdir_length, 0)]
        return branch
