"""
Git provider.

Runs git in the working directory to read the last commit, local
modifications, the branch and the most recent tag.
"""

import os
import re
from dataclasses import replace
from datetime import datetime
from typing import Mapping, Optional, Sequence

from ..logging_config import RevisionLogger
from ..process import DEFAULT_COMMAND_TIMEOUT
from ..revision_data import RevisionData
from ..utils import find_executable
from .base import VcsProvider
from .ci import BranchResolver, get_default_branch_resolvers

GIT_LOG_FORMAT = '%H %ci %ai%n%cN%n%cE%n%aN%n%aE'

GIT_TIME_FORMAT = '%Y-%m-%d %H:%M:%S %z'

_LOG_HEADER_RE = re.compile(
    r'^([0-9a-fA-F]{40}) ([0-9-]{10} [0-9:]{8} [0-9+-]{5}) ([0-9-]{10} [0-9:]{8} [0-9+-]{5})'
)
_DESCRIBE_RE = re.compile(r'^(.*)-([0-9]+)-g[0-9a-fA-F]+$')


def parse_git_time(value: str) -> Optional[datetime]:
    """Parse a git ISO-like date such as '2024-03-31 14:05:09 +0200'."""
    try:
        return datetime.strptime(value, GIT_TIME_FORMAT)
    except ValueError:
        return None


class GitProvider(VcsProvider):
    """
    Reads revision data from a Git working directory.

    Args:
        log: Logger for diagnostic output
        timeout: Seconds to wait for each git command
        branch_resolvers: CI branch resolvers to apply (defaults to the registered ones)
        environ: Environment read by the branch resolvers (defaults to os.environ)
    """

    name = 'git'
    directory_marker = '.git'

    def __init__(self, log: Optional[RevisionLogger] = None, timeout: float = DEFAULT_COMMAND_TIMEOUT,
                 branch_resolvers: Optional[Sequence[BranchResolver]] = None,
                 environ: Optional[Mapping[str, str]] = None):
        super().__init__(log, timeout)
        self.branch_resolvers = (
            list(branch_resolvers) if branch_resolvers is not None
            else get_default_branch_resolvers(self.log)
        )
        self.environ = environ
        self.git_exec = None

    def check_environment(self) -> bool:
        self.log.trace("Git environment check...")
        self.git_exec = find_executable('git')
        if self.git_exec is None:
            self.log.warning("  git executable not found.")
            return False
        self.log.success(f"Found git at {self.git_exec}")
        return True

    def process_directory(self, path: str, tag_match: str = '') -> RevisionData:
        git = self.git_exec or 'git'
        data = RevisionData(vcs_provider=self.name)

        # Commit hash, times and people of the last commit
        result = self._run([git, 'log', '-n', '1', f'--format=format:{GIT_LOG_FORMAT}'], path)
        if result.ok:
            data = self._parse_log(data, result.lines)

        if not data.commit_hash:
            return data

        # Working directory state
        result = self._run([git, 'status', '--porcelain'], path)
        is_modified = result.ok and any(line.strip() for line in result.lines)
        data = replace(data, is_modified=is_modified)

        # Current branch
        result = self._run([git, 'rev-parse', '--abbrev-ref', 'HEAD'], path)
        if result.ok and result.first_line is not None:
            data = replace(data, branch=self.resolve_branch(result.first_line.strip()))

        # Most recent matching tag on the first-parent line
        args = [git, 'describe', '--tags', '--first-parent', '--long']
        if tag_match and tag_match.strip() and tag_match != '*':
            args += ['--match', tag_match]
        result = self._run(args, path)
        if result.ok and result.first_line is not None:
            match = _DESCRIBE_RE.match(result.first_line.strip())
            if match:
                data = replace(data, tag=match.group(1).strip(), commits_after_tag=int(match.group(2)))

        # Linear revision number of the current branch
        result = self._run([git, 'rev-list', '--first-parent', '--count', 'HEAD'], path)
        if result.ok and result.first_line is not None:
            count = result.first_line.strip()
            if re.fullmatch(r'[0-9]+', count):
                data = replace(data, revision_number=int(count))
            else:
                self.log.warning("Revision count could not be parsed")

        return data

    def resolve_branch(self, branch: str) -> str:
        """Apply the first CI branch resolver that recognizes the environment."""
        environ = self.environ if self.environ is not None else os.environ
        for resolver in self.branch_resolvers:
            resolved = resolver.resolve(branch, environ)
            if resolved is not None:
                return resolved
        return branch

    def _parse_log(self, data: RevisionData, lines) -> RevisionData:
        if not lines:
            return data

        changes = {}
        match = _LOG_HEADER_RE.match(lines[0])
        if match:
            commit_time = parse_git_time(match.group(2))
            author_time = parse_git_time(match.group(3))
            if commit_time is not None and author_time is not None:
                changes.update(commit_hash=match.group(1), commit_time=commit_time, author_time=author_time)
            else:
                self.log.warning(f"Commit time could not be parsed: {lines[0]}")

        people = ('committer_name', 'committer_email', 'author_name', 'author_email')
        for field_name, line in zip(people, lines[1:]):
            changes[field_name] = line.strip()
        return replace(data, **changes)
