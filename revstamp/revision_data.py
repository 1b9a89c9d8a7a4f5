"""
Revision data model.

A RevisionData instance holds the facts collected about one working
directory: commit identity, times, people, branch and most recent tag.
"""

import re
from dataclasses import dataclass, fields, replace
from datetime import datetime, timezone
from typing import Optional

from .logging_config import RevisionLogger

# Stands in for "no time known"; its year is never plausible as a commit year
UNKNOWN_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

ZERO_COMMIT_HASH = '0' * 40

_STRING_FIELDS = (
    'commit_hash', 'repository_url', 'committer_name', 'committer_email',
    'author_name', 'author_email', 'branch', 'tag',
)


@dataclass(frozen=True)
class RevisionData:
    """Data about the revision checked out in a working directory."""

    commit_hash: str = ''
    revision_number: int = 0
    commit_time: datetime = UNKNOWN_TIME
    author_time: datetime = UNKNOWN_TIME
    is_modified: bool = False
    is_mixed: bool = False
    repository_url: str = ''
    committer_name: str = ''
    committer_email: str = ''
    author_name: str = ''
    author_email: str = ''
    branch: str = ''
    tag: str = ''
    commits_after_tag: int = 0
    vcs_provider: Optional[str] = None

    @classmethod
    def dummy(cls, now: Optional[datetime] = None) -> 'RevisionData':
        """Create the placeholder data used when no VCS could process the directory."""
        if now is None:
            now = datetime.now().astimezone()
        return cls(
            commit_hash=ZERO_COMMIT_HASH,
            commit_time=now,
            is_modified=False,
            revision_number=0,
        )

    def normalize(self) -> 'RevisionData':
        """Return a copy in which no string field is None."""
        missing = {name: '' for name in _STRING_FIELDS if getattr(self, name) is None}
        if not missing:
            return self
        return replace(self, **missing)

    def dump_data(self, log: RevisionLogger) -> None:
        """Write all revision data to the trace log."""
        log.trace("Revision data:")
        for field in sorted(fields(self), key=lambda f: f.name):
            value = getattr(self, field.name)
            if isinstance(value, datetime):
                value = value.strftime('%Y-%m-%d %H:%M:%S %z')
            if field.name == 'tag':
                value = f"{self.tag} + {self.commits_after_tag}"
            elif field.name == 'commits_after_tag':
                continue
            log.trace(f"  {field.name}: {value}")

    def has_commit_hash(self) -> bool:
        """Check whether a real (non-zero) commit hash is known."""
        return bool(self.commit_hash) and not re.match(r'^0+$', self.commit_hash)

    def default_revision_format(self, log: Optional[RevisionLogger] = None) -> str:
        """
        Return a default revision format based on the available data.

        Args:
            log: Logger for trace output (optional)

        Returns:
            str: The default revision format
        """
        if self.has_commit_hash():
            if log:
                log.trace("No format available, using default format for commit hash.")
            return "{semvertag}+{chash:7}"
        if self.revision_number > 0:
            if log:
                log.trace("No format available, using default format for revision number.")
            return "0.0.{revnum}"

        if log:
            log.trace("No format available, using empty format.")
        return "0.0.1"
