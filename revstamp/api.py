"""
Version API.

Convenience functions for build scripts: analyse a project directory and
return its version strings in one call.
"""

import os
import re

from datetime import datetime
from typing import Callable, Optional

from .exceptions import ModifiedRepositoryError
from .formatter import RevisionFormatter
from .logging_config import RevisionLogger, get_default_logger
from .process import DEFAULT_COMMAND_TIMEOUT
from .providers import get_vcs_providers, process_directory

DEFAULT_TAG_MATCH = 'v[0-9]*'


class VersionInfo:
    """
    Resolved version strings of a project.

    The dotted-numeric ``version`` is resolved on first access, so formats
    without a numeric prefix still give an informational version and a
    copyright. Accessing ``version`` raises RevisionFormatError for them.
    """

    def __init__(self, version: Optional[str] = None, informational_version: str = '',
                 copyright: str = '', resolve_short: Optional[Callable[[], str]] = None):
        self._version = version
        self._resolve_short = resolve_short
        self.informational_version = informational_version
        self.copyright = copyright

    @property
    def version(self) -> str:
        if self._version is None:
            self._version = self._resolve_short() if self._resolve_short else ''
        return self._version

    def __eq__(self, other) -> bool:
        if not isinstance(other, VersionInfo):
            return NotImplemented
        return (self.version, self.informational_version, self.copyright) == \
            (other.version, other.informational_version, other.copyright)

    def __repr__(self) -> str:
        version = self._version if self._version is not None else '<unresolved>'
        return (f"VersionInfo(version={version!r}, informational_version={self.informational_version!r}, "
                f"copyright={self.copyright!r})")


def get_version(project_dir: Optional[str] = None,
                required_vcs: Optional[str] = None,
                revision_format: Optional[str] = None,
                tag_match: str = DEFAULT_TAG_MATCH,
                remove_tag_v: bool = True,
                copyright: str = '',
                build_time: Optional[datetime] = None,
                configuration_name: Optional[str] = None,
                error_on_modified_pattern: Optional[str] = None,
                log: Optional[RevisionLogger] = None,
                timeout: float = DEFAULT_COMMAND_TIMEOUT) -> VersionInfo:
    """
    Determine the version of a project from its working directory.

    Args:
        project_dir: Directory to analyse (defaults to the current directory)
        required_vcs: Name of the VCS that must be used ("git" or "svn")
        revision_format: Revision format; a default based on the revision data if empty
        tag_match: Glob pattern for tag names to consider
        remove_tag_v: Strip a leading "v" followed by a digit from tag names
        copyright: Copyright text, may contain placeholders like {copyright:2015-}
        build_time: Time of the build (defaults to now)
        configuration_name: Name of the build configuration, e.g. "Release"
        error_on_modified_pattern: Regex; a modified working copy is an error when
            it matches the configuration name
        log: Logger for diagnostic output
        timeout: Seconds to wait for each VCS command

    Returns:
        VersionInfo: Informational version, copyright and the lazily resolved short version

    Raises:
        RequiredVcsError: If the required VCS cannot process the directory
        ModifiedRepositoryError: If the working copy is modified and the configuration forbids it
        RevisionFormatError: If the revision format cannot be resolved (for the short
            version only when ``version`` is accessed)
    """
    log = log or get_default_logger()
    if not project_dir:
        project_dir = os.getcwd()
    if build_time is None:
        build_time = datetime.now().astimezone()

    data = process_directory(
        project_dir,
        required_vcs=required_vcs,
        tag_match=tag_match,
        log=log,
        providers=get_vcs_providers(log, timeout),
    )

    if (error_on_modified_pattern and data.is_modified
            and re.search(error_on_modified_pattern, configuration_name or '')):
        log.error(f"The working copy is modified, build configuration {configuration_name} does not allow it.")
        raise ModifiedRepositoryError(configuration_name or '', error_on_modified_pattern)

    if not revision_format:
        revision_format = data.default_revision_format(log)

    formatter = RevisionFormatter(data, build_time, remove_tag_v)
    return VersionInfo(
        resolve_short=lambda: formatter.resolve_short(revision_format),
        informational_version=formatter.resolve(revision_format),
        copyright=formatter.resolve(copyright or ''),
    )


def get_informational_version(project_dir: Optional[str] = None, **kwargs) -> str:
    """Return the full resolved version of a project. See get_version for the arguments."""
    return get_version(project_dir, **kwargs).informational_version


def get_short_version(project_dir: Optional[str] = None, **kwargs) -> str:
    """Return the dotted-numeric version of a project. See get_version for the arguments."""
    return get_version(project_dir, **kwargs).version
