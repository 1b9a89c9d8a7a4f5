"""
VCS provider registry and selection.
"""

import os
from datetime import datetime
from typing import List, Optional, Sequence

from ..exceptions import RequiredVcsError
from ..logging_config import RevisionLogger, get_default_logger
from ..process import DEFAULT_COMMAND_TIMEOUT
from ..revision_data import RevisionData
from .base import VcsProvider
from .ci import BranchResolver, GitLabCiBranchResolver
from .git import GitProvider
from .subversion import SubversionProvider

# Registered providers in the order they are tried
PROVIDER_CLASSES = (GitProvider, SubversionProvider)

PROVIDER_NAMES = tuple(cls.name for cls in PROVIDER_CLASSES)

__all__ = [
    'BranchResolver',
    'GitLabCiBranchResolver',
    'GitProvider',
    'PROVIDER_NAMES',
    'SubversionProvider',
    'VcsProvider',
    'get_vcs_providers',
    'process_directory',
]


def get_vcs_providers(log: Optional[RevisionLogger] = None,
                      timeout: float = DEFAULT_COMMAND_TIMEOUT) -> List[VcsProvider]:
    """Create one instance of every registered provider."""
    return [cls(log, timeout) for cls in PROVIDER_CLASSES]


def process_directory(path: str, required_vcs: Optional[str] = None, tag_match: str = '',
                      log: Optional[RevisionLogger] = None,
                      providers: Optional[Sequence[VcsProvider]] = None,
                      now: Optional[datetime] = None) -> RevisionData:
    """
    Collect revision data for a directory with the first matching provider.

    Each provider (restricted to ``required_vcs`` if given) is asked whether
    its tools are installed and whether the directory is part of one of its
    working directories. The first one to answer yes processes the directory.

    Args:
        path: The directory to process
        required_vcs: Name of the only provider to consider (e.g. "git"), case-insensitive
        tag_match: Glob pattern for tag names (Git only)
        log: Logger for diagnostic output
        providers: Providers to try (defaults to all registered providers)
        now: Commit time of the placeholder data if no provider applies

    Returns:
        RevisionData: Normalized revision data

    Raises:
        RequiredVcsError: If ``required_vcs`` is set but that VCS cannot process the directory
    """
    log = log or get_default_logger()
    if providers is None:
        providers = get_vcs_providers(log)
    path = os.path.abspath(path)

    log.trace("Processing directory...")
    data = None
    for provider in providers:
        log.trace(f"Found VCS provider: {provider.name}")
        if required_vcs and provider.name.lower() != required_vcs.lower():
            log.trace("Provider is not what is required, skipping.")
            continue
        if not provider.check_environment():
            continue
        log.success("Provider can be executed in this environment.")
        found, root_path = provider.check_directory(path)
        if not found:
            continue
        log.info(f"Processing {provider.name} working directory {root_path}")
        data = provider.process_directory(path, tag_match)
        break

    if data is None:
        if required_vcs:
            log.error(f'Required VCS "{required_vcs}" not present.')
            raise RequiredVcsError(required_vcs, path)
        log.warning("No VCS provider could process the directory, using placeholder data.")
        data = RevisionData.dummy(now)

    data = data.normalize()
    data.dump_data(log)
    return data
