"""
revstamp

Derives build version strings from the state of a Git or Subversion working
directory, rendered through a format with {placeholders}.
"""

from ._version import __version__
from .api import VersionInfo, get_informational_version, get_short_version, get_version
from .exceptions import (
    ModifiedRepositoryError,
    RequiredVcsError,
    RevisionError,
    RevisionFormatError,
    SchemeBoundsError,
)
from .formatter import RevisionFormatter, resolve, resolve_short
from .providers import process_directory
from .revision_data import RevisionData

__author__ = "revstamp contributors"
__description__ = "Version strings from Git and Subversion working directories"
